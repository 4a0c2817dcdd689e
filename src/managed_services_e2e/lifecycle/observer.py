"""Readiness and deletion waits built on the condition poller."""

from __future__ import annotations

from typing import Any

import structlog

from managed_services_e2e.client.errors import ResourceNotFound
from managed_services_e2e.config.models import PollConfig
from managed_services_e2e.lifecycle.adapters import ResourceAdapter
from managed_services_e2e.lifecycle.models import Readiness, StatusSnapshot
from managed_services_e2e.polling.outcome import (
    PollOutcome,
    ResourceFailedError,
    TransientObservationError,
)
from managed_services_e2e.polling.poller import wait_for

logger = structlog.get_logger()

# Status reported for a resource the remote system no longer knows about.
GONE = "gone"


def snapshot(adapter: ResourceAdapter, raw: dict[str, Any]) -> StatusSnapshot:
    return StatusSnapshot(status=adapter.status_of(raw), raw=raw)


async def wait_until_ready(
    adapter: ResourceAdapter,
    resource_id: str,
    poll: PollConfig,
) -> PollOutcome[StatusSnapshot]:
    """Poll until the resource classifies as ready.

    A 404 is read as "not visible yet" until the last attempt, where it ends
    the session as failed. A failed status ends the session immediately.
    """
    kind = adapter.kind.value

    async def is_ready(last: bool) -> tuple[bool, StatusSnapshot | None]:
        try:
            raw = await adapter.fetch(resource_id)
        except ResourceNotFound as exc:
            if last:
                raise
            raise TransientObservationError(f"{kind} {resource_id} not found yet") from exc

        snap = snapshot(adapter, raw)
        logger.info(f"{kind}.status", id=resource_id, status=snap.status)
        if last:
            logger.warning(f"{kind}.last_response", id=resource_id, raw=raw)

        readiness = adapter.classify(raw)
        if readiness is Readiness.FAILED:
            raise ResourceFailedError(
                f"{kind} {resource_id} reached status '{snap.status}': {raw}"
            )
        return readiness is Readiness.READY, snap

    return await wait_for(
        f"{kind} {resource_id} to be ready",
        poll.interval_seconds,
        poll.timeout_seconds,
        is_ready,
    )


async def wait_until_deleted(
    adapter: ResourceAdapter,
    resource_id: str,
    poll: PollConfig,
) -> PollOutcome[StatusSnapshot]:
    """Poll until fetching the resource reports not found.

    Any other fetch error is retried until the budget runs out.
    """
    kind = adapter.kind.value

    async def is_deleted(last: bool) -> tuple[bool, StatusSnapshot | None]:
        try:
            raw = await adapter.fetch(resource_id)
        except ResourceNotFound:
            return True, StatusSnapshot(status=GONE)
        except Exception as exc:
            raise TransientObservationError(
                f"fetching {kind} {resource_id} failed: {exc}"
            ) from exc

        snap = snapshot(adapter, raw)
        logger.debug(f"{kind}.still_present", id=resource_id, status=snap.status)
        if last:
            logger.warning(f"{kind}.last_response", id=resource_id, raw=raw)
        return False, snap

    return await wait_for(
        f"{kind} {resource_id} to be deleted",
        poll.interval_seconds,
        poll.timeout_seconds,
        is_deleted,
    )
