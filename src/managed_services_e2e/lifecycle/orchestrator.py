"""Resource lifecycle: create-or-reuse, wait for ready, delete, wait for gone."""

from __future__ import annotations

from typing import Any

import structlog

from managed_services_e2e.client.errors import ResourceNotFound
from managed_services_e2e.config.models import KindTimings, PollConfig
from managed_services_e2e.lifecycle.adapters import ResourceAdapter, to_handle
from managed_services_e2e.lifecycle.conflict import ConflictOutcome, try_create
from managed_services_e2e.lifecycle.errors import ResourceTimeoutError
from managed_services_e2e.lifecycle.models import ResourceHandle
from managed_services_e2e.lifecycle.observer import (
    wait_until_deleted,
    wait_until_ready,
)
from managed_services_e2e.polling.outcome import Failed, Succeeded, TimedOut

logger = structlog.get_logger()


class ResourceLifecycle:
    """Lifecycle operations for one resource kind.

    Names are not unique on the remote side: lookups by name may return
    several resources. ``apply_or_reuse`` picks the first one and
    ``delete_by_name_if_exists`` deletes all of them.
    """

    def __init__(self, adapter: ResourceAdapter, timings: KindTimings) -> None:
        self._adapter = adapter
        self._timings = timings

    @property
    def adapter(self) -> ResourceAdapter:
        return self._adapter

    @property
    def timings(self) -> KindTimings:
        return self._timings

    @property
    def _kind(self) -> str:
        return self._adapter.kind.value

    async def apply_or_reuse(
        self, payload: dict[str, Any], *, poll: PollConfig | None = None
    ) -> ResourceHandle:
        """Return the existing resource named like *payload* or create it and wait.

        At most one create request is issued per call.
        """
        name = payload["name"]
        existing = await self._adapter.list_by_name(name)
        if existing:
            logger.warning(
                f"{self._kind}.already_exists",
                name=name,
                id=existing[0].get("id"),
                matches=len(existing),
            )
            return to_handle(self._adapter.kind, existing[0])

        logger.info(f"{self._kind}.create", name=name)
        raw = await self._adapter.create(payload)
        ready = await self.wait_until_ready(str(raw["id"]), poll=poll)
        # Fields only returned by the create call (client secrets) are kept.
        handle = to_handle(self._adapter.kind, {**raw, **ready.raw})
        logger.info(f"{self._kind}.ready", name=name, id=handle.id)
        return handle

    async def try_create(self, payload: dict[str, Any]) -> ConflictOutcome:
        return await try_create(self._adapter, payload)

    async def get_by_name(self, name: str) -> ResourceHandle | None:
        matches = await self._adapter.list_by_name(name)
        if not matches:
            return None
        return to_handle(self._adapter.kind, matches[0])

    async def wait_until_ready(
        self, resource_id: str, *, poll: PollConfig | None = None
    ) -> ResourceHandle:
        """Block until the resource is ready and return its final handle."""
        outcome = await wait_until_ready(
            self._adapter, resource_id, poll or self._timings.ready
        )
        match outcome:
            case Succeeded(value=snap) if snap is not None:
                return to_handle(self._adapter.kind, snap.raw)
            case TimedOut(value=snap, elapsed=elapsed, last_error=last_error):
                raise ResourceTimeoutError(
                    self._adapter.kind, resource_id, "ready", elapsed, snap, last_error
                )
            case Failed(error=error):
                raise error
        raise RuntimeError(f"unexpected readiness outcome for {resource_id}: {outcome!r}")

    async def wait_until_deleted(
        self, resource_id: str, *, poll: PollConfig | None = None
    ) -> None:
        """Block until fetching the resource reports not found."""
        outcome = await wait_until_deleted(
            self._adapter, resource_id, poll or self._timings.deleted
        )
        match outcome:
            case Succeeded():
                logger.info(f"{self._kind}.deleted", id=resource_id)
                return
            case TimedOut(value=snap, elapsed=elapsed, last_error=last_error):
                raise ResourceTimeoutError(
                    self._adapter.kind, resource_id, "deleted", elapsed, snap, last_error
                )
            case Failed(error=error):
                raise error

    async def delete(self, resource_id: str) -> bool:
        """Delete one resource; returns False if it was already gone."""
        logger.info(f"{self._kind}.delete", id=resource_id)
        try:
            await self._adapter.delete(resource_id)
        except ResourceNotFound:
            logger.info(f"{self._kind}.already_deleted", id=resource_id)
            return False
        return True

    async def delete_by_name_if_exists(self, name: str) -> list[str]:
        """Delete every resource called *name*; returns the ids deleted."""
        matches = await self._adapter.list_by_name(name)
        if not matches:
            logger.warning(f"{self._kind}.not_found", name=name)
            return []

        deleted: list[str] = []
        for raw in matches:
            resource_id = str(raw["id"])
            if await self.delete(resource_id):
                deleted.append(resource_id)
        return deleted
