"""Create calls that treat "name already taken" as an expected outcome."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from managed_services_e2e.client.errors import ResourceConflict
from managed_services_e2e.lifecycle.adapters import ResourceAdapter, to_handle
from managed_services_e2e.lifecycle.models import ResourceHandle

logger = structlog.get_logger()


@dataclass(frozen=True)
class Created:
    handle: ResourceHandle


@dataclass(frozen=True)
class AlreadyExists:
    name: str
    error: ResourceConflict


@dataclass(frozen=True)
class CreateFailed:
    error: Exception


ConflictOutcome = Created | AlreadyExists | CreateFailed


async def try_create(adapter: ResourceAdapter, payload: dict[str, Any]) -> ConflictOutcome:
    """Issue exactly one create call and classify its result.

    A conflict is returned as ``AlreadyExists``; nothing is retried or
    deleted. Cancellation is not captured.
    """
    kind = adapter.kind.value
    name = str(payload.get("name", ""))
    try:
        raw = await adapter.create(payload)
    except ResourceConflict as exc:
        logger.info(f"{kind}.already_exists", name=name)
        return AlreadyExists(name, exc)
    except Exception as exc:
        logger.error(f"{kind}.create_failed", name=name, error=str(exc))
        return CreateFailed(exc)
    return Created(to_handle(adapter.kind, raw))
