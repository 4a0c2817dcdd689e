"""Resource handles and observed status."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from managed_services_e2e.config.models import ResourceKind

__all__ = ["Readiness", "ResourceHandle", "ResourceKind", "StatusSnapshot"]


class Readiness(StrEnum):
    READY = "ready"
    NOT_READY = "not_ready"
    FAILED = "failed"


@dataclass(frozen=True)
class ResourceHandle:
    """Identifies one remote resource instance.

    ``raw`` is the payload the handle was built from (bootstrap host, client
    credentials, ...); it does not take part in equality.
    """

    id: str
    name: str
    kind: ResourceKind
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class StatusSnapshot:
    """Status of a resource as seen by one poll tick."""

    status: str
    raw: dict[str, Any] = field(default_factory=dict, repr=False)
    observed_at: datetime = field(default_factory=lambda: datetime.now(UTC))
