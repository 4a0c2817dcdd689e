"""Lifecycle errors."""

from __future__ import annotations

from managed_services_e2e.lifecycle.models import ResourceKind, StatusSnapshot
from managed_services_e2e.polling.outcome import PollTimeoutError


class ResourceTimeoutError(PollTimeoutError):
    """A readiness or deletion wait ran out of time.

    Carries enough to tell a slow remote system from a stuck one: the kind,
    the id, how long we waited and the last status and payload observed.
    """

    def __init__(
        self,
        kind: ResourceKind,
        resource_id: str,
        condition: str,
        elapsed: float,
        last_snapshot: StatusSnapshot | None,
        last_error: BaseException | None = None,
    ) -> None:
        self.kind = kind
        self.resource_id = resource_id
        self.condition = condition
        self.last_snapshot = last_snapshot
        status = last_snapshot.status if last_snapshot else "<never observed>"
        raw = last_snapshot.raw if last_snapshot else None
        message = (
            f"{kind.value} {resource_id} not {condition} after {elapsed:.1f}s; "
            f"last status: {status}; last payload: {raw}"
            + (f"; last error: {last_error}" if last_error else "")
        )
        super().__init__(
            f"{kind.value} {resource_id} to be {condition}",
            elapsed,
            last_snapshot,
            last_error,
            message=message,
        )
