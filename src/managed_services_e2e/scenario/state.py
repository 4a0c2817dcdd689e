"""Per-run scenario state."""

from __future__ import annotations

from dataclasses import dataclass, field

from managed_services_e2e.lifecycle.models import ResourceHandle, ResourceKind


class PrerequisiteMissing(Exception):
    """A step needs a resource an earlier step did not produce."""

    def __init__(self, *kinds: ResourceKind) -> None:
        self.kinds = kinds
        names = ", ".join(k.value for k in kinds)
        super().__init__(f"prerequisite missing: {names}")


@dataclass
class ScenarioState:
    """Handles produced by the steps of one scenario run, at most one per kind.

    Owned by a single run and passed explicitly to every step.
    """

    handles: dict[ResourceKind, ResourceHandle] = field(default_factory=dict)

    def put(self, handle: ResourceHandle) -> None:
        self.handles[handle.kind] = handle

    def get(self, kind: ResourceKind) -> ResourceHandle | None:
        return self.handles.get(kind)

    def discard(self, kind: ResourceKind) -> None:
        self.handles.pop(kind, None)

    def missing(self, *kinds: ResourceKind) -> tuple[ResourceKind, ...]:
        return tuple(k for k in kinds if k not in self.handles)

    def require(self, kind: ResourceKind) -> ResourceHandle:
        handle = self.handles.get(kind)
        if handle is None:
            raise PrerequisiteMissing(kind)
        return handle
