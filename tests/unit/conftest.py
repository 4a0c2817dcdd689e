"""Shared fakes for the lifecycle and scenario tests."""

from __future__ import annotations

import itertools
from typing import Any

import pytest

from managed_services_e2e.client.errors import ResourceConflict, ResourceNotFound
from managed_services_e2e.config.models import KindTimings, PollConfig
from managed_services_e2e.lifecycle.models import Readiness, ResourceKind


class FakeNotFound(ResourceNotFound):
    pass


class FakeConflict(ResourceConflict):
    pass


class FakeAdapter:
    """In-memory ResourceAdapter.

    ``script`` maps an id to the statuses successive fetches report; the last
    one repeats. ``deleted_after`` is how many fetches a deleted resource
    stays visible (deprovisioning) before it reports not found. ``fields`` are
    stored on created resources; ``create_only`` fields are only returned by
    the create call.
    """

    def __init__(
        self,
        kind: ResourceKind = ResourceKind.KAFKA_INSTANCE,
        *,
        created_status: str = "ready",
        deleted_after: int = 0,
        fields: dict[str, Any] | None = None,
        create_only: dict[str, Any] | None = None,
    ) -> None:
        self.kind = kind
        self.created_status = created_status
        self.deleted_after = deleted_after
        self.fields = fields or {}
        self.create_only = create_only or {"secret": "only-on-create"}
        self.resources: dict[str, dict[str, Any]] = {}
        self.script: dict[str, list[str]] = {}
        self.create_error: Exception | None = None
        self.fetch_error: Exception | None = None
        self.create_calls: list[dict[str, Any]] = []
        self.delete_calls: list[str] = []
        self.fetch_calls = 0
        self._deleting: dict[str, int] = {}
        self._ids = itertools.count(1)

    def add(self, name: str, status: str = "ready", **extra: Any) -> dict[str, Any]:
        raw = {"id": f"{self.kind.value}-{next(self._ids)}", "name": name, "status": status}
        raw.update(extra)
        self.resources[raw["id"]] = raw
        return raw

    async def fetch(self, resource_id: str) -> dict[str, Any]:
        self.fetch_calls += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        if resource_id in self._deleting:
            if self._deleting[resource_id] <= 0:
                self._deleting.pop(resource_id)
                self.resources.pop(resource_id, None)
            else:
                self._deleting[resource_id] -= 1
        raw = self.resources.get(resource_id)
        if raw is None:
            raise FakeNotFound(resource_id)
        steps = self.script.get(resource_id)
        if steps:
            raw["status"] = steps.pop(0) if len(steps) > 1 else steps[0]
        return dict(raw)

    async def list_by_name(self, name: str) -> list[dict[str, Any]]:
        return [dict(r) for r in self.resources.values() if r["name"] == name]

    async def list_all(self) -> list[dict[str, Any]]:
        return [dict(r) for r in self.resources.values()]

    async def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        self.create_calls.append(payload)
        if self.create_error is not None:
            raise self.create_error
        if any(r["name"] == payload["name"] for r in self.resources.values()):
            raise FakeConflict(payload["name"])
        raw = self.add(payload["name"], self.created_status, **self.fields)
        return {**raw, **self.create_only}

    async def delete(self, resource_id: str) -> None:
        self.delete_calls.append(resource_id)
        if resource_id not in self.resources or resource_id in self._deleting:
            raise FakeNotFound(resource_id)
        self.script.pop(resource_id, None)
        if self.deleted_after == 0:
            del self.resources[resource_id]
            return
        self.resources[resource_id]["status"] = "deprovision"
        self._deleting[resource_id] = self.deleted_after

    def status_of(self, raw: dict[str, Any]) -> str:
        return str(raw.get("status", ""))

    def classify(self, raw: dict[str, Any]) -> Readiness:
        status = self.status_of(raw)
        if status == "ready":
            return Readiness.READY
        if status == "failed":
            return Readiness.FAILED
        return Readiness.NOT_READY


FAST = PollConfig(interval_seconds=0.01, timeout_seconds=0.2)


@pytest.fixture
def fast_timings() -> KindTimings:
    return KindTimings(ready=FAST, deleted=FAST)


@pytest.fixture
def make_adapter():
    return FakeAdapter
