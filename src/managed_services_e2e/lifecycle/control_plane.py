"""Kind-parameterised entry point over the per-kind lifecycles."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

from managed_services_e2e.client.kafka_mgmt import KafkaMgmtClient
from managed_services_e2e.client.registry import RegistriesClient
from managed_services_e2e.config.models import E2EConfig, LifecycleConfig, PollConfig
from managed_services_e2e.lifecycle.adapters import (
    KafkaInstanceAdapter,
    RegistryAdapter,
    ResourceAdapter,
    ServiceAccountAdapter,
)
from managed_services_e2e.lifecycle.conflict import ConflictOutcome
from managed_services_e2e.lifecycle.models import ResourceHandle, ResourceKind
from managed_services_e2e.lifecycle.orchestrator import ResourceLifecycle


def _override(
    base: PollConfig, timeout: float | None, interval: float | None
) -> PollConfig:
    if timeout is None and interval is None:
        return base
    return PollConfig(
        interval_seconds=interval if interval is not None else base.interval_seconds,
        timeout_seconds=timeout if timeout is not None else base.timeout_seconds,
    )


class ControlPlane:
    """Routes lifecycle calls to the lifecycle registered for a resource kind.

    Timeouts and intervals default to the kind's ``LifecycleConfig`` entry and
    can be overridden per call.
    """

    def __init__(
        self,
        adapters: Iterable[ResourceAdapter] = (),
        config: LifecycleConfig | None = None,
    ) -> None:
        self._config = config or LifecycleConfig()
        self._lifecycles: dict[ResourceKind, ResourceLifecycle] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: ResourceAdapter) -> ResourceLifecycle:
        lifecycle = ResourceLifecycle(adapter, self._config.for_kind(adapter.kind))
        self._lifecycles[adapter.kind] = lifecycle
        return lifecycle

    def lifecycle(self, kind: ResourceKind) -> ResourceLifecycle:
        try:
            return self._lifecycles[kind]
        except KeyError:
            raise KeyError(f"no adapter registered for {kind.value}") from None

    def __contains__(self, kind: object) -> bool:
        return kind in self._lifecycles

    async def apply_or_reuse(
        self,
        kind: ResourceKind,
        payload: dict[str, Any],
        *,
        ready_timeout: float | None = None,
        poll_interval: float | None = None,
    ) -> ResourceHandle:
        lifecycle = self.lifecycle(kind)
        poll = _override(lifecycle.timings.ready, ready_timeout, poll_interval)
        return await lifecycle.apply_or_reuse(payload, poll=poll)

    async def delete_by_name_if_exists(self, kind: ResourceKind, name: str) -> list[str]:
        return await self.lifecycle(kind).delete_by_name_if_exists(name)

    async def wait_until_ready(
        self,
        kind: ResourceKind,
        resource_id: str,
        *,
        timeout: float | None = None,
        interval: float | None = None,
    ) -> ResourceHandle:
        lifecycle = self.lifecycle(kind)
        poll = _override(lifecycle.timings.ready, timeout, interval)
        return await lifecycle.wait_until_ready(resource_id, poll=poll)

    async def wait_until_deleted(
        self,
        kind: ResourceKind,
        resource_id: str,
        *,
        timeout: float | None = None,
        interval: float | None = None,
    ) -> None:
        lifecycle = self.lifecycle(kind)
        poll = _override(lifecycle.timings.deleted, timeout, interval)
        await lifecycle.wait_until_deleted(resource_id, poll=poll)

    async def try_create(self, kind: ResourceKind, payload: dict[str, Any]) -> ConflictOutcome:
        return await self.lifecycle(kind).try_create(payload)


@asynccontextmanager
async def open_control_plane(config: E2EConfig) -> AsyncIterator[ControlPlane]:
    """Yield a ControlPlane wired to the REST APIs; clients close on exit."""
    async with AsyncExitStack() as stack:
        kafka_mgmt = await stack.enter_async_context(KafkaMgmtClient(config.api))
        registries = await stack.enter_async_context(RegistriesClient(config.api))
        yield ControlPlane(
            [
                KafkaInstanceAdapter(kafka_mgmt),
                ServiceAccountAdapter(kafka_mgmt),
                RegistryAdapter(registries),
            ],
            config.lifecycle,
        )
