"""Unit tests for the kind-parameterised ControlPlane."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from managed_services_e2e.config.models import (
    ApiConfig,
    E2EConfig,
    KindTimings,
    LifecycleConfig,
    PollConfig,
)
from managed_services_e2e.lifecycle.adapters import (
    KafkaInstanceAdapter,
    RegistryAdapter,
    ServiceAccountAdapter,
)
from managed_services_e2e.lifecycle.conflict import AlreadyExists, Created
from managed_services_e2e.lifecycle.control_plane import ControlPlane, open_control_plane
from managed_services_e2e.lifecycle.errors import ResourceTimeoutError
from managed_services_e2e.lifecycle.models import ResourceKind

FAST = PollConfig(interval_seconds=0.01, timeout_seconds=0.2)
FAST_LIFECYCLE = LifecycleConfig(
    kafka_instance=KindTimings(ready=FAST, deleted=FAST),
    registry=KindTimings(ready=FAST, deleted=FAST),
    service_account=KindTimings(ready=FAST, deleted=FAST),
    topic=KindTimings(ready=FAST, deleted=FAST),
)


class TestControlPlane:
    def test_uses_kind_timings(self, make_adapter):
        cp = ControlPlane([make_adapter(ResourceKind.REGISTRY)])
        timings = cp.lifecycle(ResourceKind.REGISTRY).timings
        assert timings.ready.timeout_seconds == 60.0
        assert timings.deleted.timeout_seconds == 20.0

    def test_unregistered_kind(self, make_adapter):
        cp = ControlPlane([make_adapter()])
        assert ResourceKind.KAFKA_INSTANCE in cp
        assert ResourceKind.TOPIC not in cp
        with pytest.raises(KeyError, match="no adapter registered for topic"):
            cp.lifecycle(ResourceKind.TOPIC)

    def test_register_replaces(self, make_adapter):
        cp = ControlPlane([make_adapter(ResourceKind.TOPIC)])
        replacement = make_adapter(ResourceKind.TOPIC)
        cp.register(replacement)
        assert cp.lifecycle(ResourceKind.TOPIC).adapter is replacement

    @pytest.mark.asyncio
    async def test_full_lifecycle(self, make_adapter):
        adapter = make_adapter(ResourceKind.REGISTRY, deleted_after=1)
        cp = ControlPlane([adapter], FAST_LIFECYCLE)

        handle = await cp.apply_or_reuse(ResourceKind.REGISTRY, {"name": "sr"})
        assert await cp.wait_until_ready(ResourceKind.REGISTRY, handle.id) == handle
        outcome = await cp.try_create(ResourceKind.REGISTRY, {"name": "sr"})
        assert isinstance(outcome, AlreadyExists)

        assert await cp.delete_by_name_if_exists(ResourceKind.REGISTRY, "sr") == [handle.id]
        await cp.wait_until_deleted(ResourceKind.REGISTRY, handle.id)
        assert adapter.resources == {}

        outcome = await cp.try_create(ResourceKind.REGISTRY, {"name": "sr"})
        assert isinstance(outcome, Created)

    @pytest.mark.asyncio
    async def test_per_call_timeout_override(self, make_adapter):
        adapter = make_adapter(created_status="provisioning")
        cp = ControlPlane([adapter])

        with pytest.raises(ResourceTimeoutError):
            await cp.apply_or_reuse(
                ResourceKind.KAFKA_INSTANCE,
                {"name": "k"},
                ready_timeout=0.05,
                poll_interval=0.01,
            )

    @pytest.mark.asyncio
    async def test_wait_until_deleted_override(self, make_adapter):
        adapter = make_adapter()
        raw = adapter.add("k", "deprovision")
        cp = ControlPlane([adapter])

        with pytest.raises(ResourceTimeoutError):
            await cp.wait_until_deleted(
                ResourceKind.KAFKA_INSTANCE, raw["id"], timeout=0.05, interval=0.01
            )


class TestOpenControlPlane:
    @pytest.mark.asyncio
    async def test_wires_rest_adapters_and_closes_clients(self):
        config = E2EConfig(api=ApiConfig(token="tok"))
        with (
            patch(
                "managed_services_e2e.client.kafka_mgmt.KafkaMgmtClient.close",
                new_callable=AsyncMock,
            ) as kafka_close,
            patch(
                "managed_services_e2e.client.registry.RegistriesClient.close",
                new_callable=AsyncMock,
            ) as registry_close,
        ):
            async with open_control_plane(config) as cp:
                assert isinstance(
                    cp.lifecycle(ResourceKind.KAFKA_INSTANCE).adapter, KafkaInstanceAdapter
                )
                assert isinstance(
                    cp.lifecycle(ResourceKind.SERVICE_ACCOUNT).adapter,
                    ServiceAccountAdapter,
                )
                assert isinstance(cp.lifecycle(ResourceKind.REGISTRY).adapter, RegistryAdapter)
                assert ResourceKind.TOPIC not in cp
        kafka_close.assert_awaited_once()
        registry_close.assert_awaited_once()
