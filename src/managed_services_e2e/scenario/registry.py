"""Schema registry scenario: create, inspect, delete, verify gone."""

from __future__ import annotations

from dataclasses import dataclass

from managed_services_e2e.config.models import E2EConfig
from managed_services_e2e.lifecycle.control_plane import ControlPlane
from managed_services_e2e.lifecycle.models import Readiness, ResourceKind
from managed_services_e2e.scenario.runner import Step, expect
from managed_services_e2e.scenario.state import ScenarioState

REGISTRY = ResourceKind.REGISTRY


@dataclass
class RegistryScenario:
    config: E2EConfig
    control_plane: ControlPlane

    async def create_registry(self, state: ScenarioState) -> None:
        handle = await self.control_plane.apply_or_reuse(
            REGISTRY, {"name": self.config.registry_name}
        )
        state.put(handle)

    async def get_registry(self, state: ScenarioState) -> None:
        registry = state.require(REGISTRY)
        adapter = self.control_plane.lifecycle(REGISTRY).adapter
        raw = await adapter.fetch(registry.id)
        expect(raw.get("name") == registry.name, f"unexpected registry: {raw}")
        expect(
            adapter.classify(raw) is Readiness.READY,
            f"registry {registry.id} is {adapter.status_of(raw)}",
        )

    async def list_registries_by_name(self, state: ScenarioState) -> None:
        registry = state.require(REGISTRY)
        matches = await self.control_plane.lifecycle(REGISTRY).adapter.list_by_name(
            registry.name
        )
        ids = [str(m["id"]) for m in matches]
        expect(registry.id in ids, f"registry {registry.id} not in {ids}")

    async def delete_registry(self, state: ScenarioState) -> None:
        registry = state.require(REGISTRY)
        lifecycle = self.control_plane.lifecycle(REGISTRY)
        await lifecycle.delete(registry.id)
        await lifecycle.wait_until_deleted(registry.id)
        state.discard(REGISTRY)

    async def cleanup_registry(self, state: ScenarioState) -> None:
        await self.control_plane.delete_by_name_if_exists(
            REGISTRY, self.config.registry_name
        )
        state.discard(REGISTRY)

    def steps(self) -> list[Step]:
        return [
            Step("create_registry", self.create_registry),
            Step("get_registry", self.get_registry, requires=(REGISTRY,)),
            Step(
                "list_registries_by_name",
                self.list_registries_by_name,
                requires=(REGISTRY,),
            ),
            Step("delete_registry", self.delete_registry, requires=(REGISTRY,)),
            Step("cleanup_registry", self.cleanup_registry, cleanup=True),
        ]
