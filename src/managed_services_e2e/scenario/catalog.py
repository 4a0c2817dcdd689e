"""Named scenarios and the helpers the CLI and integration tests run them with."""

from __future__ import annotations

from collections.abc import Callable

import structlog

from managed_services_e2e.config.models import E2EConfig
from managed_services_e2e.lifecycle.control_plane import ControlPlane, open_control_plane
from managed_services_e2e.lifecycle.models import ResourceKind
from managed_services_e2e.scenario.registry import RegistryScenario
from managed_services_e2e.scenario.runner import ScenarioReport, ScenarioRunner, Step
from managed_services_e2e.scenario.service_api import ServiceApiScenario
from managed_services_e2e.scenario.state import ScenarioState

logger = structlog.get_logger()

StepsBuilder = Callable[[E2EConfig, ControlPlane], list[Step]]

SCENARIOS: dict[str, StepsBuilder] = {
    "service-api": lambda config, cp: ServiceApiScenario(config, cp).steps(),
    "registry": lambda config, cp: RegistryScenario(config, cp).steps(),
}


def _builder(name: str) -> StepsBuilder:
    try:
        return SCENARIOS[name]
    except KeyError:
        raise KeyError(
            f"unknown scenario {name!r}; expected one of {sorted(SCENARIOS)}"
        ) from None


async def run_steps(
    name: str, config: E2EConfig, control_plane: ControlPlane
) -> ScenarioReport:
    builder = _builder(name)
    runner = ScenarioRunner(name, builder(config, control_plane))
    logger.info("scenario.started", scenario=name, postfix=config.name_postfix)
    return await runner.run(
        ScenarioState(),
        deadline=config.scenario_timeout_seconds,
        cleanup_timeout=config.cleanup_timeout_seconds,
    )


async def run_scenario(name: str, config: E2EConfig) -> ScenarioReport:
    """Run the named scenario against the configured REST APIs."""
    _builder(name)
    async with open_control_plane(config) as control_plane:
        return await run_steps(name, config, control_plane)


async def clean_all(config: E2EConfig) -> dict[ResourceKind, list[str]]:
    """Delete every resource the config names, returning deleted ids per kind."""
    targets = {
        ResourceKind.KAFKA_INSTANCE: config.kafka_instance_name,
        ResourceKind.SERVICE_ACCOUNT: config.service_account_name,
        ResourceKind.REGISTRY: config.registry_name,
    }
    deleted: dict[ResourceKind, list[str]] = {}
    async with open_control_plane(config) as control_plane:
        for kind, name in targets.items():
            deleted[kind] = await control_plane.delete_by_name_if_exists(kind, name)
    return deleted
