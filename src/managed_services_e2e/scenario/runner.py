"""Ordered scenario execution with prerequisite gating and unconditional cleanup."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

import structlog

from managed_services_e2e.lifecycle.models import ResourceKind
from managed_services_e2e.scenario.state import PrerequisiteMissing, ScenarioState

logger = structlog.get_logger()

StepFn = Callable[[ScenarioState], Awaitable[None]]

DEADLINE_EXCEEDED = "deadline exceeded"


class StepStatus(StrEnum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Step:
    """One scenario step.

    ``requires`` lists the handles that must be in the state for the step to
    run. Cleanup steps run regardless of earlier failures, missing handles or
    an expired scenario deadline, so they must tolerate resources that are
    already gone.
    """

    name: str
    run: StepFn
    requires: tuple[ResourceKind, ...] = ()
    cleanup: bool = False


@dataclass(frozen=True)
class StepResult:
    name: str
    status: StepStatus
    reason: str = ""
    elapsed: float = 0.0


@dataclass
class ScenarioReport:
    scenario: str
    results: list[StepResult] = field(default_factory=list)

    def _with(self, status: StepStatus) -> list[StepResult]:
        return [r for r in self.results if r.status == status]

    @property
    def passed(self) -> list[StepResult]:
        return self._with(StepStatus.PASSED)

    @property
    def failed(self) -> list[StepResult]:
        return self._with(StepStatus.FAILED)

    @property
    def skipped(self) -> list[StepResult]:
        return self._with(StepStatus.SKIPPED)

    @property
    def ok(self) -> bool:
        return not self.failed

    def result(self, name: str) -> StepResult:
        for r in self.results:
            if r.name == name:
                return r
        raise KeyError(name)


def expect(condition: bool, message: str) -> None:
    """Fail the current step with *message* unless *condition* holds."""
    if not condition:
        raise AssertionError(message)


class ScenarioRunner:
    """Runs steps strictly in order, one at a time."""

    def __init__(self, scenario: str, steps: Sequence[Step]) -> None:
        self._scenario = scenario
        self._steps = list(steps)

    @property
    def steps(self) -> list[Step]:
        return list(self._steps)

    async def run(
        self,
        state: ScenarioState,
        *,
        deadline: float | None = None,
        cleanup_timeout: float | None = None,
    ) -> ScenarioReport:
        """Run every step and report the outcome of each.

        *deadline* bounds the non-cleanup steps as a whole; when it expires
        the running step is cancelled and the remaining ones are skipped.
        Each cleanup step gets its own *cleanup_timeout*.
        """
        loop = asyncio.get_running_loop()
        deadline_at = loop.time() + deadline if deadline is not None else None
        report = ScenarioReport(self._scenario)
        expired = False

        for step in self._steps:
            if step.cleanup:
                result = await self._run_step(step, state, cleanup_timeout)
            elif expired:
                result = self._skip(step, DEADLINE_EXCEEDED)
            elif missing := state.missing(*step.requires):
                result = self._skip(step, str(PrerequisiteMissing(*missing)))
            else:
                remaining = None
                if deadline_at is not None:
                    remaining = deadline_at - loop.time()
                    if remaining <= 0:
                        expired = True
                        report.results.append(self._skip(step, DEADLINE_EXCEEDED))
                        continue
                result = await self._run_step(step, state, remaining)
                if result.reason == DEADLINE_EXCEEDED:
                    expired = True
            report.results.append(result)

        logger.info(
            "scenario.finished",
            scenario=self._scenario,
            passed=len(report.passed),
            failed=len(report.failed),
            skipped=len(report.skipped),
        )
        return report

    def _skip(self, step: Step, reason: str) -> StepResult:
        logger.warning("step.skipped", scenario=self._scenario, step=step.name, reason=reason)
        return StepResult(step.name, StepStatus.SKIPPED, reason)

    async def _run_step(
        self, step: Step, state: ScenarioState, timeout: float | None
    ) -> StepResult:
        loop = asyncio.get_running_loop()
        start = loop.time()
        logger.info("step.started", scenario=self._scenario, step=step.name)
        scope = asyncio.timeout(timeout)
        try:
            async with scope:
                await step.run(state)
        except PrerequisiteMissing as exc:
            return self._skip(step, str(exc))
        except TimeoutError as exc:
            elapsed = loop.time() - start
            if scope.expired():
                reason = DEADLINE_EXCEEDED
            else:
                reason = f"{type(exc).__name__}: {exc}"
            logger.error(
                "step.failed", scenario=self._scenario, step=step.name, reason=reason
            )
            return StepResult(step.name, StepStatus.FAILED, reason, elapsed)
        except Exception as exc:
            elapsed = loop.time() - start
            reason = f"{type(exc).__name__}: {exc}"
            logger.error(
                "step.failed", scenario=self._scenario, step=step.name, reason=reason
            )
            return StepResult(step.name, StepStatus.FAILED, reason, elapsed)

        elapsed = loop.time() - start
        logger.info(
            "step.passed", scenario=self._scenario, step=step.name, elapsed=elapsed
        )
        return StepResult(step.name, StepStatus.PASSED, elapsed=elapsed)
