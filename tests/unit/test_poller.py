"""Unit tests for the condition poller and its outcomes."""

from __future__ import annotations

import asyncio

import pytest

from managed_services_e2e.polling.outcome import (
    Failed,
    PollTimeoutError,
    Succeeded,
    TimedOut,
    TransientObservationError,
    unwrap,
)
from managed_services_e2e.polling.poller import wait_for


class Recorder:
    """Predicate returning scripted results and recording each call's flag."""

    def __init__(self, results):
        self._results = list(results)
        self.calls: list[bool] = []

    async def __call__(self, last: bool):
        self.calls.append(last)
        result = self._results.pop(0) if len(self._results) > 1 else self._results[0]
        if isinstance(result, BaseException):
            raise result
        return result


class TestWaitFor:
    @pytest.mark.asyncio
    async def test_immediate_success(self):
        predicate = Recorder([(True, "ready")])
        outcome = await wait_for("thing", 1.0, 5.0, predicate)
        assert isinstance(outcome, Succeeded)
        assert outcome.value == "ready"
        assert predicate.calls == [False]

    @pytest.mark.asyncio
    async def test_succeeds_after_ticks(self):
        predicate = Recorder([(False, "a"), (False, "b"), (True, "c")])
        outcome = await wait_for("thing", 0.01, 5.0, predicate)
        assert outcome == Succeeded("c", outcome.elapsed)
        assert len(predicate.calls) == 3
        assert outcome.elapsed >= 0.015

    @pytest.mark.asyncio
    async def test_timeout_makes_one_last_attempt(self):
        predicate = Recorder([(False, "pending")])
        outcome = await wait_for("thing", 0.02, 0.1, predicate)
        assert isinstance(outcome, TimedOut)
        assert outcome.value == "pending"
        assert predicate.calls[-1] is True
        assert predicate.calls.count(True) == 1
        assert outcome.elapsed >= 0.09
        assert outcome.elapsed < 0.1 + 0.02 + 0.1

    @pytest.mark.asyncio
    async def test_does_not_spin_faster_than_interval(self):
        predicate = Recorder([(False, None)])
        await wait_for("thing", 0.05, 0.2, predicate)
        # Immediate call, ticks at 0.05/0.1/0.15, final call at the deadline.
        assert len(predicate.calls) <= 6

    @pytest.mark.asyncio
    async def test_early_timer_wakeup_does_not_add_attempts(self, monkeypatch):
        real_sleep = asyncio.sleep

        async def early_sleep(delay: float) -> None:
            await real_sleep(delay * 0.5)

        monkeypatch.setattr("managed_services_e2e.polling.poller.asyncio.sleep", early_sleep)
        predicate = Recorder([(False, "pending")])

        outcome = await wait_for("thing", 0.04, 0.1, predicate)

        assert isinstance(outcome, TimedOut)
        assert predicate.calls[-1] is True
        assert predicate.calls.count(True) == 1
        # Full ticks of 0.02s until the deadline is within one interval, then
        # one clipped sleep followed by the final call.
        assert len(predicate.calls) <= 7

    @pytest.mark.asyncio
    async def test_last_attempt_can_still_succeed(self):
        async def predicate(last: bool):
            return last, "done" if last else "pending"

        outcome = await wait_for("thing", 0.02, 0.05, predicate)
        assert isinstance(outcome, Succeeded)
        assert outcome.value == "done"

    @pytest.mark.asyncio
    async def test_transient_error_keeps_last_value(self):
        err = TransientObservationError("flaky")
        predicate = Recorder([(False, "first"), err])
        outcome = await wait_for("thing", 0.01, 0.05, predicate)
        assert isinstance(outcome, TimedOut)
        assert outcome.value == "first"
        assert outcome.last_error is err

    @pytest.mark.asyncio
    async def test_transient_then_success(self):
        predicate = Recorder([TransientObservationError("flaky"), (True, "ok")])
        outcome = await wait_for("thing", 0.01, 1.0, predicate)
        assert isinstance(outcome, Succeeded)
        assert outcome.value == "ok"

    @pytest.mark.asyncio
    async def test_unexpected_error_fails_with_last_value(self):
        boom = RuntimeError("boom")
        predicate = Recorder([(False, "seen"), boom])
        outcome = await wait_for("thing", 0.01, 1.0, predicate)
        assert isinstance(outcome, Failed)
        assert outcome.error is boom
        assert outcome.value == "seen"
        assert len(predicate.calls) == 2

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        predicate = Recorder([(False, None)])
        task = asyncio.create_task(wait_for("thing", 10.0, 60.0, predicate))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert predicate.calls == [False]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("interval", "timeout"), [(0, 1), (1, 0), (-1, 1)])
    async def test_rejects_non_positive_bounds(self, interval: float, timeout: float):
        predicate = Recorder([(True, None)])
        with pytest.raises(ValueError):
            await wait_for("thing", interval, timeout, predicate)
        assert predicate.calls == []


class TestUnwrap:
    def test_succeeded(self):
        assert unwrap(Succeeded("v", 1.0)) == "v"

    def test_timed_out(self):
        with pytest.raises(PollTimeoutError, match="waiting for kafka k1") as exc_info:
            unwrap(TimedOut("provisioning", 3.0), "kafka k1")
        assert exc_info.value.last_value == "provisioning"
        assert isinstance(exc_info.value, TimeoutError)

    def test_failed_reraises(self):
        boom = RuntimeError("boom")
        with pytest.raises(RuntimeError) as exc_info:
            unwrap(Failed(boom, None, 1.0))
        assert exc_info.value is boom
