"""Terminal results of a poll session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


class TransientObservationError(Exception):
    """A single observation failed; the poller retries on the next tick."""


class ResourceFailedError(Exception):
    """The observed resource reached a terminal failure state."""


class PollTimeoutError(TimeoutError):
    """A poll session exhausted its budget without reaching its condition."""

    def __init__(
        self,
        description: str,
        elapsed: float,
        last_value: object = None,
        last_error: BaseException | None = None,
        *,
        message: str | None = None,
    ) -> None:
        self.description = description
        self.elapsed = elapsed
        self.last_value = last_value
        self.last_error = last_error
        msg = f"timeout after {elapsed:.1f}s waiting for {description}"
        if last_value is not None:
            msg += f"; last value: {last_value!r}"
        if last_error is not None:
            msg += f"; last error: {last_error}"
        super().__init__(message or msg)


@dataclass(frozen=True)
class Succeeded(Generic[T]):
    value: T | None
    elapsed: float


@dataclass(frozen=True)
class TimedOut(Generic[T]):
    value: T | None
    elapsed: float
    last_error: BaseException | None = None


@dataclass(frozen=True)
class Failed(Generic[T]):
    error: BaseException
    value: T | None
    elapsed: float


PollOutcome = Succeeded[T] | TimedOut[T] | Failed[T]


def unwrap(outcome: PollOutcome[T], description: str = "condition") -> T | None:
    """Return the value of a successful outcome, raise for the other two."""
    match outcome:
        case Succeeded(value=value):
            return value
        case TimedOut(value=value, elapsed=elapsed, last_error=last_error):
            raise PollTimeoutError(description, elapsed, value, last_error)
        case Failed(error=error):
            raise error
    raise TypeError(f"not a poll outcome: {outcome!r}")
