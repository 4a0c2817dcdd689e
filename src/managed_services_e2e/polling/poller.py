"""Bounded-interval, bounded-timeout condition poller."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from managed_services_e2e.polling.outcome import (
    Failed,
    PollOutcome,
    Succeeded,
    TimedOut,
    TransientObservationError,
)

logger = structlog.get_logger()

T = TypeVar("T")

# predicate(is_last_attempt) -> (done, observed value)
Predicate = Callable[[bool], Awaitable[tuple[bool, T | None]]]


async def wait_for(
    description: str,
    interval: float,
    timeout: float,
    predicate: Predicate[T],
) -> PollOutcome[T]:
    """Poll *predicate* until it reports done or *timeout* seconds elapse.

    The predicate is called immediately and then every *interval* seconds.
    Once the deadline is reached it is called one final time with
    ``is_last_attempt=True`` so it can capture diagnostics; if that call still
    reports not done the session ends ``TimedOut``.

    ``TransientObservationError`` raised by the predicate counts as "not done"
    and keeps the previously observed value. Any other exception ends the
    session as ``Failed``. Cancellation propagates to the caller.
    """
    if interval <= 0:
        raise ValueError(f"interval must be positive, got {interval}")
    if timeout <= 0:
        raise ValueError(f"timeout must be positive, got {timeout}")

    loop = asyncio.get_running_loop()
    start = loop.time()
    deadline = start + timeout
    last_value: T | None = None
    last_error: BaseException | None = None

    last = False
    while True:
        try:
            done, value = await predicate(last)
        except TransientObservationError as exc:
            last_error = exc
            logger.info("poll.transient_error", description=description, error=str(exc))
        except Exception as exc:
            logger.error("poll.failed", description=description, error=str(exc))
            return Failed(exc, last_value, loop.time() - start)
        else:
            last_value = value
            if done:
                elapsed = loop.time() - start
                logger.info("poll.succeeded", description=description, elapsed=elapsed)
                return Succeeded(value, elapsed)

        if last:
            elapsed = loop.time() - start
            logger.warning(
                "poll.timed_out",
                description=description,
                elapsed=elapsed,
                last_value=repr(last_value),
            )
            return TimedOut(last_value, elapsed, last_error)

        remaining = max(deadline - loop.time(), 0.0)
        if remaining <= interval:
            # The call after the clipped sleep is the final one even if the
            # timer fires a tick early.
            last = True
            await asyncio.sleep(remaining)
        else:
            await asyncio.sleep(interval)
