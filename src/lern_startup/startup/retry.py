"""
Fixed-interval retry for startup dependency readiness.

Runs a zero-argument action up to ``max_attempts`` times with the same delay
between attempts. No backoff growth, no jitter; the worst-case total wait is
``(max_attempts - 1) * delay`` plus the time spent in the action.

Two variants are provided:
- run_with_retry: blocks the calling thread with time.sleep
- run_with_retry_async: awaits asyncio.sleep, for hosts running an event loop
"""

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Awaitable, Callable, Optional, Union

from ..core.errors import InvalidArgumentError, RetryBudgetExhaustedError

logger = logging.getLogger(__name__)

Delay = Union[timedelta, int, float]


def _delay_seconds(delay: Delay) -> float:
    if isinstance(delay, timedelta):
        seconds = delay.total_seconds()
    elif isinstance(delay, (int, float)) and not isinstance(delay, bool):
        seconds = float(delay)
    else:
        raise InvalidArgumentError(f"Retry delay must be a timedelta or seconds, got {delay!r}")
    if seconds < 0:
        raise InvalidArgumentError(f"Retry delay must not be negative, got {delay!r}")
    return seconds


def _check_attempts(max_attempts: int) -> int:
    if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or max_attempts < 1:
        raise InvalidArgumentError(f"max_attempts must be an integer >= 1, got {max_attempts!r}")
    return max_attempts


def _action_name(action: Callable[..., Any]) -> str:
    return getattr(action, "__qualname__", None) or getattr(action, "__name__", None) or repr(action)


def run_with_retry(
    action: Callable[[], Any],
    delay: Delay,
    max_attempts: int,
    sleep: Optional[Callable[[float], None]] = None
) -> None:
    """
    Run an action until it succeeds or the attempt budget is spent.

    Args:
        action: Zero-argument callable; any Exception counts as a failure
        delay: Fixed pause between attempts (timedelta or seconds)
        max_attempts: Total number of attempts, at least 1
        sleep: Blocking sleep function; time.sleep if omitted

    Raises:
        InvalidArgumentError: If delay or max_attempts is invalid
        RetryBudgetExhaustedError: If the last attempt fails; chained from
            the last failure
    """
    seconds = _delay_seconds(delay)
    _check_attempts(max_attempts)
    name = _action_name(action)
    sleep = sleep or time.sleep

    for attempt in range(1, max_attempts + 1):
        try:
            action()
            return
        except Exception as e:
            if attempt >= max_attempts:
                logger.error(f"{name} failed on final attempt {attempt}/{max_attempts}: {e}")
                raise RetryBudgetExhaustedError(attempt, e, name) from e
            logger.warning(
                f"{name} failed on attempt {attempt}/{max_attempts}: {e}; retrying in {seconds:g}s"
            )
        sleep(seconds)


async def run_with_retry_async(
    action: Callable[[], Union[Awaitable[Any], Any]],
    delay: Delay,
    max_attempts: int,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None
) -> None:
    """
    Async variant of run_with_retry.

    The action may be a coroutine function or a plain callable. The delay is
    awaited, so other tasks on the loop keep running between attempts.
    Attempts are still strictly sequential.
    """
    seconds = _delay_seconds(delay)
    _check_attempts(max_attempts)
    name = _action_name(action)
    sleep = sleep or asyncio.sleep

    for attempt in range(1, max_attempts + 1):
        try:
            result = action()
            if inspect.isawaitable(result):
                await result
            return
        except Exception as e:
            if attempt >= max_attempts:
                logger.error(f"{name} failed on final attempt {attempt}/{max_attempts}: {e}")
                raise RetryBudgetExhaustedError(attempt, e, name) from e
            logger.warning(
                f"{name} failed on attempt {attempt}/{max_attempts}: {e}; retrying in {seconds:g}s"
            )
        await sleep(seconds)


@dataclass(frozen=True)
class RetryPlan:
    """An action with its fixed delay and attempt budget."""
    action: Callable[[], Any]
    delay: Delay = field(default=timedelta(seconds=5))
    max_attempts: int = 5

    def __post_init__(self):
        _delay_seconds(self.delay)
        _check_attempts(self.max_attempts)

    def run(self, sleep: Optional[Callable[[float], None]] = None) -> None:
        run_with_retry(self.action, self.delay, self.max_attempts, sleep)

    async def run_async(self, sleep: Optional[Callable[[float], Awaitable[None]]] = None) -> None:
        await run_with_retry_async(self.action, self.delay, self.max_attempts, sleep)
