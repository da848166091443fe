"""Retry-with-backoff utility"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, TypeVar

from ideapage_api.core.telemetry import PipelineObserver

logger = logging.getLogger(__name__)

T = TypeVar("T")


def linear_backoff(base_seconds: float = 1.0) -> Callable[[int], float]:
    """Delay after attempt N (1-based) is N * base: 1s, 2s, 3s..."""
    return lambda attempt: attempt * base_seconds


def exponential_backoff(base_seconds: float = 1.0, cap_seconds: float = 30.0) -> Callable[[int], float]:
    """Delay after attempt N (1-based) is base * 2**(N-1), capped"""
    return lambda attempt: min(cap_seconds, base_seconds * (2 ** (attempt - 1)))


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    attempts: int = 3,
    delay: Callable[[int], float] = linear_backoff(),
    retry_on: Tuple[Type[BaseException], ...] = (),
    retry_if: Optional[Callable[[Any], bool]] = None,
    name: str = "operation",
    observer: Optional[PipelineObserver] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """
    Await ``operation`` up to ``attempts`` times.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        attempts: Total number of attempts (at least 1)
        delay: Seconds to wait after a failed attempt, given its 1-based number
        retry_on: Exception types that trigger another attempt
        retry_if: Predicate on a result that triggers another attempt
        name: Label for observer events
        observer: Receives a retry event before every wait
        sleep: Awaitable used to wait (injected in tests)

    Returns:
        The first accepted result, or the last result if retry_if kept rejecting

    Raises:
        The last exception from retry_on once attempts are exhausted; any
        other exception immediately.
    """
    observer = observer or PipelineObserver()
    attempts = max(1, attempts)

    for attempt in range(1, attempts + 1):
        last_attempt = attempt == attempts
        try:
            result = await operation()
        except retry_on as e:
            if last_attempt:
                logger.error(f"[RETRY] ✗ {name} failed after {attempts} attempts: {e!r}")
                raise
            wait = delay(attempt)
            observer.retry(name, attempt, wait, f"{type(e).__name__}: {e}")
            await sleep(wait)
            continue

        if retry_if is not None and retry_if(result) and not last_attempt:
            wait = delay(attempt)
            observer.retry(name, attempt, wait, "result rejected")
            await sleep(wait)
            continue
        return result

    # Unreachable: the final attempt either returns or raises
    raise RuntimeError(f"{name}: retry loop exited without a result")
