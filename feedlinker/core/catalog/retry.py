"""Retry policy and a generic async retry wrapper."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import structlog

logger = structlog.get_logger("feedlinker.catalog.retry")

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff policy.

    The delay before retry n (0-based) is
    min(base_delay * multiplier ** n, max_delay), plus up to jitter * delay
    of random spread.
    """

    max_retries: int = 2
    base_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 5.0
    jitter: float = 0.0

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay(self, attempt: int) -> float:
        """Backoff delay in seconds before the retry following `attempt`."""
        wait = min(self.base_delay * self.multiplier**attempt, self.max_delay)
        if self.jitter > 0:
            wait += random.uniform(0, wait * self.jitter)
        return wait


async def retry_async(
    func: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    is_retryable: Callable[[Exception], bool],
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    on_retry: Callable[[int, Exception, float], None] | None = None,
) -> T:
    """Call `func` until it succeeds or the policy is exhausted.

    Args:
        func: Zero-argument coroutine factory, called once per attempt
        policy: Retry policy
        is_retryable: Decides whether an exception may be retried
        sleep: Async sleep function (injectable for tests)
        on_retry: Optional callback (attempt, error, wait_seconds) before each retry

    Returns:
        The first successful result

    Raises:
        The last exception when it is not retryable or retries are exhausted
    """
    attempt = 0
    while True:
        try:
            return await func()
        except Exception as e:
            if not is_retryable(e) or attempt >= policy.max_retries:
                raise
            wait_time = policy.delay(attempt)
            if on_retry is not None:
                on_retry(attempt, e, wait_time)
            logger.debug(
                "Retrying after failure",
                error=str(e),
                attempt=attempt + 1,
                wait_seconds=wait_time,
            )
            await sleep(wait_time)
            attempt += 1
