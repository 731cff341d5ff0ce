"""Process-wide spacing of outbound catalog requests."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

import structlog

from feedlinker.core.metrics import catalog_rate_limit_wait_seconds

logger = structlog.get_logger("feedlinker.catalog.rate_limiter")


class RateLimiter:
    """Enforces a minimum interval between catalog requests.

    One instance is shared by every resolution in the process. The lock
    serializes access to the last-request timestamp so concurrent callers
    are spaced out one after another.
    """

    def __init__(
        self,
        min_interval: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize rate limiter.

        Args:
            min_interval: Minimum seconds between two requests
            clock: Monotonic time source
            sleep: Async sleep function (injectable for tests)
        """
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_request_time: float | None = None
        self._lock = asyncio.Lock()

    async def wait(self) -> float:
        """Wait until the next request is allowed, then claim the slot.

        Returns:
            Seconds spent waiting
        """
        async with self._lock:
            waited = 0.0
            now = self._clock()
            if self._last_request_time is not None:
                elapsed = now - self._last_request_time
                if elapsed < self.min_interval:
                    waited = self.min_interval - elapsed
                    logger.debug("Rate limit spacing, waiting", wait_seconds=round(waited, 3))
                    await self._sleep(waited)
                    now = self._clock()

            # Record before releasing the lock so the next caller sees this request
            self._last_request_time = now
            catalog_rate_limit_wait_seconds.observe(waited)
            return waited
