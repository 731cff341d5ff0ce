"""Process-wide state shared by every resolution."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from feedlinker.core.catalog.rate_limiter import RateLimiter
from feedlinker.core.config import Settings

from .cache import ResultCache

logger = structlog.get_logger("feedlinker.search.context")


@dataclass
class ResolverContext:
    """Rate limiter and result cache, built once per process.

    Every TitleResolver receives the same context so request spacing and
    cached links are shared without module-level globals.
    """

    rate_limiter: RateLimiter
    cache: ResultCache

    @classmethod
    def from_settings(cls, settings: Settings) -> ResolverContext:
        context = cls(
            rate_limiter=RateLimiter(min_interval=settings.catalog.min_request_interval),
            cache=ResultCache(
                ttl_seconds=settings.cache.ttl_seconds,
                negative_ttl_seconds=settings.cache.negative_ttl_seconds,
                max_entries=settings.cache.max_entries,
            ),
        )
        logger.debug(
            "Resolver context created",
            min_request_interval=settings.catalog.min_request_interval,
            cache_max_entries=settings.cache.max_entries,
        )
        return context
