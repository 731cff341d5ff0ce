"""In-memory cache of resolved catalog links."""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from feedlinker.core.metrics import result_cache_events_total

logger = structlog.get_logger("feedlinker.search.cache")


def make_cache_key(primary: str, localized: str | None = None) -> str:
    """Build the cache key for a (primary, localized) title pair."""
    return f"{primary}|{localized or ''}"


@dataclass(frozen=True)
class CacheEntry:
    """A cached resolution outcome.

    Attributes:
        key: "primary|localized" cache key
        resolved_link: Canonical link, or None for a cached "no match"
        timestamp: When the entry was stored (clock seconds)
    """

    key: str
    resolved_link: str | None
    timestamp: float


class ResultCache:
    """Resolved-link cache with TTL and bounded capacity.

    Positive results (a link) and negative results (no match) have separate
    TTLs. When full, the oldest stored entry is evicted first; storing an
    existing key refreshes its position.
    """

    def __init__(
        self,
        ttl_seconds: float = 86400,
        negative_ttl_seconds: float | None = None,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize result cache.

        Args:
            ttl_seconds: TTL for resolved links in seconds
            negative_ttl_seconds: TTL for "no match" results (defaults to ttl_seconds)
            max_entries: Maximum number of cached title pairs
            clock: Time source, injectable for tests
        """
        self.ttl_seconds = ttl_seconds
        self.negative_ttl_seconds = (
            ttl_seconds if negative_ttl_seconds is None else negative_ttl_seconds
        )
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        ttl = self.ttl_seconds if entry.resolved_link else self.negative_ttl_seconds
        return now - entry.timestamp > ttl

    def get(self, key: str) -> CacheEntry | None:
        """Get a live cache entry.

        Args:
            key: Cache key (see make_cache_key)

        Returns:
            The entry (whose resolved_link may be None) or None on miss/expiry
        """
        entry = self._entries.get(key)
        if entry is None:
            result_cache_events_total.labels(event="miss").inc()
            return None

        if self._is_expired(entry, self._clock()):
            self._entries.pop(key, None)
            result_cache_events_total.labels(event="expired").inc()
            logger.debug("Cache entry expired", key=key)
            return None

        result_cache_events_total.labels(event="hit").inc()
        logger.debug("Cache hit", key=key, link=entry.resolved_link)
        return entry

    def set(self, key: str, resolved_link: str | None) -> CacheEntry:
        """Store a resolution outcome.

        Args:
            key: Cache key (see make_cache_key)
            resolved_link: Canonical link or None for "no match"

        Returns:
            The stored entry
        """
        entry = CacheEntry(key=key, resolved_link=resolved_link, timestamp=self._clock())
        self._entries.pop(key, None)
        self._entries[key] = entry

        while len(self._entries) > self.max_entries:
            evicted_key, _ = self._entries.popitem(last=False)
            result_cache_events_total.labels(event="evicted").inc()
            logger.debug("Evicted oldest cache entry", key=evicted_key)

        return entry
