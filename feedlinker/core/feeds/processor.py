"""Turn feed items into tracked shows, resolving catalog links on the way."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime

import structlog

from feedlinker.core.config import CatalogSettings
from feedlinker.core.extraction import (
    categorize_item,
    extract_catalog_link,
    extract_localized_title,
    extract_primary_title,
)
from feedlinker.core.search.service import TitleResolver

from .models import RawFeedItem, TrackedShow

logger = structlog.get_logger("feedlinker.feeds.processor")

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _as_utc(value: datetime | None) -> datetime:
    """Comparable publication date; missing dates sort first, naive dates are UTC."""
    if value is None:
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class FeedProcessor:
    """Extracts titles from feed items and collapses them into shows."""

    def __init__(
        self,
        settings: CatalogSettings,
        resolver: TitleResolver | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
        resolve_timeout: float | None = None,
    ) -> None:
        """Initialize feed processor.

        Args:
            settings: Catalog settings (enabled / auto_search / api_key gate lookups)
            resolver: Title resolver; without one, no catalog lookups happen
            clock: Time source for first_seen / last_seen
            resolve_timeout: Optional time limit per resolution
        """
        self.settings = settings
        self.resolver = resolver
        self.clock = clock
        self.resolve_timeout = resolve_timeout

    @property
    def auto_search_enabled(self) -> bool:
        return (
            self.resolver is not None and self.settings.auto_search and self.settings.is_configured
        )

    async def _lookup_link(self, primary: str, localized: str | None) -> str | None:
        resolver = self.resolver
        if resolver is None or not self.auto_search_enabled:
            return None
        try:
            link = await resolver.resolve(primary, localized, timeout=self.resolve_timeout)
        except Exception as e:
            # Keep processing the feed
            logger.warning("Catalog auto-search failed", title=primary, error=str(e))
            return None
        if link:
            logger.info("Catalog link found by auto-search", title=primary, link=link)
        return link

    async def process(self, items: Iterable[RawFeedItem], source: str) -> list[TrackedShow]:
        """Process the items of one feed.

        Items without a usable primary title are skipped. Items sharing a
        primary title collapse into one show that keeps the newest
        publication date and link, counts the items, and records the source.

        Args:
            items: Normalized feed items
            source: Name of the feed

        Returns:
            Shows in first-seen order
        """
        shows: dict[str, TrackedShow] = {}
        extracted_count = 0
        updated_count = 0
        total = 0

        for item in items:
            total += 1
            primary = extract_primary_title(item.title, item.description)
            if not primary:
                logger.debug("Skipping item without a usable title", raw_title=item.title)
                continue
            extracted_count += 1

            existing = shows.get(primary)
            now = self.clock()

            if existing is not None:
                existing.count += 1
                if _as_utc(item.published_at) > _as_utc(existing.published_at):
                    existing.published_at = item.published_at
                    existing.torrent_link = item.link
                    existing.last_seen = now
                    updated_count += 1
                    logger.debug("Updated show", title=primary, source=source)
                if source not in existing.sources:
                    existing.sources.append(source)
                continue

            localized = extract_localized_title(item.title, item.description)
            if localized == primary:
                localized = None

            link = extract_catalog_link(item.description)
            if link:
                logger.debug("Catalog link present in description", title=primary, link=link)
            else:
                link = await self._lookup_link(primary, localized)

            shows[primary] = TrackedShow(
                title=primary,
                localized_title=localized,
                catalog_link=link,
                category=categorize_item(item.title, item.description),
                first_seen=now,
                last_seen=now,
                sources=[source],
                published_at=item.published_at,
                torrent_link=item.link,
            )
            logger.debug("New show", title=primary, localized=localized, source=source)

        logger.info(
            "Feed processed",
            source=source,
            items=total,
            extracted=extracted_count,
            shows=len(shows),
            updated=updated_count,
        )
        return list(shows.values())
