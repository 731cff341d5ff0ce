"""Title resolution: cache, query planning, catalog search and scoring."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Literal

import httpx
import structlog

from feedlinker.core.catalog.client import CatalogClient
from feedlinker.core.catalog.errors import CatalogNotConfiguredError
from feedlinker.core.catalog.models import CatalogCandidate
from feedlinker.core.config import CatalogSettings
from feedlinker.core.matching.config import MatchingConfig, get_matching_config
from feedlinker.core.matching.evaluator import ScoredCandidate, rank_candidates
from feedlinker.core.metrics import title_resolutions_total
from feedlinker.core.tracing import ensure_trace_context
from feedlinker.core.utils import extract_year

from .cache import ResultCache, make_cache_key
from .context import ResolverContext
from .models import Resolution, ResolutionOutcome
from .planner import MIN_QUERY_LENGTH, QueryPlanner

logger = structlog.get_logger("feedlinker.search.service")

CallType = Literal["multi", "tv", "movie"]


@dataclass
class _SearchState:
    """Mutable state of one Searching phase."""

    target_year: int | None
    best: ScoredCandidate | None = None
    page_two_used: set[str] = field(default_factory=set)


class TitleResolver:
    """Resolves feed item titles to one canonical catalog link.

    States: Idle -> CacheCheck -> (hit) Done | (miss) Searching -> Done.
    Query variants are tried sequentially in a fixed order; a failing
    variant is skipped and only full exhaustion ends in "no match". The
    outcome is written to the cache before returning, except when the
    resolution was cut short (not configured, invalid input, timeout).
    """

    def __init__(
        self,
        context: ResolverContext,
        settings: CatalogSettings,
        config: MatchingConfig | None = None,
        planner: QueryPlanner | None = None,
        client: CatalogClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        current_year: int | None = None,
    ) -> None:
        """Initialize title resolver.

        Args:
            context: Shared rate limiter and result cache
            settings: Catalog settings
            config: Matching configuration (if None, loads from settings file)
            planner: Query planner (built from config if None)
            client: Catalog client (built from settings and context if None)
            transport: Optional httpx transport for the built client
            current_year: Reference year for recency scoring (defaults to this year)
        """
        self.context = context
        self.settings = settings
        self.config = config or get_matching_config()
        self.planner = planner or QueryPlanner(
            max_variants=self.config.max_queries,
            include_localized=self.config.include_localized_queries,
        )
        self.client = client or CatalogClient(settings, context.rate_limiter, transport=transport)
        self.current_year = current_year

    @property
    def cache(self) -> ResultCache:
        return self.context.cache

    async def resolve(
        self,
        primary_title: str | None,
        localized_title: str | None = None,
        timeout: float | None = None,
    ) -> str | None:
        """Resolve a title pair to a canonical link.

        Never raises for "not found", missing configuration or catalog
        failures; all of them yield None.

        Args:
            primary_title: Primary (usually latin-script) title
            localized_title: Optional localized title
            timeout: Optional limit in seconds for the whole resolution

        Returns:
            Canonical catalog link or None
        """
        resolution = await self.resolve_with_outcome(primary_title, localized_title, timeout)
        return resolution.link

    async def resolve_with_outcome(
        self,
        primary_title: str | None,
        localized_title: str | None = None,
        timeout: float | None = None,
    ) -> Resolution:
        """Resolve a title pair and report how the resolution ended.

        Args:
            primary_title: Primary (usually latin-script) title
            localized_title: Optional localized title
            timeout: Optional limit in seconds for the whole resolution

        Returns:
            Resolution with link and outcome
        """
        with ensure_trace_context():
            resolution = await self._resolve(primary_title, localized_title, timeout)
        title_resolutions_total.labels(outcome=resolution.outcome.value).inc()
        return resolution

    async def _resolve(
        self,
        primary_title: str | None,
        localized_title: str | None,
        timeout: float | None,
    ) -> Resolution:
        primary = (primary_title or "").strip()
        localized = (localized_title or "").strip() or None

        if len(primary) < MIN_QUERY_LENGTH:
            logger.debug("Primary title too short, skipping resolution", primary=primary_title)
            return Resolution(outcome=ResolutionOutcome.INVALID_INPUT)

        if not self.client.is_configured:
            logger.debug("Catalog not configured, skipping resolution", primary=primary)
            return Resolution(outcome=ResolutionOutcome.NOT_CONFIGURED)

        # CacheCheck
        cache_key = make_cache_key(primary, localized)
        entry = self.cache.get(cache_key)
        if entry is not None:
            logger.info("Resolved from cache", key=cache_key, link=entry.resolved_link)
            return Resolution(link=entry.resolved_link, outcome=ResolutionOutcome.CACHE_HIT)

        queries = self.planner.plan(primary, localized)
        if not queries:
            logger.info("No usable query variants", primary=primary, localized=localized)
            return Resolution(outcome=ResolutionOutcome.INVALID_INPUT)

        # Searching
        target_year = extract_year(f"{primary} {localized or ''}")
        logger.info(
            "Searching catalog",
            primary=primary,
            localized=localized,
            queries=queries,
            target_year=target_year,
        )
        try:
            if timeout is not None:
                best = await asyncio.wait_for(self._search(queries, target_year), timeout)
            else:
                best = await self._search(queries, target_year)
        except TimeoutError:
            logger.warning("Resolution timed out", primary=primary, timeout=timeout)
            return Resolution(outcome=ResolutionOutcome.TIMEOUT, queries=queries)
        except CatalogNotConfiguredError:
            logger.warning("Catalog became unconfigured during resolution", primary=primary)
            return Resolution(outcome=ResolutionOutcome.NOT_CONFIGURED, queries=queries)

        # Done
        link = self.client.canonical_link(best.candidate) if best else None
        self.cache.set(cache_key, link)

        if best is None:
            logger.info("No catalog match", primary=primary, localized=localized)
            return Resolution(outcome=ResolutionOutcome.NO_MATCH, queries=queries)

        logger.info(
            "Catalog match found",
            primary=primary,
            link=link,
            score=best.score,
            query=best.query,
        )
        return Resolution(
            link=link,
            outcome=ResolutionOutcome.MATCHED,
            score=best.score,
            query=best.query,
            queries=queries,
        )

    async def _search(self, queries: list[str], target_year: int | None) -> ScoredCandidate | None:
        """Try query variants in order until one clears the early-exit score."""
        state = _SearchState(target_year=target_year)

        for query in queries[: self.config.max_queries]:
            try:
                await self._search_variant(query, state)
            except CatalogNotConfiguredError:
                raise
            except Exception as e:
                logger.warning("Query variant failed, skipping", query=query, error=str(e))
                continue

            if state.best is not None and state.best.score >= self.config.early_exit_score:
                logger.debug("Early exit on strong match", query=query, score=state.best.score)
                break

        return state.best

    async def _search_variant(self, query: str, state: _SearchState) -> None:
        """Combined search, then typed searches when no strong match exists yet."""
        ranked = await self._ranked_search("multi", query, state)

        best_tv = next((item for item in ranked if item.is_tv), None)
        best_movie = next((item for item in ranked if not item.is_tv), None)
        self._consider(state, best_tv, self.config.min_score)
        self._consider(state, best_movie, self.config.min_score)

        if state.best is not None and state.best.score >= self.config.strong_score:
            return

        for call_type in ("tv", "movie"):
            ranked = await self._ranked_search(call_type, query, state)
            if ranked:
                self._consider(state, ranked[0], self.config.typed_search_min_score)
            if state.best is not None and state.best.score >= self.config.early_exit_score:
                return

    def _search_function(
        self, call_type: CallType
    ) -> Callable[[str, int], Awaitable[list[CatalogCandidate]]]:
        if call_type == "tv":
            return self.client.search_tv
        if call_type == "movie":
            return self.client.search_movie
        return self.client.search_multi

    async def _ranked_search(
        self, call_type: CallType, query: str, state: _SearchState
    ) -> list[ScoredCandidate]:
        """Run one search call and rank its candidates.

        When page-two fallback is enabled, a full first page without any
        qualifying candidate triggers one page-2 call per call type.
        """
        search = self._search_function(call_type)
        candidates = await search(query, 1)
        ranked = self._rank(candidates, query, state.target_year)

        threshold = (
            self.config.min_score if call_type == "multi" else self.config.typed_search_min_score
        )
        if (
            self.config.page_two_fallback
            and call_type not in state.page_two_used
            and len(candidates) >= self.settings.max_results
            and not any(item.score >= threshold for item in ranked)
        ):
            state.page_two_used.add(call_type)
            logger.debug("Fetching second results page", call_type=call_type, query=query)
            more = await search(query, 2)
            ranked = sorted(
                ranked + self._rank(more, query, state.target_year),
                key=lambda item: item.score,
                reverse=True,
            )

        return ranked

    def _rank(
        self, candidates: list[CatalogCandidate], query: str, target_year: int | None
    ) -> list[ScoredCandidate]:
        return rank_candidates(
            candidates, query, target_year, self.config, current_year=self.current_year
        )

    def _consider(
        self, state: _SearchState, candidate: ScoredCandidate | None, threshold: int
    ) -> None:
        """Fold a candidate into the running best.

        With prefer_tv, a movie never replaces a TV entry; otherwise the
        higher score wins and ties keep the earlier candidate.
        """
        if candidate is None or candidate.score < threshold:
            return

        best = state.best
        if best is None:
            state.best = candidate
        elif self.config.prefer_tv and best.is_tv and not candidate.is_tv:
            return
        elif candidate.score > best.score:
            state.best = candidate

    async def test_credential(self) -> bool:
        """Lightweight connectivity check against the catalog."""
        return await self.client.test_credential()
