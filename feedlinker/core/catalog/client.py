"""TMDB catalog client with rate limiting and retry logic."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from feedlinker import __version__
from feedlinker.core.config import CatalogSettings
from feedlinker.core.metrics import catalog_requests_total, catalog_retries_total

from .errors import CatalogNotConfiguredError, CatalogRequestError, TransientCatalogError
from .models import CatalogCandidate, MediaType
from .rate_limiter import RateLimiter
from .retry import RetryPolicy, retry_async

logger = structlog.get_logger("feedlinker.catalog.client")

SEARCH_MULTI = "search/multi"
SEARCH_TV = "search/tv"
SEARCH_MOVIE = "search/movie"
CONFIGURATION = "configuration"


def _endpoint_label(endpoint: str) -> str:
    return endpoint.rsplit("/", 1)[-1]


def _is_retryable(error: Exception) -> bool:
    return isinstance(error, TransientCatalogError)


class CatalogClient:
    """Client for the TMDB search API.

    Features:
    - Combined, TV-only and movie-only search
    - Process-wide request spacing through a shared RateLimiter
    - Exponential backoff retry on timeouts, network errors, HTTP 429 and 5xx
    - Optional outbound proxy

    Failed searches degrade to an empty candidate list; only a missing
    configuration is raised to the caller.
    """

    def __init__(
        self,
        settings: CatalogSettings,
        rate_limiter: RateLimiter,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize catalog client.

        Args:
            settings: Catalog settings (API key, URLs, retry policy, proxy)
            rate_limiter: Shared rate limiter
            transport: Optional httpx transport (tests use httpx.MockTransport)
            sleep: Async sleep used for retry backoff
        """
        self.settings = settings
        self.rate_limiter = rate_limiter
        self.base_url = settings.api_base_url.rstrip("/")
        self.retry_policy = RetryPolicy(
            max_retries=settings.max_retries,
            base_delay=settings.retry_base_delay,
            multiplier=settings.retry_multiplier,
            max_delay=settings.retry_max_delay,
            jitter=settings.retry_jitter,
        )
        self._transport = transport
        self._sleep = sleep

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured

    def _ensure_configured(self) -> None:
        if not self.is_configured:
            raise CatalogNotConfiguredError("Catalog is disabled or has no API key")

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.timeout_seconds,
            proxy=self.settings.proxy.url,
            transport=self._transport,
            headers={
                "User-Agent": f"Feedlinker/{__version__}",
                "Accept": "application/json",
            },
        )

    async def _request_once(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        """Perform one rate-limited GET and classify failures."""
        await self.rate_limiter.wait()

        url = f"{self.base_url}/{endpoint}"
        request_params = {**params, "api_key": self.settings.api_key}

        try:
            async with self._build_client() as client:
                response = await client.get(url, params=request_params)
        except httpx.TimeoutException as e:
            raise TransientCatalogError(f"Timeout calling {endpoint}") from e
        except httpx.TransportError as e:
            raise TransientCatalogError(f"Network error calling {endpoint}: {e}") from e

        status = response.status_code
        if status == 429 or status >= 500:
            raise TransientCatalogError(f"HTTP {status} from {endpoint}", status_code=status)
        if status >= 400:
            raise CatalogRequestError(f"HTTP {status} from {endpoint}", status_code=status)

        try:
            data = response.json()
        except ValueError as e:
            raise CatalogRequestError(f"Invalid JSON from {endpoint}") from e

        if not isinstance(data, dict):
            raise CatalogRequestError(f"Unexpected payload from {endpoint}")
        return data

    async def _get(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        """GET an endpoint with rate limiting and retry.

        Raises:
            TransientCatalogError: After retries are exhausted
            CatalogRequestError: On a non-retryable failure
        """
        label = _endpoint_label(endpoint)
        logger.debug("Calling catalog API", endpoint=endpoint, params=params)

        def on_retry(attempt: int, error: Exception, wait_time: float) -> None:
            catalog_retries_total.labels(endpoint=label).inc()
            logger.warning(
                "Transient catalog error, retrying",
                endpoint=endpoint,
                error=str(error),
                attempt=attempt + 1,
                wait_seconds=wait_time,
            )

        try:
            data = await retry_async(
                lambda: self._request_once(endpoint, params),
                self.retry_policy,
                _is_retryable,
                sleep=self._sleep,
                on_retry=on_retry,
            )
        except TransientCatalogError:
            catalog_requests_total.labels(endpoint=label, outcome="transient_error").inc()
            raise
        except CatalogRequestError:
            catalog_requests_total.labels(endpoint=label, outcome="request_error").inc()
            raise

        catalog_requests_total.labels(endpoint=label, outcome="success").inc()
        return data

    async def _search(
        self,
        endpoint: str,
        query: str,
        page: int,
        media_type: MediaType | None,
    ) -> list[CatalogCandidate]:
        self._ensure_configured()

        params = {
            "query": query,
            "page": page,
            "language": self.settings.language,
            "include_adult": str(self.settings.include_adult).lower(),
        }
        try:
            data = await self._get(endpoint, params)
        except (TransientCatalogError, CatalogRequestError) as e:
            logger.warning(
                "Catalog search failed, treating as no candidates",
                endpoint=endpoint,
                query=query,
                page=page,
                error=str(e),
            )
            return []

        results = data.get("results")
        if not isinstance(results, list):
            logger.warning("Catalog search returned no results array", endpoint=endpoint, query=query)
            return []

        candidates: list[CatalogCandidate] = []
        for raw in results:
            if not isinstance(raw, dict):
                continue
            try:
                candidate = CatalogCandidate.from_api(raw, media_type)
            except (ValueError, TypeError, ValidationError) as e:
                logger.warning(
                    "Skipping malformed catalog result",
                    endpoint=endpoint,
                    query=query,
                    entry_id=raw.get("id"),
                    error=str(e),
                )
                continue
            if candidate is not None:
                candidates.append(candidate)
            if len(candidates) >= self.settings.max_results:
                break

        logger.debug(
            "Catalog search finished",
            endpoint=endpoint,
            query=query,
            page=page,
            candidates=len(candidates),
        )
        return candidates

    async def search_multi(self, query: str, page: int = 1) -> list[CatalogCandidate]:
        """Combined movie + TV search. People are filtered out.

        Raises:
            CatalogNotConfiguredError: If the catalog is disabled or has no key
        """
        return await self._search(SEARCH_MULTI, query, page, None)

    async def search_tv(self, query: str, page: int = 1) -> list[CatalogCandidate]:
        """TV-only search.

        Raises:
            CatalogNotConfiguredError: If the catalog is disabled or has no key
        """
        return await self._search(SEARCH_TV, query, page, "tv")

    async def search_movie(self, query: str, page: int = 1) -> list[CatalogCandidate]:
        """Movie-only search.

        Raises:
            CatalogNotConfiguredError: If the catalog is disabled or has no key
        """
        return await self._search(SEARCH_MOVIE, query, page, "movie")

    async def test_credential(self) -> bool:
        """Check the API key against the low-cost configuration endpoint.

        Returns:
            True if the catalog accepted the key, False otherwise
            (including when the catalog is not configured)
        """
        if not self.is_configured:
            logger.info("Catalog credential test skipped, catalog not configured")
            return False

        try:
            await self._get(CONFIGURATION, {})
        except (TransientCatalogError, CatalogRequestError) as e:
            logger.warning("Catalog credential test failed", error=str(e))
            return False

        logger.info("Catalog credential test succeeded")
        return True

    def canonical_link(self, candidate: CatalogCandidate) -> str:
        """Canonical site URL of a candidate, e.g. https://www.themoviedb.org/tv/136315."""
        base = self.settings.site_base_url.rstrip("/")
        return f"{base}/{candidate.media_type}/{candidate.id}"

    def image_url(self, path: str | None, size: str = "w500") -> str:
        """Full poster URL for an image path, or "" when there is no path."""
        if not path:
            return ""
        return f"{self.settings.image_base_url.rstrip('/')}/{size}{path}"
