"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import httpx
import pytest

from feedlinker.core.catalog.client import CatalogClient
from feedlinker.core.catalog.rate_limiter import RateLimiter
from feedlinker.core.config import CatalogSettings, get_settings, reload_settings
from feedlinker.core.matching.config import MatchingConfig, reload_matching_config
from feedlinker.core.search.cache import ResultCache
from feedlinker.core.search.context import ResolverContext
from feedlinker.core.search.service import TitleResolver


@pytest.fixture(autouse=True)
def isolated_data_dir(monkeypatch, tmp_path: Path) -> Iterator[Path]:
    """Point the data directory at a temp dir so no real settings.json is read."""
    monkeypatch.setenv("FEEDLINKER_DATA_DIR", str(tmp_path))
    for name in ("FEEDLINKER_ENV", "FEEDLINKER_CATALOG__API_KEY", "FEEDLINKER_CATALOG__ENABLED"):
        monkeypatch.delenv(name, raising=False)
    reload_settings()
    reload_matching_config()

    yield tmp_path

    get_settings.cache_clear()


class FakeCatalog:
    """In-memory stand-in for the TMDB API, served through httpx.MockTransport.

    Responses are registered per endpoint ("search/multi", "search/tv",
    "search/movie", "configuration"), optionally per query string. Every
    request is recorded in `calls` as (endpoint, query params).
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, str]]] = []
        self._routes: dict[tuple[str, str | None], tuple[int, object]] = {}

    def respond(
        self,
        endpoint: str,
        results: list[dict] | None = None,
        status_code: int = 200,
        query: str | None = None,
        payload: object | None = None,
    ) -> None:
        body = payload if payload is not None else {"page": 1, "results": results or []}
        self._routes[(endpoint, query)] = (status_code, body)

    def fail(self, endpoint: str, error: type[Exception], query: str | None = None) -> None:
        """Make an endpoint raise an httpx error (e.g. httpx.ConnectTimeout)."""
        self._routes[(endpoint, query)] = (0, error)

    def calls_to(self, endpoint: str) -> list[dict[str, str]]:
        return [params for called, params in self.calls if called == endpoint]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        endpoint = request.url.path.split("/3/", 1)[-1]
        params = dict(request.url.params)
        self.calls.append((endpoint, params))

        route = self._routes.get((endpoint, params.get("query"))) or self._routes.get(
            (endpoint, None)
        )
        if route is None:
            return httpx.Response(200, json={"page": 1, "results": []})

        status_code, body = route
        if isinstance(body, type) and issubclass(body, Exception):
            raise body("simulated failure", request=request)
        return httpx.Response(status_code, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    """Fake TMDB API with no registered responses (every search is empty)."""
    return FakeCatalog()


@pytest.fixture
def catalog_settings() -> CatalogSettings:
    """Configured catalog settings without request spacing or backoff delays."""
    return CatalogSettings(
        api_key="test-api-key",
        enabled=True,
        min_request_interval=0,
        retry_base_delay=0,
        retry_max_delay=0,
    )


@pytest.fixture
def resolver_context() -> ResolverContext:
    """Fresh rate limiter and result cache."""
    return ResolverContext(rate_limiter=RateLimiter(min_interval=0), cache=ResultCache())


async def _no_sleep(_: float) -> None:
    return None


@pytest.fixture
def catalog_client(
    catalog_settings: CatalogSettings, resolver_context: ResolverContext, fake_catalog: FakeCatalog
) -> CatalogClient:
    """Catalog client wired to the fake catalog."""
    return CatalogClient(
        catalog_settings,
        resolver_context.rate_limiter,
        transport=fake_catalog.transport,
        sleep=_no_sleep,
    )


@pytest.fixture
def resolver(
    catalog_settings: CatalogSettings,
    resolver_context: ResolverContext,
    catalog_client: CatalogClient,
) -> TitleResolver:
    """Title resolver with default matching config and a fixed reference year."""
    return TitleResolver(
        resolver_context,
        catalog_settings,
        config=MatchingConfig(),
        client=catalog_client,
        current_year=2025,
    )
