"""Tests for the HTTP API."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from feedlinker import __version__
from feedlinker.app import create_app
from feedlinker.core.dependencies import get_feed_processor, get_title_resolver
from feedlinker.core.feeds import FeedProcessor

BEAR_TV = {
    "id": 136315,
    "media_type": "tv",
    "name": "The Bear",
    "first_air_date": "2022-06-23",
    "vote_average": 8.5,
}

BEAR_DESCRIPTION = (
    "<p>◎译　　名　熊家餐厅 第三季/熊家食堂<br />"
    "◎片　　名　The Bear<br />"
    "◎年　　代　2024<br />"
    "◎产　　地　美国<br />"
    "◎类　　别　剧情 / 喜剧</p>"
    "<p>https://www.themoviedb.org/tv/136315</p>"
)


@pytest.fixture(autouse=True)
def reset_prometheus_registry():
    """Reset Prometheus registry before each test to avoid duplicate metric errors."""
    collectors = list(REGISTRY._collector_to_names.keys())
    for collector in collectors:
        REGISTRY.unregister(collector)


@pytest.fixture
def app():
    """Application with default (unconfigured) settings."""
    return create_app()


@pytest.fixture
def client(app) -> TestClient:
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def catalog_client_app(app, resolver, catalog_settings):
    """Application whose resolver talks to the fake catalog."""
    app.dependency_overrides[get_title_resolver] = lambda: resolver
    app.dependency_overrides[get_feed_processor] = lambda: FeedProcessor(
        catalog_settings, resolver=resolver
    )
    return app


class TestGeneralRoutes:
    """Root, health and tracing."""

    def test_root(self, client: TestClient) -> None:
        """Root endpoint reports version and trace ID."""
        response = client.get("/api/")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Hello, Feedlinker!"
        assert data["version"] == __version__
        assert data["trace_id"] == response.headers["X-Trace-ID"]

    def test_health(self, client: TestClient) -> None:
        """Health endpoint returns healthy."""
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_generated_trace_id(self, client: TestClient) -> None:
        """A trace ID is generated when none is sent."""
        response = client.get("/api/health")

        assert len(response.headers["X-Trace-ID"]) == 32

    def test_incoming_trace_id_is_echoed(self, client: TestClient) -> None:
        """A valid caller trace ID is reused."""
        response = client.get("/api/", headers={"X-Trace-ID": "feed-poll-0001"})

        assert response.headers["X-Trace-ID"] == "feed-poll-0001"
        assert response.json()["trace_id"] == "feed-poll-0001"

    def test_invalid_trace_id_is_replaced(self, client: TestClient) -> None:
        """Malformed trace IDs are not echoed back."""
        response = client.get("/api/", headers={"X-Trace-ID": "bad id!"})

        assert response.headers["X-Trace-ID"] != "bad id!"
        assert len(response.headers["X-Trace-ID"]) == 32

    def test_metrics_endpoint(self, client: TestClient) -> None:
        """Prometheus metrics are exposed."""
        client.get("/api/health")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text


class TestCatalogRoutes:
    """Resolution, credential test and extraction."""

    def test_resolve_without_configuration(self, client: TestClient) -> None:
        """An unconfigured catalog is a normal result, not an error."""
        response = client.post("/api/catalog/resolve", json={"primary_title": "The Bear"})

        assert response.status_code == 200
        data = response.json()
        assert data["link"] is None
        assert data["outcome"] == "not_configured"

    def test_resolve_with_catalog(self, catalog_client_app, fake_catalog) -> None:
        """A resolved link is returned with the planned queries."""
        fake_catalog.respond("search/multi", [BEAR_TV])
        client = TestClient(catalog_client_app)

        response = client.post(
            "/api/catalog/resolve",
            json={"primary_title": "The Bear", "localized_title": "熊家餐厅"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["link"] == "https://www.themoviedb.org/tv/136315"
        assert data["outcome"] == "matched"
        assert data["queries"] == ["The Bear", "熊家餐厅"]
        assert data["trace_id"] == response.headers["X-Trace-ID"]

    def test_resolve_twice_hits_cache(self, catalog_client_app, fake_catalog) -> None:
        """The second resolution of a pair does not call the catalog."""
        fake_catalog.respond("search/multi", [BEAR_TV])
        client = TestClient(catalog_client_app)

        client.post("/api/catalog/resolve", json={"primary_title": "The Bear"})
        calls = len(fake_catalog.calls)
        response = client.post("/api/catalog/resolve", json={"primary_title": "The Bear"})

        assert response.json()["outcome"] == "cache_hit"
        assert len(fake_catalog.calls) == calls

    def test_resolve_requires_primary_title(self, client: TestClient) -> None:
        """Request validation rejects a missing primary title."""
        response = client.post("/api/catalog/resolve", json={"localized_title": "熊家餐厅"})

        assert response.status_code == 422

    def test_credential_without_configuration(self, client: TestClient) -> None:
        """Credential test fails without an API key."""
        response = client.get("/api/catalog/test")

        assert response.status_code == 200
        assert response.json()["ok"] is False

    def test_credential_with_catalog(self, catalog_client_app, fake_catalog) -> None:
        """Credential test succeeds when the catalog accepts the key."""
        fake_catalog.respond("configuration", payload={"images": {}})
        client = TestClient(catalog_client_app)

        response = client.get("/api/catalog/test")

        assert response.json()["ok"] is True
        assert [endpoint for endpoint, _ in fake_catalog.calls] == ["configuration"]

    def test_extract(self, client: TestClient) -> None:
        """Titles, link and category are extracted from a feed item."""
        response = client.post(
            "/api/catalog/extract",
            json={"title": "The Bear S03E01 1080p", "description": BEAR_DESCRIPTION},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["primary"] == "The Bear"
        assert data["localized"] == "熊家餐厅"
        assert data["catalog_link"] == "https://www.themoviedb.org/tv/136315"
        assert data["category"] == "series"

    def test_extract_without_usable_title(self, client: TestClient) -> None:
        """Insufficient metadata yields nulls."""
        response = client.post("/api/catalog/extract", json={"title": "xy"})

        data = response.json()
        assert data["primary"] is None
        assert data["localized"] is None
        assert data["catalog_link"] is None


class TestFeedRoutes:
    """Feed processing."""

    def test_process_feed(self, catalog_client_app, fake_catalog) -> None:
        """Items collapse into shows with resolved links."""
        fake_catalog.respond("search/multi", [BEAR_TV])
        client = TestClient(catalog_client_app)

        response = client.post(
            "/api/feeds/process",
            json={
                "source": "pt-a",
                "items": [
                    {
                        "title": "The Bear S03E01 1080p",
                        "published_at": "2024-06-01T00:00:00Z",
                        "link": "magnet:e01",
                    },
                    {
                        "title": "The Bear S03E02 1080p",
                        "published_at": "2024-06-08T00:00:00Z",
                        "link": "magnet:e02",
                    },
                ],
            },
        )

        assert response.status_code == 200
        shows = response.json()
        assert len(shows) == 1
        assert shows[0]["title"] == "The Bear"
        assert shows[0]["catalog_link"] == "https://www.themoviedb.org/tv/136315"
        assert shows[0]["count"] == 2
        assert shows[0]["torrent_link"] == "magnet:e02"
        assert shows[0]["sources"] == ["pt-a"]

    def test_process_feed_without_catalog(self, client: TestClient) -> None:
        """Without a configured catalog, shows are still tracked."""
        response = client.post(
            "/api/feeds/process",
            json={"source": "pt-a", "items": [{"title": "Shogun S01 2160p"}]},
        )

        assert response.status_code == 200
        shows = response.json()
        assert shows[0]["title"] == "Shogun"
        assert shows[0]["catalog_link"] is None

    def test_empty_source_is_rejected(self, client: TestClient) -> None:
        """Source name is required."""
        response = client.post("/api/feeds/process", json={"source": "  ", "items": []})

        assert response.status_code == 400
