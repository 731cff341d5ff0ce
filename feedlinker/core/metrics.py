"""Prometheus metrics configuration."""

from __future__ import annotations

import structlog
from fastapi import FastAPI
from prometheus_client import Counter, Gauge, Histogram
from prometheus_fastapi_instrumentator import Instrumentator

logger = structlog.get_logger("feedlinker.metrics")

# Application info
app_info = Gauge(
    "app_info",
    "Application information",
    ["version"],
)

# Catalog client metrics
catalog_requests_total = Counter(
    "catalog_requests_total",
    "Total number of outbound catalog API calls",
    ["endpoint", "outcome"],  # outcome: success, transient_error, request_error
)
catalog_retries_total = Counter(
    "catalog_retries_total",
    "Total number of catalog API retry attempts",
    ["endpoint"],
)
catalog_rate_limit_wait_seconds = Histogram(
    "catalog_rate_limit_wait_seconds",
    "Time spent waiting on the catalog rate limiter",
    buckets=(0.0, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0),
)

# Resolution metrics
title_resolutions_total = Counter(
    "title_resolutions_total",
    "Total number of title resolutions by outcome",
    ["outcome"],  # outcome: cache_hit, matched, no_match, not_configured, invalid_input, timeout
)
result_cache_events_total = Counter(
    "result_cache_events_total",
    "Resolved-link cache events",
    ["event"],  # event: hit, miss, expired, evicted
)


def setup_metrics(app: FastAPI, app_version: str) -> None:
    """Setup Prometheus metrics using prometheus-fastapi-instrumentator.

    Args:
        app: FastAPI application instance
        app_version: Application version
    """
    if getattr(app.state, "_metrics_initialized", False):
        logger.debug("Metrics already initialized for this app instance, skipping")
        return

    instrumentator = Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics", "/docs", "/openapi.json", "/redoc"],
    )
    instrumentator.instrument(app).expose(app, endpoint="/metrics")

    app.state._metrics_initialized = True
    app_info.labels(version=app_version).set(1)

    logger.info("Metrics initialized", version=app_version)
