"""Application entry point for Feedlinker."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from feedlinker import __version__
from feedlinker.core.config import get_settings
from feedlinker.core.logging import setup_logging
from feedlinker.core.metrics import setup_metrics
from feedlinker.core.middleware import TracingMiddleware
from feedlinker.core.routes import create_app_router
from feedlinker.core.search.context import ResolverContext

logger = structlog.get_logger("feedlinker.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "Starting Feedlinker application",
        version=__version__,
        env=settings.env,
        host=settings.host_bind_address,
        port=settings.host_port,
        catalog_configured=settings.catalog.is_configured,
    )

    # One rate limiter and one result cache for the whole process
    app.state.resolver_context = ResolverContext.from_settings(settings)

    yield

    logger.info(
        "Shutting down Feedlinker application",
        cached_links=len(app.state.resolver_context.cache),
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    # Get fresh settings (not module-level cached)
    settings = get_settings()

    # Setup logging first (use settings)
    setup_logging(
        debug=settings.is_debug,
        logs_dir=settings.logs_dir if settings.log_to_file else None,
    )

    app = FastAPI(
        title="Feedlinker",
        description="Resolves torrent feed items to canonical TMDB links",
        version=__version__,
        lifespan=lifespan,
    )

    # Add tracing middleware (before other middleware to capture all requests)
    app.add_middleware(TracingMiddleware)

    # Setup metrics (before routes to instrument all routes)
    setup_metrics(app, __version__)

    app.include_router(create_app_router())

    return app


def main() -> None:
    """Main entry point."""
    # Reload settings to ensure we have the latest values
    from feedlinker.core.config import reload_settings

    current_settings = reload_settings()
    app = create_app()

    import uvicorn

    logger.info(
        "Starting uvicorn server",
        host=current_settings.host_bind_address,
        port=current_settings.host_port,
    )

    uvicorn.run(
        app,
        host=current_settings.host_bind_address,
        port=current_settings.host_port,
        log_config=None,  # We use structlog
    )


if __name__ == "__main__":
    main()
