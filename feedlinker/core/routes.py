"""Application routes."""

from __future__ import annotations

import structlog
from fastapi import APIRouter

from feedlinker.routes import catalog, feeds, general

logger = structlog.get_logger("feedlinker.routes")


def create_app_router() -> APIRouter:
    """Create and configure main application router.

    Returns:
        Configured APIRouter instance
    """
    router = APIRouter()

    router.include_router(general.router, tags=["general"])
    router.include_router(catalog.create_catalog_router())
    router.include_router(feeds.create_feeds_router())
    logger.debug("Included catalog and feeds routers in app_router")

    return router
