"""Catalog routes: title resolution, credential test and title extraction."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from feedlinker.core.dependencies import get_title_resolver
from feedlinker.core.extraction import (
    categorize_item,
    extract_catalog_link,
    extract_titles,
)
from feedlinker.core.search.service import TitleResolver
from feedlinker.core.tracing import get_trace_id

logger = structlog.get_logger("feedlinker.routes.catalog")


class ResolveRequest(BaseModel):
    """Title pair to resolve."""

    primary_title: str = Field(..., description="Primary (usually latin-script) title")
    localized_title: str | None = Field(default=None, description="Optional localized title")


class ExtractRequest(BaseModel):
    """Raw feed item text to extract titles from."""

    title: str = Field(..., description="Raw feed item title")
    description: str | None = Field(default=None, description="Optional item description")


def create_catalog_router() -> APIRouter:
    """Create catalog router.

    Returns:
        Configured APIRouter instance
    """
    router = APIRouter(prefix="/api/catalog", tags=["catalog"])

    @router.post("/resolve")
    async def resolve_title(
        payload: ResolveRequest,
        resolver: TitleResolver = Depends(get_title_resolver),
    ) -> dict[str, Any]:
        """Resolve a title pair to a canonical catalog link.

        "No match" and a missing configuration are normal results, not errors.
        """
        resolution = await resolver.resolve_with_outcome(
            payload.primary_title, payload.localized_title
        )
        return {
            "link": resolution.link,
            "outcome": resolution.outcome.value,
            "score": resolution.score,
            "queries": resolution.queries,
            "trace_id": get_trace_id(),
        }

    @router.get("/test")
    async def test_catalog_credential(
        resolver: TitleResolver = Depends(get_title_resolver),
    ) -> dict[str, Any]:
        """Check the configured API key against the catalog."""
        ok = await resolver.test_credential()
        logger.info("Catalog credential tested", ok=ok)
        return {"ok": ok, "trace_id": get_trace_id()}

    @router.post("/extract")
    async def extract_item_titles(payload: ExtractRequest) -> dict[str, Any]:
        """Extract titles, an existing catalog link and the category of a feed item."""
        extracted = extract_titles(payload.title, payload.description)
        return {
            "primary": extracted.primary if extracted else None,
            "localized": extracted.localized if extracted else None,
            "catalog_link": extract_catalog_link(payload.description),
            "category": categorize_item(payload.title, payload.description).value,
            "trace_id": get_trace_id(),
        }

    return router
