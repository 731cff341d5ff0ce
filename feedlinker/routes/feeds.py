"""Feed processing routes."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from feedlinker.core.dependencies import get_feed_processor
from feedlinker.core.feeds import FeedProcessor, RawFeedItem

logger = structlog.get_logger("feedlinker.routes.feeds")


class ProcessFeedRequest(BaseModel):
    """Items of one feed, already fetched and parsed."""

    source: str = Field(..., description="Feed name")
    items: list[RawFeedItem] = Field(default_factory=list, description="Feed items")


def create_feeds_router() -> APIRouter:
    """Create feeds router.

    Returns:
        Configured APIRouter instance
    """
    router = APIRouter(prefix="/api/feeds", tags=["feeds"])

    @router.post("/process")
    async def process_feed(
        payload: ProcessFeedRequest,
        processor: FeedProcessor = Depends(get_feed_processor),
    ) -> list[dict[str, Any]]:
        """Turn feed items into tracked shows with catalog links."""
        source = payload.source.strip()
        if not source:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Source cannot be empty."
            )

        shows = await processor.process(payload.items, source)
        return [show.model_dump(mode="json") for show in shows]

    return router
