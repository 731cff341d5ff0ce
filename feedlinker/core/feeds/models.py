"""Pydantic models for feed items and the shows tracked from them."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from feedlinker.core.extraction.models import Category


class RawFeedItem(BaseModel):
    """One normalized item supplied by the feed collaborator."""

    title: str = Field(..., description="Item title")
    description: str = Field(default="", description="Item description (may contain HTML)")
    published_at: datetime | None = Field(default=None, description="Publication date")
    link: str | None = Field(default=None, description="Torrent or download link")


class TrackedShow(BaseModel):
    """A movie or TV show seen in one or more feeds."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Unique show ID")
    title: str = Field(..., description="Primary title")
    localized_title: str | None = Field(default=None, description="Localized title")
    catalog_link: str | None = Field(default=None, description="Canonical catalog link")
    category: Category = Field(default=Category.OTHER, description="Content category")
    first_seen: datetime = Field(..., description="When the show was first seen")
    last_seen: datetime = Field(..., description="When the show was last updated")
    count: int = Field(default=1, description="Number of feed items for this show")
    is_new: bool = Field(default=True, description="Whether the show was seen for the first time")
    sources: list[str] = Field(default_factory=list, description="Feeds the show was seen in")
    published_at: datetime | None = Field(default=None, description="Newest publication date")
    torrent_link: str | None = Field(default=None, description="Link of the newest item")
