"""Pydantic models for catalog search results."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from feedlinker.core.utils import parse_date_year

MediaType = Literal["tv", "movie"]


class CatalogCandidate(BaseModel):
    """One movie or TV entry returned by a catalog search."""

    id: int = Field(..., description="Catalog entry ID")
    display_title: str = Field(..., description="Localized title (movie) or name (TV)")
    original_title: str | None = Field(default=None, description="Title in the original language")
    media_type: MediaType = Field(..., description="Entry type")
    release_date: str | None = Field(
        default=None, description="Release date (movie) or first air date (TV), ISO format"
    )
    vote_average: float = Field(default=0.0, description="Average user rating (0-10)")
    popularity: float | None = Field(default=None, description="Catalog popularity index")
    poster_path: str | None = Field(default=None, description="Poster image path")

    @property
    def year(self) -> int | None:
        """Release/air year, if known."""
        return parse_date_year(self.release_date)

    @classmethod
    def from_api(
        cls, raw: dict[str, Any], media_type: MediaType | None = None
    ) -> CatalogCandidate | None:
        """Build a candidate from a raw search result.

        Args:
            raw: One entry of the API "results" array
            media_type: Forced type for typed searches; combined searches
                carry their own "media_type" field

        Returns:
            Candidate, or None for people and entries without an id or title
        """
        kind = media_type or raw.get("media_type")
        if kind not in ("tv", "movie"):
            return None

        entry_id = raw.get("id")
        if entry_id is None:
            return None

        if kind == "tv":
            title = raw.get("name") or raw.get("title")
            original = raw.get("original_name") or raw.get("original_title")
            released = raw.get("first_air_date") or raw.get("release_date")
        else:
            title = raw.get("title") or raw.get("name")
            original = raw.get("original_title") or raw.get("original_name")
            released = raw.get("release_date") or raw.get("first_air_date")

        if not title:
            return None

        return cls(
            id=int(entry_id),
            display_title=str(title),
            original_title=original or None,
            media_type=kind,
            release_date=released or None,
            vote_average=float(raw.get("vote_average") or 0.0),
            popularity=raw.get("popularity"),
            poster_path=raw.get("poster_path"),
        )
