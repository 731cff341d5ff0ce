"""Models produced by title extraction."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Category(StrEnum):
    """Coarse content category of a feed item."""

    ANIME = "anime"
    SERIES = "series"
    MOVIE = "movie"
    DOCUMENTARY = "documentary"
    VARIETY = "variety"
    OTHER = "other"


@dataclass(frozen=True)
class ExtractedTitle:
    """Titles derived from one feed item.

    Attributes:
        primary: Canonical (usually latin-script) title used for catalog search
        localized: Optional localized (CJK) alternate title
    """

    primary: str
    localized: str | None = None
