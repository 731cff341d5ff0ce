"""Feed item metadata that is not a title: existing catalog links and category."""

from __future__ import annotations

import re

from .models import Category

CATALOG_LINK_RE = re.compile(
    r"https?://(?:www\.)?themoviedb\.org/(?:movie|tv)/\d+", re.IGNORECASE
)

_ANIME_KEYWORDS = ("动漫", "anime", "动画", "animation", "卡通", "cartoon", "新番", "番剧")
_SERIES_KEYWORDS = ("剧集", "series", "season", "episode", "电视剧", "tv show")
_MOVIE_KEYWORDS = ("电影", "movie", "film", "cinema")
_DOCUMENTARY_KEYWORDS = ("纪录片", "documentary", "记录片", "纪实")
_VARIETY_KEYWORDS = ("综艺", "variety", "真人秀", "reality show", "脱口秀", "talk show")

_ANIME_SEASON_SLOT_RE = re.compile(r"\d{4}\s*年\d+月档")
_SERIES_MARKER_RE = re.compile(r"s\d+e\d+|第.{1,3}?季|全\d+集")
_MOVIE_RELEASE_RE = re.compile(r"(?<!\d)(?:19|20)\d{2}(?!\d).*(?:720p|1080p|2160p|4k)")


def extract_catalog_link(description: str | None) -> str | None:
    """Return the first catalog link already present in a description."""
    if not description:
        return None
    match = CATALOG_LINK_RE.search(description)
    return match.group(0) if match else None


def _contains_any(content: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in content for keyword in keywords)


def categorize_item(title: str | None, description: str | None = None) -> Category:
    """Classify a feed item from keywords in its title and description.

    Categories are checked in order: anime, series, movie, documentary,
    variety; anything else is OTHER.
    """
    content = f"{title or ''} {description or ''}".lower()

    if _contains_any(content, _ANIME_KEYWORDS) or _ANIME_SEASON_SLOT_RE.search(content):
        return Category.ANIME

    if _contains_any(content, _SERIES_KEYWORDS) or _SERIES_MARKER_RE.search(content):
        return Category.SERIES

    if _contains_any(content, _MOVIE_KEYWORDS) or _MOVIE_RELEASE_RE.search(content):
        return Category.MOVIE

    if _contains_any(content, _DOCUMENTARY_KEYWORDS):
        return Category.DOCUMENTARY

    if _contains_any(content, _VARIETY_KEYWORDS):
        return Category.VARIETY

    return Category.OTHER
