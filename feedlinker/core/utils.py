"""Shared string utilities for Feedlinker."""

from __future__ import annotations

import re
from datetime import date

# Han ideographs; localized titles are matched against this range
CJK_CHARS = "\u4e00-\u9fff"
# Hiragana and katakana, used to recognize Japanese alternate titles
KANA_CHARS = "\u3040-\u309f\u30a0-\u30ff"

_YEAR_RE = re.compile(r"(?<!\d)((?:19|20)\d{2})(?!\d)")


def collapse_whitespace(value: str | None) -> str:
    """Collapse runs of whitespace into single spaces and trim.

    Args:
        value: Text to clean

    Returns:
        Cleaned text ("" for None)
    """
    if not value:
        return ""
    return re.sub(r"\s+", " ", value).strip()


def strip_edge_separators(value: str) -> str:
    """Remove leading/trailing hyphens, underscores and whitespace."""
    value = re.sub(r"[\-_\s]+$", "", value)
    return re.sub(r"^[\-_\s]+", "", value)


def simplify_label(value: str | None) -> str:
    """Lowercase a title and collapse whitespace for comparisons.

    Unlike a search query, punctuation is kept so that "Star Wars: Andor"
    and "Star Wars Andor" still compare as different strings.

    Args:
        value: Title to simplify

    Returns:
        Simplified title
    """
    return collapse_whitespace(value).lower()


def extract_year(value: str | None, today: date | None = None) -> int | None:
    """Extract a plausible 4-digit year from text.

    Only years in [1900, current year + 2] are accepted.

    Args:
        value: Text to search
        today: Reference date (defaults to today)

    Returns:
        Year as int or None if not found
    """
    if not value:
        return None
    current_year = (today or date.today()).year
    for match in _YEAR_RE.finditer(value):
        year = int(match.group(1))
        if 1900 <= year <= current_year + 2:
            return year
    return None


def parse_date_year(value: str | None) -> int | None:
    """Return the year of an ISO date string like "2023-06-22"."""
    if not value:
        return None
    match = re.match(r"\s*(\d{4})", value)
    if not match:
        return None
    return int(match.group(1))


def has_cjk(value: str | None) -> bool:
    """Check whether text contains any Han ideograph."""
    if not value:
        return False
    return re.search(f"[{CJK_CHARS}]", value) is not None
