"""Query planning: turn extracted titles into a short list of catalog queries."""

from __future__ import annotations

import re

import structlog

from feedlinker.core.utils import collapse_whitespace

logger = structlog.get_logger("feedlinker.search.planner")

MIN_QUERY_LENGTH = 3

# Applied in order; brackets go first so their content never leaks into a query
_NOISE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\[[^\]]*\]|【[^】]*】|\([^)]*\)|（[^）]*）"),
    re.compile(r"\s*@\S+"),
    re.compile(r"(?<=[0-9\]])-[A-Za-z0-9]+(?=\s|$)"),
    re.compile(r"\b(?:S\d{1,2}(?:E\d{1,4})?|E\d{1,4}|Season\s*\d+)\b", re.IGNORECASE),
    re.compile(r"第[一二三四五六七八九十百\d]+[季集部]|全\d+集"),
    re.compile(r"(?<!\d)(?:19|20)\d{2}(?!\d)"),
    re.compile(r"\b(?:\d{3,4}[pi]|4K|8K|UHD|HDR(?:10)?|HD)\b", re.IGNORECASE),
    re.compile(
        r"\b(?:Blu-?Ray|WEB(?:-?DL|-?Rip)?|HDTV|DVDRip|BDRip|BRRip|HDRip|CAMRip|REMUX|AMZN|NF)\b",
        re.IGNORECASE,
    ),
    re.compile(
        r"(?<![A-Za-z0-9])(?:[HX]\.?26[45]|HEVC|AVC|AV1|AAC|DDP?5\.1|Atmos|10bit)(?![A-Za-z0-9])",
        re.IGNORECASE,
    ),
    re.compile(r"更新|完结|连载|全集"),
    # Release group left dangling once the tags before it are gone ("WEB-DL-FLUX")
    re.compile(r"\s-[A-Za-z0-9]+\s*$"),
)

SUBTITLE_SEPARATORS: tuple[str, ...] = (" - ", " – ", " — ", " | ", " / ", "：", ":")


def normalize_query(text: str | None) -> str:
    """Strip release noise from a title so it can be sent as a catalog query.

    Removes bracketed content, release-group markers, season/episode tokens,
    4-digit years and resolution/source/codec tokens, then collapses whitespace.

    Args:
        text: Title to normalize

    Returns:
        Normalized query ("" when nothing meaningful is left)
    """
    if not text:
        return ""

    cleaned = text.replace("_", " ")
    if " " not in cleaned.strip() and cleaned.count(".") >= 2:
        cleaned = cleaned.replace(".", " ")

    for pattern in _NOISE_PATTERNS:
        cleaned = pattern.sub(" ", cleaned)

    cleaned = collapse_whitespace(cleaned)
    return cleaned.strip(" -–—_|/:：")


def main_title(query: str) -> str | None:
    """Return the part before the first subtitle separator, if any."""
    for separator in SUBTITLE_SEPARATORS:
        if separator in query:
            prefix = query.split(separator, 1)[0].strip(" -–—_|/:：")
            if len(prefix) >= MIN_QUERY_LENGTH and prefix != query:
                return prefix
    return None


class QueryPlanner:
    """Builds the ordered query variants for one resolution."""

    def __init__(self, max_variants: int = 2, include_localized: bool = True) -> None:
        """Initialize query planner.

        Args:
            max_variants: Maximum number of queries per resolution
            include_localized: Whether the localized title becomes a query
        """
        self.max_variants = max_variants
        self.include_localized = include_localized

    def plan(self, primary: str | None, localized: str | None = None) -> list[str]:
        """Plan query variants, most specific first.

        Order: cleaned primary, cleaned localized, then the primary's main
        title (text before a subtitle separator). Variants are deduplicated
        case-insensitively, shorter than 3 characters are dropped, and the
        list is capped at max_variants.

        Args:
            primary: Primary title
            localized: Optional localized title

        Returns:
            Ordered list of distinct queries (possibly empty)
        """
        candidates: list[str] = []

        cleaned_primary = normalize_query(primary)
        if cleaned_primary:
            candidates.append(cleaned_primary)

        if self.include_localized:
            cleaned_localized = normalize_query(localized)
            if cleaned_localized:
                candidates.append(cleaned_localized)

        if cleaned_primary:
            prefix = main_title(cleaned_primary)
            if prefix:
                candidates.append(prefix)

        variants: list[str] = []
        seen: set[str] = set()
        for candidate in candidates:
            key = candidate.casefold()
            if len(candidate) < MIN_QUERY_LENGTH or key in seen:
                continue
            seen.add(key)
            variants.append(candidate)

        variants = variants[: self.max_variants]
        logger.debug("Planned query variants", primary=primary, localized=localized, queries=variants)
        return variants
