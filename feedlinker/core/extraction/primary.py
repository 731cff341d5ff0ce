"""Primary title extraction from feed item titles and descriptions."""

from __future__ import annotations

import html
import re

import structlog

from feedlinker.core.utils import CJK_CHARS, collapse_whitespace, has_cjk, strip_edge_separators

from .rules import MIN_FRAGMENT_LENGTH, ExtractionRule, run_cascade

logger = structlog.get_logger("feedlinker.extraction.primary")

# Full-width space appears between label characters in many release descriptions
_GAP = r"[\s\u3000]*"

_LEADING_BRACKETS_RE = re.compile(r"^(?:\s*(?:\[[^\]]*\]|【[^】]*】))+")
_TRAILING_BRACKETS_RE = re.compile(r"(?:(?:\[[^\]]*\]|【[^】]*】)\s*)+$")
_FILE_EXTENSION_RE = re.compile(r"\.(?:mkv|mp4|avi|ts|m2ts|torrent)$", re.IGNORECASE)
_HTML_BREAK_RE = re.compile(r"<br\s*/?>|</p>|</div>", re.IGNORECASE)
_HTML_TAG_RE = re.compile(r"<[^>]+>")


def _clean_labeled_value(value: str) -> str:
    """Drop trailing bracketed notes and separators from a labeled field value."""
    value = value.strip()
    value = re.sub(r"\s*\([^)]*\)\s*$", "", value)
    value = re.sub(r"\s*\[[^\]]*\]\s*$", "", value)
    return re.sub(r"\s*[\-_]+\s*$", "", value)


def _is_label_noise(value: str) -> bool:
    """Reject values that still contain another label marker."""
    return "◎" in value or "：" in value


def _labeled(name: str, label: str) -> ExtractionRule:
    return ExtractionRule(
        name=name,
        pattern=re.compile(label + _GAP + r"([^\n\r]+)", re.IGNORECASE),
        cleaner=_clean_labeled_value,
        reject=_is_label_noise,
    )


DESCRIPTION_RULES: tuple[ExtractionRule, ...] = (
    _labeled("labeled_title", "◎片" + _GAP + "名"),
    _labeled("labeled_original_name", "◎原" + _GAP + "名"),
    _labeled("labeled_translated_name", "◎译" + _GAP + "名"),
    _labeled("labeled_english_name", "◎英文名"),
    _labeled("title_field", r"(?<![A-Za-z])Title\s*:"),
    _labeled("name_field", r"(?<![A-Za-z])Name\s*:"),
    ExtractionRule(
        name="bracketed_release_name",
        pattern=re.compile(
            r"\[([A-Za-z][A-Za-z0-9\s\-.:']+?)(?:\s+S\d+|\s+\d{4}|\s+\d{3,4}p|\s+WEB|\s+BluRay)",
            re.IGNORECASE,
        ),
        cleaner=_clean_labeled_value,
    ),
)


def _clean_title_fragment(value: str) -> str:
    """Trim separators and drop localized runs from a mixed-script fragment.

    "The Bear 熊家餐厅" keeps only "The Bear"; the localized part is picked up
    by the localized-title cascade instead.
    """
    value = strip_edge_separators(value).rstrip("(（")
    if has_cjk(value) and re.search(r"[A-Za-z]", value):
        latin_only = collapse_whitespace(re.sub(f"[{CJK_CHARS}·]+", " ", value))
        latin_only = strip_edge_separators(latin_only.strip(" /|｜"))
        if len(latin_only) >= MIN_FRAGMENT_LENGTH:
            return latin_only
    return value


def _title_rule(name: str, delimiter: str, flags: int = re.IGNORECASE) -> ExtractionRule:
    """Build a rule capturing everything before a delimiter."""
    return ExtractionRule(
        name=name,
        pattern=re.compile(r"^(.+?)" + delimiter, flags),
        cleaner=_clean_title_fragment,
    )


TITLE_RULES: tuple[ExtractionRule, ...] = (
    _title_rule("season_episode", r"\s+S\d{1,2}E\d{1,4}"),
    _title_rule("season", r"\s+S\d{1,2}(?![A-Za-z0-9])"),
    _title_rule("season_word", r"\s+Season\s*\d+"),
    _title_rule("season_cjk", r"\s*第[一二三四五六七八九十百\d]+[季部]", 0),
    _title_rule("episode_dash", r"\s+-\s+\d{1,4}(?:v\d)?(?!\d)"),
    _title_rule("year", r"\s+[(（]?(?:19|20)\d{2}[)）]?(?!\d)"),
    _title_rule("resolution", r"\s+(?:\d{3,4}[pi]|4K|8K|UHD)(?![A-Za-z0-9])"),
    _title_rule(
        "source_tag",
        r"\s+(?:WEB(?:-?DL|-?Rip)?|Blu-?Ray|BDRip|BRRip|DVDRip|HDTV|HDRip|REMUX|CR|AMZN|NF)"
        r"(?![A-Za-z0-9])",
    ),
    _title_rule("codec", r"\s+(?:[HX]\.?26[45]|HEVC|AVC|AV1)(?![A-Za-z0-9])"),
    _title_rule("release_group", r"\s+-\s*[A-Z][A-Za-z0-9]+$", 0),
)


def description_to_text(description: str | None) -> str:
    """Flatten an HTML feed description to plain text lines."""
    if not description:
        return ""
    text = _HTML_BREAK_RE.sub("\n", description)
    text = _HTML_TAG_RE.sub("", text)
    return html.unescape(text)


def clean_feed_title(title: str | None) -> str:
    """Strip bracketed release-group prefixes/suffixes and file extensions.

    Dotted release names ("The.Bear.S03E01.1080p") are turned into spaced
    words so the delimiter cascade can apply.

    Args:
        title: Raw feed item title

    Returns:
        Cleaned title ("" for None)
    """
    if not title:
        return ""
    cleaned = title.strip()
    cleaned = _FILE_EXTENSION_RE.sub("", cleaned)
    cleaned = _LEADING_BRACKETS_RE.sub("", cleaned)
    cleaned = _TRAILING_BRACKETS_RE.sub("", cleaned)
    if " " not in cleaned.strip() and cleaned.count(".") >= 2:
        cleaned = cleaned.replace(".", " ")
    return collapse_whitespace(cleaned)


def fallback_title(cleaned_title: str) -> str | None:
    """Take the first meaningful word(s) of a title.

    Joined words ("Some-Show" / "Some_Show") are split into spaces and a short
    first word is merged with the next one.
    """
    words = cleaned_title.split()
    if not words:
        return None

    result = words[0]
    if "-" in result or "_" in result:
        result = collapse_whitespace(re.sub(r"[\-_]", " ", result))
    if len(result) < MIN_FRAGMENT_LENGTH and len(words) > 1:
        result = " ".join(words[:2])

    if len(result) < MIN_FRAGMENT_LENGTH:
        return None
    return result


def extract_title_from_description(description: str | None) -> str | None:
    """Extract an explicitly labeled title from a feed description."""
    return run_cascade(DESCRIPTION_RULES, description_to_text(description))


def extract_title_from_name(title: str | None) -> str | None:
    """Extract the primary title from a feed item title.

    Args:
        title: Raw feed item title

    Returns:
        Primary title or None when the title carries too little information
    """
    cleaned = clean_feed_title(title)
    if not cleaned:
        return None

    extracted = run_cascade(TITLE_RULES, cleaned)
    if extracted is not None:
        return extracted

    return fallback_title(cleaned)


def extract_primary_title(title: str | None, description: str | None = None) -> str | None:
    """Extract the primary title, preferring a labeled title in the description.

    Never raises; None signals insufficient metadata.

    Args:
        title: Raw feed item title
        description: Optional feed item description

    Returns:
        Primary title or None
    """
    from_description = extract_title_from_description(description)
    if from_description is not None:
        logger.debug("Primary title taken from description", title=from_description)
        return from_description

    extracted = extract_title_from_name(title)
    if extracted is None:
        logger.debug("No primary title found", raw_title=title)
    return extracted
