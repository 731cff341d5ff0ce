"""Localized (CJK) title extraction.

Descriptions from sites that publish full release notes carry labeled fields
("◎译名", "◎中文名"); sites that publish only a title embed the localized name
next to the latin one. Short descriptions are therefore not trusted and the
title itself becomes the source.
"""

from __future__ import annotations

import re

import structlog

from feedlinker.core.utils import CJK_CHARS, KANA_CHARS

from .primary import _GAP, description_to_text
from .rules import ExtractionRule, run_cascade

logger = structlog.get_logger("feedlinker.extraction.localized")

# Descriptions shorter than this are treated as absent
MIN_DESCRIPTION_LENGTH = 50

_C = CJK_CHARS
# A CJK run: first char is an ideograph, then ideographs, inline spaces or middle dots
_RUN = f"[{_C}][{_C} \\t\u3000·]*"
_RUN_WITH_SLASH = f"[{_C}][{_C} \\t\u3000·/]*"


_SEASON_SUFFIX_RE = re.compile(r"\s*(?:第[一二三四五六七八九十百\d]+[季部集]|全\d+集).*$")


def _clean_description_value(value: str) -> str:
    """Keep the first alternate name of a "名A/名B | 类型" style value."""
    value = re.sub(r"/.*$", "", value)
    value = re.sub(r"\s*[|｜].*$", "", value)
    return _clean_title_value(value)


def _clean_title_value(value: str) -> str:
    """Drop a trailing season marker ("熊家餐厅 第三季") and edge spacing."""
    return _SEASON_SUFFIX_RE.sub("", value).strip(" \t\u3000·")


def _rule(
    name: str, pattern: str, *, cleaner=_clean_description_value, flags: int = 0
) -> ExtractionRule:
    return ExtractionRule(
        name=name,
        pattern=re.compile(pattern, flags),
        cleaner=cleaner,
        scan_all=True,
    )


DESCRIPTION_RULES: tuple[ExtractionRule, ...] = (
    _rule("labeled_translated_name", "◎译" + _GAP + "名" + _GAP + f"({_RUN_WITH_SLASH})"),
    _rule("labeled_chinese_name", "◎中文" + _GAP + "名" + _GAP + f"({_RUN_WITH_SLASH})"),
    _rule("labeled_title", "◎片" + _GAP + "名" + _GAP + f"({_RUN})"),
    _rule(
        "bracketed_run",
        rf"\[({_RUN}?)(?=\s+[A-Za-z]|\s+全\d+集|\s*[|｜]|\])",
    ),
    _rule("slash_pair", rf"({_RUN}?)\s*[/|｜]\s*[{KANA_CHARS}{_C}]+"),
    _rule("parenthesized_run", rf"[（(]({_RUN})[）)]"),
    _rule("lenticular_run", rf"【({_RUN})】"),
    _rule("chinese_name_field", rf"中文名[：:]\s*({_RUN})"),
    _rule("season_slot", rf"\d{{4}}年\d+月档[^：:\n]*[：:]\s*({_RUN})"),
)

TITLE_RULES: tuple[ExtractionRule, ...] = (
    _rule("leading_run", rf"^({_RUN}?)\s+[A-Za-z]", cleaner=_clean_title_value),
    _rule("trailing_run", rf"[A-Za-z][A-Za-z ]+\s+({_RUN})", cleaner=_clean_title_value),
    _rule("bracketed_run", rf"\[({_RUN})\]", cleaner=_clean_title_value),
    _rule("parenthesized_run", rf"[（(]({_RUN})[）)]", cleaner=_clean_title_value),
    _rule("lenticular_run", rf"【({_RUN})】", cleaner=_clean_title_value),
    _rule("slash_pair", rf"[A-Za-z][A-Za-z ]+\s*/\s*({_RUN})", cleaner=_clean_title_value),
    _rule("pipe_pair", rf"[A-Za-z][A-Za-z ]+\s*[|｜]\s*({_RUN})", cleaner=_clean_title_value),
    _rule("whole_title", rf"^({_RUN})$", cleaner=_clean_title_value),
    _rule(
        "run_before_tags",
        rf"^({_RUN}?)\s+(?:S\d+|第\d+|\d{{4}}|\d{{3,4}}p)",
        cleaner=_clean_title_value,
        flags=re.IGNORECASE,
    ),
)


def extract_localized_from_title(title: str | None) -> str | None:
    """Extract a localized title embedded in a feed item title."""
    if not title:
        return None
    return run_cascade(TITLE_RULES, title.strip())


def extract_localized_from_description(description: str | None) -> str | None:
    """Extract a localized title from labeled description fields."""
    return run_cascade(DESCRIPTION_RULES, description_to_text(description))


def extract_localized_title(
    title: str | None,
    description: str | None = None,
    min_description_length: int = MIN_DESCRIPTION_LENGTH,
) -> str | None:
    """Extract the localized title of a feed item.

    A description shorter than min_description_length is treated as absent
    and the title is used as the source. A long description without any
    localized marker falls back to the title as well.

    Args:
        title: Raw feed item title
        description: Optional feed item description
        min_description_length: Threshold below which the description is ignored

    Returns:
        Localized title or None
    """
    text = description_to_text(description).strip()
    if len(text) >= min_description_length:
        localized = run_cascade(DESCRIPTION_RULES, text)
        if localized is not None:
            return localized
        logger.debug("No localized title in description, trying title", raw_title=title)

    return extract_localized_from_title(title)
