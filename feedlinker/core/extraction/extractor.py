"""Title extraction entry point combining the primary and localized cascades."""

from __future__ import annotations

import structlog

from .localized import extract_localized_title
from .models import ExtractedTitle
from .primary import extract_primary_title

logger = structlog.get_logger("feedlinker.extraction")


def extract_titles(title: str | None, description: str | None = None) -> ExtractedTitle | None:
    """Derive the primary and localized titles of a feed item.

    Args:
        title: Raw feed item title
        description: Optional feed item description

    Returns:
        ExtractedTitle, or None when no primary title could be found
        (the caller skips the item)
    """
    primary = extract_primary_title(title, description)
    if primary is None:
        return None

    localized = extract_localized_title(title, description)
    if localized == primary:
        localized = None

    logger.debug("Extracted titles", raw_title=title, primary=primary, localized=localized)
    return ExtractedTitle(primary=primary, localized=localized)
