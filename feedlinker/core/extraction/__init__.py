"""Title extraction from noisy feed item titles and descriptions.

Extraction is a set of ordered pattern cascades: the first rule that yields
a fragment of at least three characters wins.
"""

from .extractor import extract_titles
from .localized import extract_localized_title
from .metadata import categorize_item, extract_catalog_link
from .models import Category, ExtractedTitle
from .primary import clean_feed_title, extract_primary_title
from .rules import MIN_FRAGMENT_LENGTH, ExtractionRule, run_cascade

__all__ = [
    "Category",
    "ExtractedTitle",
    "ExtractionRule",
    "MIN_FRAGMENT_LENGTH",
    "categorize_item",
    "clean_feed_title",
    "extract_catalog_link",
    "extract_localized_title",
    "extract_primary_title",
    "extract_titles",
    "run_cascade",
]
