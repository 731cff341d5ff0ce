"""Ordered pattern cascades used by the title extractor.

Each rule is a pure function of its input text: it either yields a cleaned
fragment or None. A cascade evaluates rules in order and the first rule that
yields a fragment wins, so each rule can be tested on its own.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import structlog

from feedlinker.core.utils import collapse_whitespace

logger = structlog.get_logger("feedlinker.extraction.rules")

# Fragments of this length or shorter are treated as "no match"
MIN_FRAGMENT_LENGTH = 3

Cleaner = Callable[[str], str]


def _identity(value: str) -> str:
    return value


@dataclass(frozen=True)
class ExtractionRule:
    """One named pattern in an extraction cascade.

    Attributes:
        name: Rule name, reported in debug logs
        pattern: Compiled pattern whose first group captures the fragment
        cleaner: Post-processing applied to the captured fragment
        reject: Optional predicate rejecting a cleaned fragment
        scan_all: Try every match of the pattern instead of only the first
    """

    name: str
    pattern: re.Pattern[str]
    cleaner: Cleaner = _identity
    reject: Callable[[str], bool] | None = None
    scan_all: bool = False

    def apply(self, text: str) -> str | None:
        """Apply the rule to text.

        Returns:
            Cleaned fragment of at least MIN_FRAGMENT_LENGTH characters, or None
        """
        matches = self.pattern.finditer(text) if self.scan_all else [self.pattern.search(text)]
        for match in matches:
            if match is None or not match.group(1):
                continue
            fragment = collapse_whitespace(self.cleaner(match.group(1)))
            if len(fragment) < MIN_FRAGMENT_LENGTH:
                continue
            if self.reject is not None and self.reject(fragment):
                continue
            return fragment
        return None


def run_cascade(rules: Sequence[ExtractionRule], text: str | None) -> str | None:
    """Evaluate rules in order, first match wins.

    Args:
        rules: Ordered rules
        text: Input text (None or empty yields None)

    Returns:
        The first fragment produced by a rule, or None
    """
    if not text:
        return None
    for rule in rules:
        fragment = rule.apply(text)
        if fragment is not None:
            logger.debug("Extraction rule matched", rule=rule.name, fragment=fragment)
            return fragment
    return None
