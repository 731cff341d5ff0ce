"""Match evaluator - combines all criteria into one relevance score.

Scores are only meaningful for ranking candidates within one resolution
pass; they are not comparable across queries.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import structlog

from feedlinker.core.catalog.models import CatalogCandidate

from .config import MatchingConfig, get_matching_config
from .criteria import (
    match_popularity,
    match_recency,
    match_similarity,
    match_title,
    match_vote_average,
    match_year,
)

logger = structlog.get_logger("feedlinker.matching")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


@dataclass
class MatchResult:
    """Result of a match evaluation.

    Attributes:
        score: Non-negative integer score (sum of all criteria, rounded)
        details: List of strings explaining each criterion
        title_used: Which candidate title produced the title score
    """

    score: int
    details: list[str] = field(default_factory=list)
    title_used: str = ""


@dataclass(frozen=True)
class ScoredCandidate:
    """A catalog candidate with its relevance score for one query."""

    candidate: CatalogCandidate
    score: int
    query: str

    @property
    def is_tv(self) -> bool:
        return self.candidate.media_type == "tv"


def _title_score(
    candidate: CatalogCandidate, query: str, config: MatchingConfig
) -> tuple[float, list[str], str]:
    """Best title + similarity score across the display and original titles."""

    def score_title(title: str) -> tuple[float, list[str], str]:
        title_score, title_reason = match_title(title, query, config)
        similarity_score, similarity_reason = match_similarity(title, query, config)
        return title_score + similarity_score, [title_reason, similarity_reason], title

    best = score_title(candidate.display_title)
    if candidate.original_title and candidate.original_title != candidate.display_title:
        original = score_title(candidate.original_title)
        if original[0] > best[0]:
            best = original
    return best


def evaluate_candidate(
    candidate: CatalogCandidate,
    query: str,
    target_year: int | None = None,
    config: MatchingConfig | None = None,
    current_year: int | None = None,
) -> MatchResult:
    """Evaluate a catalog candidate against a query.

    Args:
        candidate: Candidate returned by a catalog search
        query: Query string the candidate was returned for
        target_year: Year extracted from the feed item, if any
        config: Matching configuration (if None, loads from settings file)
        current_year: Reference year for the recency bonus (defaults to this year)

    Returns:
        MatchResult with score and details
    """
    if config is None:
        config = get_matching_config()

    score, details, title_used = _title_score(candidate, query, config)

    vote_score, vote_reason = match_vote_average(candidate.vote_average, config)
    score += vote_score
    if vote_score > 0:
        details.append(vote_reason)

    recency_score, recency_reason = match_recency(candidate.year, current_year, config)
    score += recency_score
    if recency_score > 0:
        details.append(recency_reason)

    popularity_score, popularity_reason = match_popularity(
        candidate.popularity, candidate.vote_average, config
    )
    score += popularity_score
    if popularity_score > 0:
        details.append(popularity_reason)

    # Year bonus is added after rounding
    year_score, year_reason = match_year(candidate.year, target_year, config)
    details.append(year_reason)

    final = max(0, round_half_up(score) + year_score)
    return MatchResult(score=final, details=details, title_used=title_used)


def score_candidate(
    candidate: CatalogCandidate,
    query: str,
    target_year: int | None = None,
    config: MatchingConfig | None = None,
    current_year: int | None = None,
) -> ScoredCandidate:
    """Score one candidate; see evaluate_candidate."""
    result = evaluate_candidate(candidate, query, target_year, config, current_year)
    logger.debug(
        "Scored candidate",
        query=query,
        candidate_id=candidate.id,
        media_type=candidate.media_type,
        title=result.title_used,
        score=result.score,
        details=result.details,
    )
    return ScoredCandidate(candidate=candidate, score=result.score, query=query)


def rank_candidates(
    candidates: list[CatalogCandidate],
    query: str,
    target_year: int | None = None,
    config: MatchingConfig | None = None,
    current_year: int | None = None,
) -> list[ScoredCandidate]:
    """Score candidates and sort them best first.

    Ties keep the catalog's own order.
    """
    scored = [
        score_candidate(candidate, query, target_year, config, current_year)
        for candidate in candidates
    ]
    return sorted(scored, key=lambda item: item.score, reverse=True)
