"""Relevance scoring of catalog candidates.

This module provides a configurable, criteria-based scorer used to pick
the best catalog entry for a feed item's titles.
"""

from .config import DEFAULT_CONFIG, MatchingConfig, get_matching_config, reload_matching_config
from .criteria import (
    match_popularity,
    match_recency,
    match_similarity,
    match_title,
    match_vote_average,
    match_year,
)
from .evaluator import (
    MatchResult,
    ScoredCandidate,
    evaluate_candidate,
    rank_candidates,
    round_half_up,
    score_candidate,
)

__all__ = [
    "MatchingConfig",
    "DEFAULT_CONFIG",
    "get_matching_config",
    "reload_matching_config",
    "match_title",
    "match_similarity",
    "match_vote_average",
    "match_recency",
    "match_popularity",
    "match_year",
    "MatchResult",
    "ScoredCandidate",
    "evaluate_candidate",
    "score_candidate",
    "rank_candidates",
    "round_half_up",
]
