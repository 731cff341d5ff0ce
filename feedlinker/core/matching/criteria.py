"""Individual relevance criteria.

Each function evaluates a single aspect of a candidate (title, rating,
release year, popularity) and returns a score and reason, so every
criterion can be tested and tuned on its own.
"""

from __future__ import annotations

from datetime import date

from rapidfuzz.distance import Levenshtein

from feedlinker.core.utils import simplify_label

from .config import MatchingConfig, get_matching_config


def _token_overlap(title: str, query: str, config: MatchingConfig) -> tuple[float, str]:
    """Blend of exact and partial word overlap between query and title."""
    query_words = [word for word in query.split(" ") if len(word) > 1]
    title_words = [word for word in title.split(" ") if len(word) > 1]
    if not query_words:
        return 0.0, f"No comparable words in query '{query}'"

    exact_matches = 0
    matching_words = 0
    for query_word in query_words:
        for title_word in title_words:
            if query_word == title_word:
                exact_matches += 1
                matching_words += 1
                break
            if query_word in title_word or title_word in query_word:
                matching_words += 1
                break

    exact_fraction = exact_matches / len(query_words)
    overlap_fraction = matching_words / len(query_words)
    score = exact_fraction * config.token_exact_weight + overlap_fraction * config.token_any_weight
    if overlap_fraction > config.token_overlap_threshold:
        score += config.token_overlap_bonus

    return (
        score,
        f"Word overlap: {exact_matches} exact, {matching_words} partial of "
        f"{len(query_words)} (+{score:.1f})",
    )


def match_title(
    candidate_title: str,
    query: str,
    config: MatchingConfig | None = None,
) -> tuple[float, str]:
    """Evaluate how well the candidate title matches the query.

    Exact, "title contains query" and "query contains title" are mutually
    exclusive; when none applies a word-overlap blend is used instead.

    Args:
        candidate_title: Candidate display title
        query: Query string the candidate was returned for
        config: Matching configuration (if None, loads from settings file)

    Returns:
        Tuple of (score, reason)
    """
    if config is None:
        config = get_matching_config()

    title = simplify_label(candidate_title)
    query_key = simplify_label(query)

    if not (title and query_key):
        return 0.0, f"Empty key: query='{query_key}', title='{title}'"

    if title == query_key:
        return float(config.exact_match), f"Exact match: '{title}' (+{config.exact_match})"

    if query_key in title:
        return (
            float(config.contains_match),
            f"Title contains query: '{query_key}' in '{title}' (+{config.contains_match})",
        )

    if title in query_key:
        return (
            float(config.contained_match),
            f"Query contains title: '{title}' in '{query_key}' (+{config.contained_match})",
        )

    return _token_overlap(title, query_key, config)


def match_similarity(
    candidate_title: str,
    query: str,
    config: MatchingConfig | None = None,
) -> tuple[float, str]:
    """Normalized edit-distance similarity between title and query."""
    if config is None:
        config = get_matching_config()

    similarity = Levenshtein.normalized_similarity(
        simplify_label(candidate_title), simplify_label(query)
    )
    score = similarity * config.similarity_weight
    return score, f"Similarity {similarity:.2f} (+{score:.1f})"


def match_vote_average(
    vote_average: float,
    config: MatchingConfig | None = None,
) -> tuple[float, str]:
    """Bonus for well-rated candidates."""
    if config is None:
        config = get_matching_config()

    if vote_average > config.vote_high_threshold:
        bonus = config.vote_high_bonus
    elif vote_average > config.vote_good_threshold:
        bonus = config.vote_good_bonus
    elif vote_average > config.vote_fair_threshold:
        bonus = config.vote_fair_bonus
    else:
        return 0.0, f"Rating {vote_average} (no bonus)"
    return bonus, f"Rating {vote_average} (+{bonus})"


def match_recency(
    candidate_year: int | None,
    current_year: int | None = None,
    config: MatchingConfig | None = None,
) -> tuple[float, str]:
    """Bonus for recently released candidates.

    Args:
        candidate_year: Release/air year of the candidate
        current_year: Reference year (defaults to this year)
        config: Matching configuration (if None, loads from settings file)

    Returns:
        Tuple of (score, reason)
    """
    if config is None:
        config = get_matching_config()

    if candidate_year is None:
        return 0.0, "No release year"

    if current_year is None:
        current_year = date.today().year

    if candidate_year >= current_year - config.recency_recent_years:
        bonus = config.recency_recent_bonus
    elif candidate_year >= current_year - config.recency_fresh_years:
        bonus = config.recency_fresh_bonus
    elif candidate_year >= current_year - config.recency_old_years:
        bonus = config.recency_old_bonus
    else:
        return 0.0, f"Released {candidate_year} (no recency bonus)"
    return bonus, f"Released {candidate_year} (+{bonus})"


def match_popularity(
    popularity: float | None,
    vote_average: float,
    config: MatchingConfig | None = None,
) -> tuple[float, str]:
    """Capped popularity bonus, only for rated and reasonably popular entries."""
    if config is None:
        config = get_matching_config()

    if popularity is None or vote_average <= 0 or popularity <= config.popularity_min:
        return 0.0, "No popularity bonus"

    bonus = min(popularity / config.popularity_divisor, config.popularity_cap)
    return bonus, f"Popularity {popularity} (+{bonus:.2f})"


def match_year(
    candidate_year: int | None,
    target_year: int | None,
    config: MatchingConfig | None = None,
) -> tuple[int, str]:
    """Evaluate release year against the year extracted from the feed item.

    Args:
        candidate_year: Release/air year of the candidate
        target_year: Year found in the feed item titles
        config: Matching configuration (if None, loads from settings file)

    Returns:
        Tuple of (integer bonus, reason)
    """
    if config is None:
        config = get_matching_config()

    if target_year is None:
        return 0, "No year in search"

    if candidate_year is None:
        return 0, "No year in candidate"

    if abs(candidate_year - target_year) <= config.year_tolerance:
        return (
            config.year_match_bonus,
            f"Year match: {candidate_year} ~ {target_year} (+{config.year_match_bonus})",
        )
    return 0, f"No match: {candidate_year} vs {target_year}"
