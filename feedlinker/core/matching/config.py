"""Matching configuration - scoring weights and search thresholds."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields

import structlog

logger = structlog.get_logger("feedlinker.matching.config")


@dataclass
class MatchingConfig:
    """Configuration for catalog candidate matching.

    This class centralizes all scoring weights and thresholds,
    making it easy to adjust matching behavior.
    """

    # Title match (mutually exclusive)
    exact_match: int = 100
    contains_match: int = 80
    contained_match: int = 60

    # Token overlap blend, used when no title match applies
    token_exact_weight: float = 50.0
    token_any_weight: float = 30.0
    token_overlap_bonus: float = 20.0
    token_overlap_threshold: float = 0.7

    # Always applied
    similarity_weight: float = 15.0

    vote_high_threshold: float = 8.0
    vote_high_bonus: float = 15.0
    vote_good_threshold: float = 7.0
    vote_good_bonus: float = 10.0
    vote_fair_threshold: float = 5.0
    vote_fair_bonus: float = 5.0

    recency_recent_years: int = 1
    recency_recent_bonus: float = 10.0
    recency_fresh_years: int = 3
    recency_fresh_bonus: float = 5.0
    recency_old_years: int = 5
    recency_old_bonus: float = 2.0

    popularity_min: float = 10.0
    popularity_divisor: float = 100.0
    popularity_cap: float = 5.0

    # Added after rounding so the bonus stays exact
    year_match_bonus: int = 25
    year_tolerance: int = 1

    # Search thresholds
    min_score: int = 25  # combined search
    typed_search_min_score: int = 30  # TV-only / movie-only search
    strong_score: int = 65  # below this, typed searches run too
    early_exit_score: int = 75  # stop trying further query variants

    # Search limits
    max_queries: int = 2
    include_localized_queries: bool = True
    page_two_fallback: bool = False
    prefer_tv: bool = True


# Default config instance
DEFAULT_CONFIG = MatchingConfig()

# Cached config instance (loaded from settings file)
_cached_config: MatchingConfig | None = None


def _load_from_settings_file() -> MatchingConfig | None:
    from feedlinker.core.config import get_settings

    settings_file = get_settings().config_dir / "settings.json"
    if not settings_file.exists():
        return None

    try:
        with settings_file.open("r", encoding="utf-8") as f:
            all_settings = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Failed to read matching settings", path=str(settings_file), error=str(e))
        return None

    matching_settings = all_settings.get("matching") if isinstance(all_settings, dict) else None
    if not matching_settings:
        return None

    known = {f.name for f in fields(MatchingConfig)}
    unknown = sorted(set(matching_settings) - known)
    if unknown:
        logger.warning("Ignoring unknown matching settings", keys=unknown)
    return MatchingConfig(**{k: v for k, v in matching_settings.items() if k in known})


def get_matching_config() -> MatchingConfig:
    """Get the current matching configuration.

    Loads the "matching" section of settings.json if available, otherwise
    returns defaults. Caches the result.

    Returns:
        MatchingConfig instance with current settings
    """
    global _cached_config

    if _cached_config is None:
        _cached_config = _load_from_settings_file() or DEFAULT_CONFIG

    return _cached_config


def reload_matching_config() -> MatchingConfig:
    """Reload matching configuration from settings file.

    Call this after updating settings to ensure new values are used.
    """
    global _cached_config
    _cached_config = None
    return get_matching_config()
