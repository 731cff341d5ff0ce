"""Search orchestration: query planning, result caching and title resolution."""

from feedlinker.core.search.cache import CacheEntry, ResultCache, make_cache_key
from feedlinker.core.search.context import ResolverContext
from feedlinker.core.search.models import Resolution, ResolutionOutcome
from feedlinker.core.search.planner import QueryPlanner, main_title, normalize_query
from feedlinker.core.search.service import TitleResolver

__all__ = [
    "CacheEntry",
    "QueryPlanner",
    "Resolution",
    "ResolutionOutcome",
    "ResolverContext",
    "ResultCache",
    "TitleResolver",
    "main_title",
    "make_cache_key",
    "normalize_query",
]
