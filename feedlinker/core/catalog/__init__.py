"""TMDB catalog access: search client, rate limiting and retry policy."""

from .client import CatalogClient
from .errors import (
    CatalogError,
    CatalogNotConfiguredError,
    CatalogRequestError,
    TransientCatalogError,
)
from .models import CatalogCandidate, MediaType
from .rate_limiter import RateLimiter
from .retry import RetryPolicy, retry_async

__all__ = [
    "CatalogCandidate",
    "CatalogClient",
    "CatalogError",
    "CatalogNotConfiguredError",
    "CatalogRequestError",
    "MediaType",
    "RateLimiter",
    "RetryPolicy",
    "TransientCatalogError",
    "retry_async",
]
