"""Catalog client error types."""


class CatalogError(Exception):
    """Base class for catalog failures."""


class CatalogNotConfiguredError(CatalogError):
    """The catalog is disabled or has no API key; no request was made."""


class TransientCatalogError(CatalogError):
    """Timeout, network failure, HTTP 429 or 5xx. Safe to retry."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CatalogRequestError(CatalogError):
    """Non-retryable failure: a 4xx rejection or an unreadable payload."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
