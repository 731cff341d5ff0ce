"""FastAPI dependencies for the title resolver and feed processor."""

from __future__ import annotations

import structlog
from fastapi import Depends, Request

from feedlinker.core.config import get_settings
from feedlinker.core.feeds.processor import FeedProcessor
from feedlinker.core.search.context import ResolverContext
from feedlinker.core.search.service import TitleResolver

logger = structlog.get_logger("feedlinker.dependencies")


def get_resolver_context(request: Request) -> ResolverContext:
    """Get the process-wide resolver context.

    The lifespan creates it on startup; apps used without a lifespan
    (e.g. a TestClient outside a `with` block) get one lazily.

    Args:
        request: FastAPI request object

    Returns:
        Shared ResolverContext
    """
    context = getattr(request.app.state, "resolver_context", None)
    if context is None:
        logger.debug("Resolver context missing on app state, creating one")
        context = ResolverContext.from_settings(get_settings())
        request.app.state.resolver_context = context
    return context


def get_title_resolver(
    context: ResolverContext = Depends(get_resolver_context),
) -> TitleResolver:
    """Build a title resolver over the shared context with current settings."""
    return TitleResolver(context, get_settings().catalog)


def get_feed_processor(
    resolver: TitleResolver = Depends(get_title_resolver),
) -> FeedProcessor:
    """Build a feed processor that resolves links with the shared resolver."""
    return FeedProcessor(get_settings().catalog, resolver=resolver)
