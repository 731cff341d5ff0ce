"""Trace ID support using structlog contextvars."""

from __future__ import annotations

import uuid
from collections.abc import Generator
from contextlib import contextmanager

import structlog.contextvars as contextvars


def generate_trace_id() -> str:
    """Generate a unique trace ID.

    Returns:
        Hexadecimal trace ID (32 characters)
    """
    return uuid.uuid4().hex


def get_trace_id() -> str | None:
    """Get the current trace ID from context.

    Returns:
        Current trace ID or None if not set
    """
    return contextvars.get_contextvars().get("trace_id")


@contextmanager
def trace_context(trace_id: str | None = None) -> Generator[str]:
    """Context manager for trace ID.

    Sets trace_id in context, yields it, then restores the previous context on exit.

    Args:
        trace_id: Optional trace ID to use. If None, generates a new one.

    Yields:
        The trace ID being used

    Example:
        >>> with trace_context() as trace_id:
        ...     logger.info("Processing feed")  # Will include trace_id
    """
    old_context = dict(contextvars.get_contextvars())

    if trace_id is None:
        trace_id = generate_trace_id()

    contextvars.clear_contextvars()
    contextvars.bind_contextvars(trace_id=trace_id)

    try:
        yield trace_id
    finally:
        contextvars.clear_contextvars()
        if old_context:
            contextvars.bind_contextvars(**old_context)


@contextmanager
def ensure_trace_context() -> Generator[str]:
    """Reuse the current trace ID, or open a fresh trace when none is bound."""
    current = get_trace_id()
    if current is not None:
        yield current
        return
    with trace_context() as trace_id:
        yield trace_id
