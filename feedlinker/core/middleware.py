"""FastAPI middleware for request/response handling."""

from __future__ import annotations

import re
import time

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from feedlinker.core.tracing import generate_trace_id, trace_context

logger = structlog.get_logger("feedlinker.middleware")

TRACE_HEADER = "X-Trace-ID"
_VALID_TRACE_ID_RE = re.compile(r"^[A-Za-z0-9\-]{8,64}$")


def incoming_trace_id(request: Request) -> str | None:
    """Trace ID sent by the caller, if it looks sane enough to echo back."""
    trace_id = request.headers.get(TRACE_HEADER)
    if trace_id and _VALID_TRACE_ID_RE.match(trace_id):
        return trace_id
    return None


class TracingMiddleware(BaseHTTPMiddleware):
    """Binds a trace ID to every request and reports request duration."""

    async def dispatch(self, request: Request, call_next):
        """Process request and add trace ID to context.

        Uses the caller's X-Trace-ID header when valid, otherwise generates one.
        All logs during request processing, including catalog calls made by a
        resolution, carry this trace_id.
        """
        trace_id = incoming_trace_id(request) or generate_trace_id()
        started = time.perf_counter()

        with trace_context(trace_id):
            response = await call_next(request)
            response.headers[TRACE_HEADER] = trace_id

            logger.debug(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )

            return response
