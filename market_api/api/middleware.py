"""API middleware for the catalog service.

Provides request ID correlation and request timing logs. Query strings
carry buyers' search text, so only the path is ever bound or logged.
"""

import re
import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

# Inbound IDs end up in every log line and in response headers.
REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

LOG_CONTEXT_KEYS = ("request_id", "method", "path")


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Correlates every log line of a request.

    Accepts the caller's ``X-Request-ID`` when it is a short token and
    generates one otherwise. The ID, method and path are bound into the
    structlog context for the duration of the request, so catalog query
    logs can be traced back to the route that issued them.
    """

    HEADER_NAME = "X-Request-ID"

    @classmethod
    def resolve_request_id(cls, request: Request) -> str:
        """Return the inbound request ID if usable, else a new UUID."""
        provided = request.headers.get(cls.HEADER_NAME)
        if provided and REQUEST_ID_PATTERN.match(provided):
            return provided
        return str(uuid4())

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request with correlation context.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response with request ID header.
        """
        request_id = self.resolve_request_id(request)
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start_time = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Request completed",
                status_code=getattr(response, "status_code", 500),
                duration_ms=round(duration_ms, 2),
            )
            structlog.contextvars.unbind_contextvars(*LOG_CONTEXT_KEYS)

        response.headers[self.HEADER_NAME] = request_id
        return response


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure custom middleware for the application.

    Args:
        app: FastAPI application instance.
    """
    app.add_middleware(RequestIdMiddleware)
