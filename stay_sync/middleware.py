"""
FastAPI middleware for request tracing.

Every request gets a request id that is bound into structlog's context vars,
so all log lines emitted while handling it carry the same id.
"""

from __future__ import annotations

import uuid
from typing import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Attach a request id to each HTTP request.

    An incoming X-Request-ID header is reused so callers can correlate their
    own logs; otherwise a UUID4 is generated. The id is stored on
    request.state.request_id, bound into structlog context vars for the
    duration of the request, and echoed back in the X-Request-ID header.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
