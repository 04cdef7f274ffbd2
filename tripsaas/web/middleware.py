"""FastAPI middleware: request ID injection and per-request log context."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from tripsaas.web.tenancy import normalize_hostname

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

logger = structlog.get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Adds a unique X-Request-ID header to every response.

    The id and the request host are bound to structlog's context so every
    log line emitted while handling the request carries them. The context is
    cleared first because worker tasks are reused across requests.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            host=normalize_hostname(request.headers.get("host", "")),
        )
        response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response
