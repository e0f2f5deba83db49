"""
PROCSIM — Correlation ID Middleware
====================================
Injects and propagates a UUID-v4 correlation ID on every HTTP request,
so that log lines emitted while a request submits or dispatches work can
be tied back to it.
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from procsim.core.config import get_settings

correlation_id_ctx: ContextVar[str | None] = ContextVar(
    "correlation_id", default=None
)


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Echo the client's correlation ID, or mint one when absent."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        header_name = get_settings().correlation_id_header

        cid = request.headers.get(header_name) or str(uuid.uuid4())

        token = correlation_id_ctx.set(cid)
        try:
            response = await call_next(request)
            response.headers[header_name] = cid
            return response
        finally:
            correlation_id_ctx.reset(token)
