"""Middleware for request correlation ID propagation."""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from mobclaw.platform.observability.logging import correlation_id_ctx

REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Tags every log line of a request with its correlation ID.

    The ID comes from the X-Request-ID header or is generated, and is echoed
    back in the response. The request method and path are bound as well, so
    agent loop logs emitted while serving /tasks can be traced to the call.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        token = correlation_id_ctx.set(correlation_id)
        try:
            with structlog.contextvars.bound_contextvars(
                http_method=request.method,
                http_path=request.url.path,
            ):
                response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = correlation_id
            return response
        finally:
            correlation_id_ctx.reset(token)
