from __future__ import annotations

import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..observability.context import request_id_var

REQUEST_ID_HEADER = "X-Request-Id"
MAX_REQUEST_ID_LENGTH = 128


def resolve_request_id(inbound: str | None) -> str:
    """Caller-supplied id (trimmed, capped), or a new UUID4."""
    value = (inbound or "").strip()[:MAX_REQUEST_ID_LENGTH]
    return value or str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Puts a request id on ``request.state``, the logging context and the response."""

    async def dispatch(self, request: Request, call_next):
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
