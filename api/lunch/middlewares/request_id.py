"""Request id propagation.

An inbound ``X-Request-ID`` is reused when it looks like an id; anything
else is replaced with a fresh one so arbitrary header content never reaches
the logs or the error envelopes.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

HEADER = "X-Request-ID"
_VALID_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")

# Read by the log filter and the error envelope helper
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


def resolve_request_id(raw: str | None) -> str:
    if raw and _VALID_ID.match(raw):
        return raw
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind a request id to the context for the duration of the request."""

    async def dispatch(self, request: Request, call_next):
        # An outer middleware may already have assigned one
        req_id = getattr(request.state, "request_id", None) or resolve_request_id(
            request.headers.get(HEADER)
        )
        token = request_id_ctx.set(req_id)
        request.state.request_id = req_id
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers[HEADER] = req_id
        return response
