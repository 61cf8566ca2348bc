from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ..routes_metrics import http_errors_total


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class HttpErrorCounterMiddleware(BaseHTTPMiddleware):
    """Count 4xx/5xx responses per status and route template.

    Templates such as ``/api/v1/lunches/{order_id}`` keep the label set
    bounded regardless of how many orders exist. Unhandled exceptions are
    counted as 500 and re-raised for the outer middleware to render.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
        except Exception:
            http_errors_total.labels(status="500", route=_route_template(request)).inc()
            raise
        if response.status_code >= 400:
            http_errors_total.labels(
                status=str(response.status_code), route=_route_template(request)
            ).inc()
        return response
