"""Response envelopes shared by every route.

Success bodies are ``{"ok": true, "data": ...}``; failures carry an
``error`` object with a stable ``code`` plus the current request id.
"""

from typing import Any, Dict

from fastapi.responses import JSONResponse

from ..errors import LunchOrderError


def ok(data: Any) -> Dict[str, Any]:
    """Return a success envelope."""
    return {"ok": True, "data": data}


def err(
    code: int | str,
    message: str,
    details: Dict[str, Any] | None = None,
    hint: str | None = None,
) -> Dict[str, Any]:
    """Return an error envelope."""
    from ..middlewares.request_id import request_id_ctx

    error: Dict[str, Any] = {"code": code, "message": message}
    if hint:
        error["hint"] = hint
    if details:
        error["details"] = details

    return {"ok": False, "request_id": request_id_ctx.get(None), "error": error}


def order_error(exc: LunchOrderError) -> JSONResponse:
    """Render a domain error; the failed rule or refusal reason goes in details."""
    details = {k: getattr(exc, k) for k in ("rule", "reason") if hasattr(exc, k)}
    return JSONResponse(
        err(exc.code, exc.message, details=details or None),
        status_code=exc.status_code,
    )
