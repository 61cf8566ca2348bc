# main.py

"""FastAPI application for ordering and cancelling school lunches."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, get_settings

from . import db as app_db
from .errors import LunchOrderError
from .middlewares import (
    HttpErrorCounterMiddleware,
    LoggingMiddleware,
    RequestIdMiddleware,
)
from .obs import init_sentry
from .obs.logging import configure_logging
from .repos.orders_repo import OrderStore
from .repos_sqlalchemy import SqlOrderStore
from .routes_lunches import router as lunches_router
from .routes_metrics import router as metrics_router
from .services.clock import Clock
from .services.order_service import LunchOrderService
from .services.status_sweeper import StatusSweeper
from .utils.responses import err, ok, order_error

logger = logging.getLogger("api")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[OrderStore] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """Build the API.

    ``store`` and ``clock`` default to the configured database and the system
    clock; tests pass their own. The schema is created and the status sweeper
    started on startup.
    """

    settings = settings or get_settings()
    clock = clock or Clock(settings.timezone)

    app = FastAPI(title="Lunch Orders API", version="1.0.0")
    app.state.settings = settings
    app.state.clock = clock

    app.add_middleware(HttpErrorCounterMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(LoggingMiddleware)

    app.include_router(lunches_router)
    app.include_router(metrics_router)

    @app.on_event("startup")
    async def on_startup() -> None:
        configure_logging(settings.log_level.upper())
        init_sentry(settings.error_dsn)
        order_store = store
        if order_store is None:
            engine = app_db.get_engine(settings.database_url)
            await app_db.init_db(engine)
            order_store = SqlOrderStore(app_db.get_sessionmaker())
        app.state.order_service = LunchOrderService(order_store, clock, settings)
        app.state.sweeper = StatusSweeper(order_store, clock, settings)
        if settings.sweeper_enabled:
            app.state.sweeper.start()

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        sweeper = getattr(app.state, "sweeper", None)
        if sweeper is not None:
            await sweeper.stop()
        if store is None:
            await app_db.dispose_engine()

    @app.get("/health")
    async def health() -> dict:
        return ok({"status": "ok"})

    @app.exception_handler(LunchOrderError)
    async def order_error_handler(request: Request, exc: LunchOrderError):
        logger.warning(
            exc.message,
            extra={"status": exc.status_code, "route": request.url.path},
        )
        return order_error(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ):
        details = {"errors": jsonable_encoder(exc.errors())}
        return JSONResponse(
            err("INVALID_REQUEST", "Invalid request", details=details),
            status_code=422,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(
            exc.detail,
            extra={"status": exc.status_code, "route": request.url.path},
        )
        return JSONResponse(
            err(exc.status_code, exc.detail), status_code=exc.status_code
        )

    return app


app = create_app()
