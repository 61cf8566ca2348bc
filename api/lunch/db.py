"""Async engine and session helpers for the order database."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .models import Base
from .obs import add_query_logger

_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None


def create_engine(url: str, label: str = "orders") -> AsyncEngine:
    """Create an :class:`AsyncEngine` for ``url`` with query timing logs."""
    engine = create_async_engine(url, future=True)
    add_query_logger(engine, label)
    return engine


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


def get_engine(url: str | None = None) -> AsyncEngine:
    """Return a singleton async engine, creating it from ``url`` on first use."""
    global _engine, _sessionmaker
    if _engine is None:
        if url is None:
            from config import get_settings

            url = get_settings().database_url
        _engine = create_engine(url)
        _sessionmaker = create_sessionmaker(_engine)
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    if _sessionmaker is None:
        get_engine()
    assert _sessionmaker is not None  # for type checkers
    return _sessionmaker


async def init_db(engine: AsyncEngine) -> None:
    """Create the order tables if they do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None


__all__ = [
    "create_engine",
    "create_sessionmaker",
    "dispose_engine",
    "get_engine",
    "get_sessionmaker",
    "init_db",
]
