"""SQL timing logs for the order database.

Statements slower than ``DB_SLOW_QUERY_MS`` are logged as warnings; a small
sample of the rest is logged at debug level. Bound parameters are never
logged, only a short digest of them, since they carry child and wallet ids.
"""

from __future__ import annotations

import hashlib
import logging
import os
import random
import time

from sqlalchemy import event
from sqlalchemy.engine import Engine

SLOW_QUERY_MS = int(os.getenv("DB_SLOW_QUERY_MS", "200"))
SAMPLE_RATE = float(os.getenv("DB_QUERY_SAMPLE", "0.01"))
MAX_SQL_CHARS = 200

logger = logging.getLogger("obs.sql")


def _compact(statement: str) -> str:
    sql = " ".join(statement.split())
    if len(sql) > MAX_SQL_CHARS:
        sql = sql[: MAX_SQL_CHARS - 3] + "..."
    return sql


def _digest(parameters) -> str:
    return hashlib.sha256(repr(parameters).encode()).hexdigest()[:8]


def add_query_logger(engine, label: str) -> None:
    """Time every statement run through ``engine`` (sync or async)."""
    target: Engine = getattr(engine, "sync_engine", engine)

    @event.listens_for(target, "before_cursor_execute")
    def _start(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("lunch_query_start", []).append(time.perf_counter())

    @event.listens_for(target, "after_cursor_execute")
    def _finish(conn, cursor, statement, parameters, context, executemany):
        started = conn.info["lunch_query_start"].pop()
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        if elapsed_ms > SLOW_QUERY_MS:
            log = logger.warning
            prefix = "slow query"
        elif random.random() < SAMPLE_RATE:
            log = logger.debug
            prefix = "query"
        else:
            return
        log(
            "%s %dms db=%s sql=%s params=%s",
            prefix,
            elapsed_ms,
            label,
            _compact(statement),
            _digest(parameters),
            extra={"latency_ms": elapsed_ms},
        )
