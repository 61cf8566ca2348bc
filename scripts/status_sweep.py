#!/usr/bin/env python3
"""Complete today's paid lunch orders.

Runs the same sweep as the API's background triggers, for use from cron or a
systemd timer when the sweeper is disabled in the API process.

Environment variables:
- DATABASE_URL: SQLAlchemy async URL of the order database.
- TIMEZONE: school timezone used to decide what "today" is.

By default the sweep runs unconditionally. ``--poll`` applies the polling
trigger's rule instead and only sweeps inside the window after
``sweep_time``.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]
sys.path.append(str(BASE_DIR))

from config import get_settings  # noqa: E402
from api.lunch import db as app_db  # noqa: E402
from api.lunch.obs.logging import configure_logging  # noqa: E402
from api.lunch.repos_sqlalchemy import SqlOrderStore  # noqa: E402
from api.lunch.services.clock import Clock  # noqa: E402
from api.lunch.services.status_sweeper import StatusSweeper  # noqa: E402

logger = logging.getLogger("status_sweep")


async def run(
    database_url: str | None = None, poll: bool = False, clock: Clock | None = None
) -> int | None:
    """Run one sweep and return the number of completed orders.

    Returns ``None`` when ``poll`` is set and the polling window is not open.
    """

    settings = get_settings()
    engine = app_db.create_engine(database_url or settings.database_url, "sweep")
    try:
        await app_db.init_db(engine)
        store = SqlOrderStore(app_db.create_sessionmaker(engine))
        sweeper = StatusSweeper(store, clock or Clock(settings.timezone), settings)
        if poll:
            return await sweeper.poll()
        return await sweeper.sweep("manual")
    finally:
        await engine.dispose()


def _cli() -> None:
    parser = argparse.ArgumentParser(description="Complete today's paid lunches")
    parser.add_argument("--database-url", help="Override DATABASE_URL")
    parser.add_argument(
        "--poll",
        action="store_true",
        help="Only sweep inside the polling window after sweep_time",
    )
    args = parser.parse_args()
    configure_logging(get_settings().log_level.upper())
    completed = asyncio.run(run(args.database_url, poll=args.poll))
    if completed is None:
        logger.info("outside the sweep window; nothing to do")
    else:
        logger.info("completed %d orders", completed)


if __name__ == "__main__":
    _cli()
