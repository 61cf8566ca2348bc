# start_app.py
"""Create the order tables and launch the API server."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

import uvicorn
from dotenv import load_dotenv

import config


async def _prepare_database(url: str) -> None:
    from api.lunch import db as app_db

    engine = app_db.create_engine(url, label="startup")
    try:
        await app_db.init_db(engine)
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> None:
    """Load settings, optionally create the schema, then start the API."""

    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--skip-db-init",
        action="store_true",
        help="Start without creating missing tables",
    )
    parser.add_argument(
        "--no-sweeper",
        action="store_true",
        help="Do not run the status sweeper inside the API process",
    )
    args = parser.parse_args(argv)

    load_dotenv()  # load environment variables from a .env file

    if args.no_sweeper:
        os.environ["SWEEPER_ENABLED"] = "false"
    config.get_settings.cache_clear()
    settings = config.get_settings()  # pick up any override from .env

    if not args.skip_db_init:
        try:
            asyncio.run(_prepare_database(settings.database_url))
        except OSError as exc:
            print(f"database unavailable: {exc}", file=sys.stderr)
            raise SystemExit(1)

    uvicorn.run(
        "api.lunch.main:app",
        host="0.0.0.0",  # nosec B104: bind for local development
        port=int(os.getenv("PORT", "8000")),
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
