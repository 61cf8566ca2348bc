# config.py

"""Application configuration utilities.

Values are primarily loaded from ``config.json`` and may be overridden by
environment variables. The :func:`get_settings` helper merges the two sources
and caches the result.
"""

from __future__ import annotations

import json
import os
from datetime import time
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings merged from JSON and environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./lunch.db"
    timezone: str = "UTC"
    unit_price: Decimal = Decimal("2.50")
    # Same-day deadlines, school wall clock
    order_cutoff: time = time(10, 0)
    lock_time: time = time(10, 0)
    completion_time: time = time(12, 0)
    sweep_time: time = time(13, 0)
    sweep_window_minutes: int = 5
    sweep_poll_secs: int = 300
    completed_visibility_hours: int = 7
    enforce_five_day_window: bool = False
    sweeper_enabled: bool = True
    log_level: str = "INFO"
    error_dsn: str | None = None

    @field_validator("completion_time")
    @classmethod
    def _completion_after_lock(cls, value: time, info) -> time:
        lock = info.data.get("lock_time")
        if lock is not None and value < lock:
            raise ValueError("completion_time must not be earlier than lock_time")
        return value

    @field_validator("sweep_window_minutes")
    @classmethod
    def _window_within_day(cls, value: int, info) -> int:
        if value < 1:
            raise ValueError("sweep_window_minutes must be positive")
        start = info.data.get("sweep_time")
        if start is not None:
            start_secs = start.hour * 3600 + start.minute * 60 + start.second
            if start_secs + value * 60 > 24 * 3600:
                raise ValueError("sweep window must end by midnight")
        return value


# Cached singleton to avoid repeated file reads
@lru_cache
def get_settings() -> Settings:
    """Return merged settings with environment variable precedence.

    The configuration is read from ``config.json`` located alongside this file
    and fed into :class:`Settings`. Environment variables override any values
    from the JSON file. The result is cached to prevent repeated disk reads.
    """

    config_path = Path(__file__).with_name("config.json")
    data = json.loads(config_path.read_text()) if config_path.exists() else {}
    env_override = {
        k.lower(): v
        for k, v in os.environ.items()
        if k.lower() in Settings.model_fields
    }
    merged = {**data, **env_override}
    # Environment variables override values from the JSON file.
    return Settings(**merged)
