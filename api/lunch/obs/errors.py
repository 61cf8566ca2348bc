"""Error reporting helpers.

Exceptions that are handled but still worth a look (swallowed storage
failures, crashed sweep iterations) go to Sentry when ``ERROR_DSN`` is set
and to the log otherwise.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import sentry_sdk

logger = logging.getLogger("obs")


def init_sentry(dsn: Optional[str] = None, env: Optional[str] = None) -> None:
    """Initialize Sentry if a DSN is provided."""
    dsn = dsn or os.getenv("ERROR_DSN")
    if not dsn:
        logger.info("ERROR_DSN not set; error sink disabled")
        return
    sentry_sdk.init(dsn=dsn, environment=env or os.getenv("ENV"))


def capture_exception(exc: BaseException, **tags: Any) -> None:
    """Forward ``exc`` with ``tags`` (e.g. ``order_id``) to the error sink."""
    if sentry_sdk.get_client().is_active():
        with sentry_sdk.new_scope() as scope:
            for key, value in tags.items():
                scope.set_tag(key, str(value))
            sentry_sdk.capture_exception(exc)
    else:
        logger.error("Captured exception", exc_info=exc, extra=tags)
