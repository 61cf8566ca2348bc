"""Wall clock used by the ordering rules.

Deadlines are expressed in school-local time, so the clock is bound to a
timezone and always hands out aware datetimes.
"""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from ..domain import Weekday


class Clock:
    """System clock in ``tz``; subclass and override :meth:`now` in tests."""

    def __init__(self, tz: str | ZoneInfo = "UTC") -> None:
        self.tz = tz if isinstance(tz, ZoneInfo) else ZoneInfo(tz)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()

    def weekday(self) -> Weekday:
        return Weekday.of(self.today())
