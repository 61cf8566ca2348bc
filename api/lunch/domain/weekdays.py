"""Day-of-week helpers.

Orders are keyed by weekday name rather than calendar date, so a stored value
is plain text (``"MONDAY"``) and has to be parsed back before comparing it
with the clock.
"""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum


class Weekday(str, Enum):
    """Days of the week in :meth:`datetime.date.weekday` order."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def of(cls, day: date) -> "Weekday":
        """Return the weekday of ``day``."""
        return _ORDERED[day.weekday()]

    @property
    def is_business_day(self) -> bool:
        return self in BUSINESS_DAYS


_ORDERED = list(Weekday)

BUSINESS_DAYS = frozenset(_ORDERED[:5])


def parse_weekday(value: str | Weekday) -> Weekday:
    """Return the :class:`Weekday` named by ``value``.

    Matching is case-insensitive. Raises :class:`ValueError` for anything
    that is not a day name.
    """
    if isinstance(value, Weekday):
        return value
    try:
        return Weekday(str(value).strip().upper())
    except ValueError:
        raise ValueError(f"invalid day of week: {value!r}") from None


def next_working_days(today: date, include_today: bool, count: int = 5) -> set[Weekday]:
    """Return the next ``count`` business weekdays starting from ``today``."""
    days: set[Weekday] = set()
    current = today
    if include_today and Weekday.of(current).is_business_day:
        days.add(Weekday.of(current))
    while len(days) < count:
        current += timedelta(days=1)
        if Weekday.of(current).is_business_day:
            days.add(Weekday.of(current))
    return days
