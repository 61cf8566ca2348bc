"""Rules deciding whether a lunch may be ordered right now.

The checks are pure: they look only at the request, the current instant and
whether the child already holds an active order for the day. Rules run in a
fixed order and the first failure is reported.
"""

from __future__ import annotations

from datetime import datetime

from config import Settings

from ..domain import Weekday, parse_weekday
from ..domain.weekdays import next_working_days
from ..errors import OrderValidationError
from ..schemas import LunchOrderRequest


def check_request(
    request: LunchOrderRequest, now: datetime, settings: Settings
) -> Weekday:
    """Apply the quantity, weekday and cutoff rules to ``request``.

    Returns the parsed order day. ``now`` must be in school-local time.
    """

    if request.quantity < 1:
        raise OrderValidationError(
            "quantity", "Quantity must be greater than zero"
        )

    try:
        day = parse_weekday(request.day_of_week)
    except ValueError:
        day = None
    if day is None or not day.is_business_day:
        raise OrderValidationError(
            "weekday", "Lunch can only be ordered for Monday to Friday"
        )

    today = Weekday.of(now.date())
    before_cutoff = now.time() < settings.order_cutoff
    if day is today and not before_cutoff:
        raise OrderValidationError(
            "cutoff",
            f"Orders for today must be placed before "
            f"{settings.order_cutoff:%H:%M}. It is too late to order lunch for today.",
        )

    if settings.enforce_five_day_window and day not in next_working_days(
        now.date(), include_today=before_cutoff
    ):
        raise OrderValidationError(
            "window", "Lunch can only be ordered for the next 5 working days."
        )

    return day


def duplicate_error(day: Weekday) -> OrderValidationError:
    return OrderValidationError(
        "duplicate", f"Child already has an order for {day.value}"
    )


def check_not_duplicate(active_exists: bool, day: Weekday) -> None:
    """Reject a second active order for the same child and weekday."""
    if active_exists:
        raise duplicate_error(day)
