from datetime import date

import pytest

from api.lunch.domain import (
    BUSINESS_DAYS,
    OrderStatus,
    TERMINAL,
    Weekday,
    can_transition,
    parse_weekday,
)
from api.lunch.domain.weekdays import next_working_days


def test_paid_moves_to_either_terminal_state():
    assert can_transition(OrderStatus.PAID, OrderStatus.CANCELLED)
    assert can_transition(OrderStatus.PAID, OrderStatus.COMPLETED)


@pytest.mark.parametrize("src", [OrderStatus.CANCELLED, OrderStatus.COMPLETED])
def test_terminal_states_have_no_exit(src):
    assert src in TERMINAL
    assert not any(can_transition(src, dst) for dst in OrderStatus)


def test_display_name():
    assert OrderStatus.CANCELLED.display_name == "Cancelled"


def test_weekday_of_date():
    assert Weekday.of(date(2024, 1, 1)) is Weekday.MONDAY
    assert Weekday.of(date(2024, 1, 6)) is Weekday.SATURDAY
    assert Weekday.SATURDAY not in BUSINESS_DAYS
    assert len(BUSINESS_DAYS) == 5


def test_parse_weekday_is_case_insensitive():
    assert parse_weekday(" tuesday ") is Weekday.TUESDAY
    with pytest.raises(ValueError):
        parse_weekday("FUNDAY")


def test_next_working_days_skips_weekend():
    # Friday 2024-01-05 after the cutoff
    days = next_working_days(date(2024, 1, 5), include_today=False)
    assert days == set(BUSINESS_DAYS)
    days = next_working_days(date(2024, 1, 6), include_today=True)
    assert Weekday.SATURDAY not in days
