"""Domain models and helpers."""

from .meals import Meal
from .order_status import TERMINAL, TRANSITIONS, OrderStatus, can_transition
from .weekdays import BUSINESS_DAYS, Weekday, parse_weekday

__all__ = [
    "BUSINESS_DAYS",
    "Meal",
    "OrderStatus",
    "TERMINAL",
    "TRANSITIONS",
    "Weekday",
    "can_transition",
    "parse_weekday",
]
