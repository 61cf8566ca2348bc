"""Lunch pricing."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def order_total(unit_price: Decimal, quantity: int) -> Decimal:
    """Return ``unit_price * quantity`` rounded to cents."""
    return (Decimal(unit_price) * quantity).quantize(CENT, rounding=ROUND_HALF_UP)
