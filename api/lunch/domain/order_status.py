"""Order status enumeration and allowed transitions."""

from __future__ import annotations

from enum import Enum


class OrderStatus(str, Enum):
    """Enumerate the lifecycle states for a lunch order."""

    PAID = "PAID"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


TRANSITIONS: dict[OrderStatus, list[OrderStatus]] = {
    OrderStatus.PAID: [OrderStatus.CANCELLED, OrderStatus.COMPLETED],
    OrderStatus.CANCELLED: [],
    OrderStatus.COMPLETED: [],
}

TERMINAL = frozenset(s for s, targets in TRANSITIONS.items() if not targets)


def can_transition(src: OrderStatus, dst: OrderStatus) -> bool:
    """Return ``True`` if an order can move from ``src`` to ``dst``."""

    return dst in TRANSITIONS.get(src, [])
