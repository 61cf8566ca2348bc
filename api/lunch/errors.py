"""Domain errors raised by the lunch order services.

Each error carries a stable ``code`` and the HTTP status the API layer
answers with; messages are user facing.
"""

from __future__ import annotations


class LunchOrderError(Exception):
    """Base class for expected, user-facing order failures."""

    code = "ORDER_ERROR"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class OrderValidationError(LunchOrderError):
    """A creation request broke one of the ordering rules.

    ``rule`` names the failed rule: ``quantity``, ``weekday``, ``cutoff``,
    ``window`` or ``duplicate``.
    """

    code = "VALIDATION"
    status_code = 400

    def __init__(self, rule: str, message: str) -> None:
        super().__init__(message)
        self.rule = rule


class OrderNotFoundError(LunchOrderError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, order_id) -> None:
        super().__init__("Order not found")
        self.order_id = order_id


class OrderOwnershipError(LunchOrderError):
    code = "NOT_OWNER"
    status_code = 403

    def __init__(self) -> None:
        super().__init__("Order does not belong to the specified child")


class OrderStateConflictError(LunchOrderError):
    """The order exists but cannot be cancelled in its current state.

    ``reason`` is one of ``already_completed``, ``not_active`` or
    ``too_late``.
    """

    code = "STATE_CONFLICT"
    status_code = 409

    ALREADY_COMPLETED = "already_completed"
    NOT_ACTIVE = "not_active"
    TOO_LATE = "too_late"

    _MESSAGES = {
        ALREADY_COMPLETED: "Cannot cancel a completed order",
        NOT_ACTIVE: "Only paid orders can be cancelled",
        TOO_LATE: (
            "Your lunch is almost completed, we are afraid it is too late "
            "to cancel this order."
        ),
    }

    def __init__(self, reason: str) -> None:
        super().__init__(self._MESSAGES[reason])
        self.reason = reason


__all__ = [
    "LunchOrderError",
    "OrderNotFoundError",
    "OrderOwnershipError",
    "OrderStateConflictError",
    "OrderValidationError",
]
