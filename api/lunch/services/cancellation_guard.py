"""Decide whether a lunch order may still be cancelled.

On the order day the kitchen starts preparing at the lock time, so same-day
cancellations are refused from then on. From the completion time the lunch
is considered served: if the background sweep has not caught up yet, the
guard completes the order itself before refusing the cancellation.

The forced completion is written through the store in its own unit of work.
It is not rolled back with the surrounding cancellation, and a failure to
write it is logged and reported to the error sink but never replaces the
"already completed" answer the caller gets.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import NoReturn
from uuid import UUID

from config import Settings

from ..domain import OrderStatus, Weekday, parse_weekday
from ..errors import (
    LunchOrderError,
    OrderNotFoundError,
    OrderOwnershipError,
    OrderStateConflictError,
)
from ..models import LunchOrder
from ..obs import capture_exception
from ..repos.orders_repo import OrderStore
from ..routes_metrics import (
    lunch_cancellations_refused_total,
    lunch_orders_completed_total,
)
from .clock import Clock

logger = logging.getLogger(__name__)


class CancelDecision(str, Enum):
    ALLOW = "allow"
    TOO_LATE = "too_late"
    FORCE_COMPLETE = "force_complete"


def evaluate(order_day: Weekday, now: datetime, settings: Settings) -> CancelDecision:
    """Return what a cancellation of a ``PAID`` order for ``order_day`` means at ``now``."""

    if order_day is not Weekday.of(now.date()):
        return CancelDecision.ALLOW
    current = now.time()
    if current < settings.lock_time:
        return CancelDecision.ALLOW
    if current < settings.completion_time:
        return CancelDecision.TOO_LATE
    return CancelDecision.FORCE_COMPLETE


class CancellationGuard:
    """Validate cancellation requests against ownership, status and time."""

    def __init__(self, store: OrderStore, clock: Clock, settings: Settings) -> None:
        self.store = store
        self.clock = clock
        self.settings = settings

    async def check(
        self, order_id: UUID, child_id: UUID, now: datetime | None = None
    ) -> LunchOrder:
        """Return the freshly loaded order if it may be cancelled at ``now``.

        Raises a :class:`~..errors.LunchOrderError` subclass otherwise.
        """

        now = now or self.clock.now()
        order = await self.store.get(order_id)
        if order is None:
            logger.warning("Order not found for orderId: %s", order_id)
            raise OrderNotFoundError(order_id)

        # The sweep may have completed the order since it was loaded
        order = await self.store.refresh(order)
        if order is None:
            raise OrderNotFoundError(order_id)
        logger.debug("Order %s refreshed, current status: %s", order_id, order.status)

        if order.child_id != child_id:
            logger.warning("Order %s does not belong to child %s", order_id, child_id)
            raise OrderOwnershipError()

        if order.status is OrderStatus.COMPLETED:
            self._refuse(order, OrderStateConflictError.ALREADY_COMPLETED)
        if order.status is not OrderStatus.PAID:
            self._refuse(order, OrderStateConflictError.NOT_ACTIVE)

        try:
            order_day = parse_weekday(order.day_of_week)
        except ValueError:
            logger.error(
                "Invalid day of week in order %s: %s", order_id, order.day_of_week
            )
            raise LunchOrderError(
                f"Invalid day of week in order: {order.day_of_week}"
            ) from None

        decision = evaluate(order_day, now, self.settings)
        if decision is CancelDecision.TOO_LATE:
            self._refuse(order, OrderStateConflictError.TOO_LATE)
        if decision is CancelDecision.FORCE_COMPLETE:
            logger.info(
                "Order %s is for today after %s, completing it",
                order_id,
                self.settings.completion_time,
            )
            await self.force_complete(order.id, now)
            self._refuse(order, OrderStateConflictError.ALREADY_COMPLETED)
        return order

    async def force_complete(self, order_id: UUID, now: datetime) -> bool:
        """Mark the order ``COMPLETED`` at ``now``, swallowing storage failures.

        Re-running it on an already completed order re-stamps
        ``completed_on``. Cancelled orders are left untouched.
        """

        try:
            changed = await self.store.transition(
                order_id,
                (OrderStatus.PAID, OrderStatus.COMPLETED),
                OrderStatus.COMPLETED,
                now,
                completed_on=now,
            )
        except Exception as exc:
            logger.error(
                "Failed to update order %s to COMPLETED, still blocking cancellation: %s",
                order_id,
                exc,
            )
            capture_exception(exc, order_id=order_id)
            return False
        if changed:
            lunch_orders_completed_total.labels(source="forced").inc()
            logger.info("Order %s updated to COMPLETED", order_id)
        return changed

    def _refuse(self, order: LunchOrder, reason: str) -> NoReturn:
        lunch_cancellations_refused_total.labels(reason=reason).inc()
        logger.warning(
            "Cannot cancel order %s (status %s): %s",
            order.id,
            order.status.value,
            reason,
        )
        raise OrderStateConflictError(reason)
