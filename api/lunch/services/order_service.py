"""Create, cancel and list lunch orders.

This is the surface the HTTP layer calls. Payment happens before an order is
created, so a new order starts out ``PAID``.
"""

from __future__ import annotations

import logging
import uuid
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from config import Settings

from ..domain import OrderStatus
from ..errors import OrderNotFoundError, OrderStateConflictError
from ..models import LunchOrder
from ..repos.orders_repo import OrderStore
from ..routes_metrics import lunch_orders_cancelled_total, lunch_orders_created_total
from ..schemas import LunchOrderRequest
from . import order_validator
from .cancellation_guard import CancellationGuard
from .clock import Clock
from .order_query import OrderQueryService
from .pricing import order_total

logger = logging.getLogger(__name__)


class LunchOrderService:
    def __init__(self, store: OrderStore, clock: Clock, settings: Settings) -> None:
        self.store = store
        self.clock = clock
        self.settings = settings
        self.guard = CancellationGuard(store, clock, settings)
        self.queries = OrderQueryService(store, clock, settings)

    async def create_order(self, request: LunchOrderRequest) -> LunchOrder:
        """Validate ``request`` and persist a new ``PAID`` order."""

        logger.info(
            "Creating order for childId: %s, dayOfWeek: %s, quantity: %s",
            request.child_id,
            request.day_of_week,
            request.quantity,
        )
        now = self.clock.now()
        day = order_validator.check_request(request, now, self.settings)
        order_validator.check_not_duplicate(
            await self.store.exists_active_for(request.child_id, day.value), day
        )

        unit_price = self.settings.unit_price
        order = LunchOrder(
            id=uuid.uuid4(),
            parent_id=request.parent_id,
            wallet_id=request.wallet_id,
            child_id=request.child_id,
            meal=request.meal,
            quantity=request.quantity,
            day_of_week=day.value,
            unit_price=unit_price,
            total=order_total(unit_price, request.quantity),
            status=OrderStatus.PAID,
            created_on=now,
            updated_on=now,
            completed_on=None,
        )
        try:
            saved = await self.store.save(order)
        except IntegrityError as exc:
            # Lost a race with a concurrent order for the same child and day
            raise order_validator.duplicate_error(day) from exc
        lunch_orders_created_total.inc()
        logger.info(
            "Order created and paid. orderId: %s, total: %s, status: %s",
            saved.id,
            saved.total,
            saved.status.value,
        )
        return saved

    async def cancel_order(self, order_id: UUID, child_id: UUID) -> LunchOrder:
        """Cancel the child's order if the guard allows it; return the new snapshot."""

        logger.info(
            "Processing cancellation for orderId: %s, childId: %s", order_id, child_id
        )
        now = self.clock.now()
        order = await self.guard.check(order_id, child_id, now)

        if not await self.store.transition(
            order.id, (OrderStatus.PAID,), OrderStatus.CANCELLED, now
        ):
            # Someone else moved the order between the check and the write
            current = await self.store.get(order.id)
            if current is None:
                raise OrderNotFoundError(order_id)
            reason = (
                OrderStateConflictError.ALREADY_COMPLETED
                if current.status is OrderStatus.COMPLETED
                else OrderStateConflictError.NOT_ACTIVE
            )
            raise OrderStateConflictError(reason)

        lunch_orders_cancelled_total.inc()
        logger.info(
            "Order cancelled. orderId: %s, previousStatus: %s, newStatus: %s",
            order_id,
            order.status.value,
            OrderStatus.CANCELLED.value,
        )
        cancelled = await self.store.get(order.id)
        if cancelled is None:
            raise OrderNotFoundError(order_id)
        return cancelled

    async def list_orders(self, child_id: UUID) -> list[LunchOrder]:
        return await self.queries.list_for_child(child_id)

    async def list_for_parent(
        self, parent_id: UUID, status: OrderStatus | None = None
    ) -> list[LunchOrder]:
        if status is None:
            return await self.queries.list_for_parent(parent_id)
        return await self.queries.list_for_parent_by_status(parent_id, status)
