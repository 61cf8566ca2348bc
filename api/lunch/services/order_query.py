"""Read path for listing a child's or parent's lunches.

Cancelled orders are never shown. Completed orders stay visible for a short
window after completion so the family can see the lunch was served, then
drop out of the list.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Sequence
from uuid import UUID

from config import Settings

from ..domain import OrderStatus
from ..models import LunchOrder
from ..repos.orders_repo import OrderStore
from .clock import Clock

logger = logging.getLogger(__name__)


def is_visible(order: LunchOrder, now: datetime, window: timedelta) -> bool:
    """Return ``True`` if ``order`` belongs in a listing at ``now``."""
    if order.status is OrderStatus.PAID:
        return True
    if order.status is OrderStatus.COMPLETED:
        return order.completed_on is None or order.completed_on >= now - window
    return False


class OrderQueryService:
    def __init__(self, store: OrderStore, clock: Clock, settings: Settings) -> None:
        self.store = store
        self.clock = clock
        self.window = timedelta(hours=settings.completed_visibility_hours)

    async def list_for_child(self, child_id: UUID) -> list[LunchOrder]:
        now = self.clock.now()
        orders = await self.store.find_relevant(now - self.window, child_id=child_id)
        result = self._filter(orders, now)
        logger.info("Found %d orders for childId: %s", len(result), child_id)
        return result

    async def list_for_parent(self, parent_id: UUID) -> list[LunchOrder]:
        now = self.clock.now()
        orders = await self.store.find_relevant(now - self.window, parent_id=parent_id)
        result = self._filter(orders, now)
        logger.info("Found %d orders for parentId: %s", len(result), parent_id)
        return result

    async def list_for_parent_by_status(
        self, parent_id: UUID, status: OrderStatus
    ) -> list[LunchOrder]:
        """Return the parent's orders in ``status`` without the visibility filter."""
        orders = await self.store.find_by_parent_and_status(parent_id, status)
        return list(orders)

    def _filter(self, orders: Sequence[LunchOrder], now: datetime) -> list[LunchOrder]:
        # The store already narrows the query; re-check against the same instant
        return [o for o in orders if is_visible(o, now, self.window)]
