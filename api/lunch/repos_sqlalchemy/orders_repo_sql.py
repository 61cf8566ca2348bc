"""SQLAlchemy implementation of :class:`~..repos.orders_repo.OrderStore`.

Each call opens its own session from the supplied ``async_sessionmaker`` and
commits before returning, so callers never share a transaction by accident.
Status changes go through :meth:`SqlOrderStore.transition`, a conditional
``UPDATE`` that only matches rows still in the expected status; concurrent
writers therefore cannot overwrite each other's terminal state.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..domain import OrderStatus, can_transition
from ..models import LunchOrder
from ..repos.orders_repo import OrderStore

logger = logging.getLogger(__name__)


class SqlOrderStore(OrderStore):
    """Order store backed by an async SQLAlchemy engine."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    async def get(self, order_id: UUID) -> LunchOrder | None:
        async with self._sessionmaker() as session:
            return await session.get(LunchOrder, order_id)

    async def refresh(self, order: LunchOrder) -> LunchOrder | None:
        async with self._sessionmaker() as session:
            return await session.get(
                LunchOrder, order.id, populate_existing=True
            )

    async def save(self, order: LunchOrder) -> LunchOrder:
        async with self._sessionmaker() as session:
            merged = await session.merge(order)
            await session.commit()
            return merged

    async def exists_active_for(self, child_id: UUID, day_of_week: str) -> bool:
        async with self._sessionmaker() as session:
            result = await session.execute(
                select(LunchOrder.id)
                .where(
                    LunchOrder.child_id == child_id,
                    LunchOrder.day_of_week == day_of_week,
                    LunchOrder.status != OrderStatus.CANCELLED,
                )
                .limit(1)
            )
            return result.first() is not None

    async def find_all(self) -> Sequence[LunchOrder]:
        async with self._sessionmaker() as session:
            result = await session.execute(select(LunchOrder))
            return result.scalars().all()

    async def find_relevant(
        self,
        completed_cutoff: datetime,
        *,
        child_id: UUID | None = None,
        parent_id: UUID | None = None,
    ) -> Sequence[LunchOrder]:
        if (child_id is None) == (parent_id is None):
            raise ValueError("exactly one of child_id or parent_id is required")
        owner = (
            LunchOrder.child_id == child_id
            if child_id is not None
            else LunchOrder.parent_id == parent_id
        )
        visible = or_(
            LunchOrder.status == OrderStatus.PAID,
            and_(
                LunchOrder.status == OrderStatus.COMPLETED,
                or_(
                    LunchOrder.completed_on.is_(None),
                    LunchOrder.completed_on >= completed_cutoff,
                ),
            ),
        )
        async with self._sessionmaker() as session:
            result = await session.execute(
                select(LunchOrder)
                .where(owner, visible)
                .order_by(LunchOrder.created_on)
            )
            return result.scalars().all()

    async def find_by_parent_and_status(
        self, parent_id: UUID, status: OrderStatus
    ) -> Sequence[LunchOrder]:
        async with self._sessionmaker() as session:
            result = await session.execute(
                select(LunchOrder)
                .where(LunchOrder.parent_id == parent_id, LunchOrder.status == status)
                .order_by(LunchOrder.created_on)
            )
            return result.scalars().all()

    async def transition(
        self,
        order_id: UUID,
        expected: Iterable[OrderStatus],
        target: OrderStatus,
        now: datetime,
        completed_on: datetime | None = None,
    ) -> bool:
        expected = tuple(expected)
        for status in expected:
            if status is not target and not can_transition(status, target):
                raise ValueError(
                    f"illegal transition {status.value} -> {target.value}"
                )
        values: dict = {"status": target, "updated_on": now}
        if target is OrderStatus.COMPLETED:
            values["completed_on"] = completed_on or now
        async with self._sessionmaker() as session:
            result = await session.execute(
                update(LunchOrder)
                .where(
                    LunchOrder.id == order_id,
                    LunchOrder.status.in_(expected),
                )
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
        changed = result.rowcount == 1
        if not changed:
            logger.debug(
                "transition of order %s to %s matched no row", order_id, target.value
            )
        return changed
