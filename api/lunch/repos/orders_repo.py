"""Repository interface for lunch order persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Sequence
from uuid import UUID

from ..domain import OrderStatus
from ..models import LunchOrder


class OrderStore(ABC):
    """Contract for order persistence.

    Every method is its own unit of work; returned orders are detached
    snapshots and must be re-read before a state-changing decision.
    """

    @abstractmethod
    async def get(self, order_id: UUID) -> LunchOrder | None:
        """Return the order with ``order_id`` or ``None``."""

    @abstractmethod
    async def refresh(self, order: LunchOrder) -> LunchOrder | None:
        """Re-read ``order`` from storage, bypassing any cached copy."""

    @abstractmethod
    async def save(self, order: LunchOrder) -> LunchOrder:
        """Insert or update ``order`` and return the persisted snapshot."""

    @abstractmethod
    async def exists_active_for(self, child_id: UUID, day_of_week: str) -> bool:
        """Return ``True`` if the child holds a non-cancelled order for the day."""

    @abstractmethod
    async def find_all(self) -> Sequence[LunchOrder]:
        """Return every stored order."""

    @abstractmethod
    async def find_relevant(
        self,
        completed_cutoff: datetime,
        *,
        child_id: UUID | None = None,
        parent_id: UUID | None = None,
    ) -> Sequence[LunchOrder]:
        """Return non-cancelled orders, dropping completions older than the cutoff."""

    @abstractmethod
    async def find_by_parent_and_status(
        self, parent_id: UUID, status: OrderStatus
    ) -> Sequence[LunchOrder]:
        """Return the parent's orders currently in ``status``."""

    @abstractmethod
    async def transition(
        self,
        order_id: UUID,
        expected: Iterable[OrderStatus],
        target: OrderStatus,
        now: datetime,
        completed_on: datetime | None = None,
    ) -> bool:
        """Atomically move the order to ``target`` if its status is in ``expected``.

        Returns ``False`` when the stored status no longer matches, meaning a
        concurrent writer got there first.
        """
