"""Background sweep moving today's paid lunches to ``COMPLETED``.

Two triggers run side by side:

* the daily trigger sleeps until ``sweep_time`` and sweeps once per day;
* the polling trigger wakes every ``sweep_poll_secs`` and sweeps when the
  clock is inside ``[sweep_time, sweep_time + sweep_window_minutes)`` and the
  current date differs from :attr:`StatusSweeper.last_processed_date`.

Both may fire in the same window. No lock is taken between them: each record
is completed with a conditional update that only matches ``PAID`` rows, so
whichever trigger comes second finds nothing left to write. The polling
trigger's date marker only saves a redundant full scan.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta

from config import Settings

from ..domain import OrderStatus, Weekday, parse_weekday
from ..models import LunchOrder
from ..obs import capture_exception
from ..repos.orders_repo import OrderStore
from ..routes_metrics import lunch_orders_completed_total, lunch_sweep_runs_total
from .clock import Clock

logger = logging.getLogger(__name__)


class StatusSweeper:
    """Owns both sweep triggers and the polling trigger's date marker."""

    def __init__(self, store: OrderStore, clock: Clock, settings: Settings) -> None:
        self.store = store
        self.clock = clock
        self.settings = settings
        self.last_processed_date: date | None = None
        self._tasks: list[asyncio.Task] = []

    async def sweep(self, trigger: str = "daily") -> int:
        """Complete every ``PAID`` order for today; return how many changed.

        All orders completed by one run share a single ``completed_on``.
        """

        now = self.clock.now()
        today = Weekday.of(now.date())
        lunch_sweep_runs_total.labels(trigger=trigger).inc()

        orders = await self.store.find_all()
        due = [order for order in orders if self._is_due(order, today)]
        completed = 0
        for order in due:
            try:
                changed = await self.store.transition(
                    order.id,
                    (OrderStatus.PAID,),
                    OrderStatus.COMPLETED,
                    now,
                    completed_on=now,
                )
            except Exception as exc:
                logger.error("Failed to complete order %s: %s", order.id, exc)
                capture_exception(exc, order_id=order.id)
                continue
            if changed:
                completed += 1

        if completed:
            lunch_orders_completed_total.labels(source=trigger).inc(completed)
            logger.info(
                "%s sweep: updated %d orders from PAID to COMPLETED for %s",
                trigger,
                completed,
                today.value,
            )
        else:
            logger.info(
                "%s sweep: no PAID orders to complete for %s", trigger, today.value
            )
        return completed

    def _is_due(self, order: LunchOrder, today: Weekday) -> bool:
        if order.status is not OrderStatus.PAID:
            return False
        try:
            day = parse_weekday(order.day_of_week)
        except ValueError:
            logger.warning(
                "Invalid day of week in order %s: %s", order.id, order.day_of_week
            )
            return False
        return day is today

    def in_window(self, now: datetime) -> bool:
        wall = now.replace(tzinfo=None)
        start = datetime.combine(wall.date(), self.settings.sweep_time)
        end = start + timedelta(minutes=self.settings.sweep_window_minutes)
        return start <= wall < end

    async def poll(self) -> int | None:
        """Run the polling trigger once.

        Returns the number of completed orders, or ``None`` when the trigger
        was not due.
        """

        now = self.clock.now()
        today = now.date()
        if not self.in_window(now) or self.last_processed_date == today:
            return None
        logger.info("Polling sweep started at %s", now.time())
        completed = await self.sweep("poll")
        self.last_processed_date = today
        return completed

    def seconds_until_daily(self, now: datetime) -> float:
        """Return the delay from ``now`` to the next daily trigger."""
        target = datetime.combine(
            now.date(), self.settings.sweep_time, tzinfo=now.tzinfo
        )
        if target <= now:
            target += timedelta(days=1)
        # Same-zone subtraction is wall-clock time; DST days need real elapsed time
        return target.timestamp() - now.timestamp()

    async def _daily_loop(self) -> None:
        while True:
            await asyncio.sleep(self.seconds_until_daily(self.clock.now()))
            try:
                await self.sweep("daily")
            except Exception as exc:
                logger.exception("Daily sweep failed")
                capture_exception(exc, trigger="daily")

    async def _poll_loop(self) -> None:
        while True:
            try:
                await self.poll()
            except Exception as exc:
                logger.exception("Polling sweep failed")
                capture_exception(exc, trigger="poll")
            await asyncio.sleep(self.settings.sweep_poll_secs)

    def start(self) -> None:
        """Launch both triggers as background tasks on the running loop."""
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._daily_loop(), name="lunch-sweep-daily"),
            asyncio.create_task(self._poll_loop(), name="lunch-sweep-poll"),
        ]
        logger.info(
            "Status sweeper started (daily at %s, polling every %ss)",
            self.settings.sweep_time,
            self.settings.sweep_poll_secs,
        )

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
