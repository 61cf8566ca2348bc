import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from api.lunch.domain import OrderStatus, Weekday
from api.lunch.errors import (
    OrderNotFoundError,
    OrderOwnershipError,
    OrderStateConflictError,
)
from api.lunch.services.cancellation_guard import CancelDecision, evaluate
from api.lunch.services.order_service import LunchOrderService


def _monday(hour, minute=0, second=0):
    return datetime(2024, 1, 1, hour, minute, second, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "when, expected",
    [
        ((0, 0, 0), CancelDecision.ALLOW),
        ((9, 59, 59), CancelDecision.ALLOW),
        ((10, 0, 0), CancelDecision.TOO_LATE),
        ((11, 59, 59), CancelDecision.TOO_LATE),
        ((12, 0, 0), CancelDecision.FORCE_COMPLETE),
        ((23, 59, 59), CancelDecision.FORCE_COMPLETE),
    ],
)
def test_same_day_boundaries(settings, when, expected):
    assert evaluate(Weekday.MONDAY, _monday(*when), settings) is expected


@pytest.mark.parametrize("hour", [9, 10, 11, 12, 18])
def test_other_days_always_allowed(settings, hour):
    assert evaluate(Weekday.FRIDAY, _monday(hour), settings) is CancelDecision.ALLOW


async def _place(store, clock, settings, make_request, **kwargs):
    service = LunchOrderService(store, clock, settings)
    order = await service.create_order(make_request(**kwargs))
    return service, order


@pytest.mark.anyio
async def test_cancel_before_lock_time(store, clock, settings, make_request):
    service, order = await _place(store, clock, settings, make_request)
    clock.set(9, 59, 59)
    cancelled = await service.cancel_order(order.id, order.child_id)
    assert cancelled.status is OrderStatus.CANCELLED
    assert cancelled.completed_on is None
    assert cancelled.updated_on == clock.now()


@pytest.mark.anyio
@pytest.mark.parametrize("when", [(10, 0, 0), (11, 59, 59)])
async def test_cancel_refused_while_kitchen_prepares(
    store, clock, settings, make_request, when
):
    service, order = await _place(store, clock, settings, make_request)
    clock.set(*when)
    with pytest.raises(OrderStateConflictError) as exc:
        await service.cancel_order(order.id, order.child_id)
    assert exc.value.reason == OrderStateConflictError.TOO_LATE
    assert "too late" in exc.value.message
    stored = await store.get(order.id)
    assert stored.status is OrderStatus.PAID
    assert stored.completed_on is None


@pytest.mark.anyio
async def test_cancel_after_completion_time_forces_completion(
    store, clock, settings, make_request
):
    service, order = await _place(store, clock, settings, make_request)
    clock.set(12, 0, 0)
    with pytest.raises(OrderStateConflictError) as exc:
        await service.cancel_order(order.id, order.child_id)
    assert exc.value.reason == OrderStateConflictError.ALREADY_COMPLETED
    stored = await store.get(order.id)
    assert stored.status is OrderStatus.COMPLETED
    assert stored.completed_on == clock.now()


@pytest.mark.anyio
async def test_future_order_cancel_ignores_time(store, clock, settings, make_request):
    service, order = await _place(
        store, clock, settings, make_request, day="THURSDAY"
    )
    clock.set(23, 30)
    cancelled = await service.cancel_order(order.id, order.child_id)
    assert cancelled.status is OrderStatus.CANCELLED


@pytest.mark.anyio
async def test_unknown_order(store, clock, settings):
    service = LunchOrderService(store, clock, settings)
    with pytest.raises(OrderNotFoundError):
        await service.cancel_order(uuid.uuid4(), uuid.uuid4())


@pytest.mark.anyio
async def test_other_child_cannot_cancel(store, clock, settings, make_request):
    service, order = await _place(store, clock, settings, make_request)
    with pytest.raises(OrderOwnershipError):
        await service.cancel_order(order.id, uuid.uuid4())
    assert (await store.get(order.id)).status is OrderStatus.PAID


@pytest.mark.anyio
async def test_cancelled_order_cannot_be_cancelled_again(
    store, clock, settings, make_request
):
    service, order = await _place(store, clock, settings, make_request)
    await service.cancel_order(order.id, order.child_id)
    with pytest.raises(OrderStateConflictError) as exc:
        await service.cancel_order(order.id, order.child_id)
    assert exc.value.reason == OrderStateConflictError.NOT_ACTIVE


@pytest.mark.anyio
async def test_completed_order_reported_as_completed(
    store, clock, settings, make_request
):
    service, order = await _place(store, clock, settings, make_request, day="TUESDAY")
    await service.guard.force_complete(order.id, clock.now())
    with pytest.raises(OrderStateConflictError) as exc:
        await service.cancel_order(order.id, order.child_id)
    assert exc.value.reason == OrderStateConflictError.ALREADY_COMPLETED


@pytest.mark.anyio
async def test_forced_completion_failure_still_refuses(
    store, clock, settings, make_request, monkeypatch
):
    service, order = await _place(store, clock, settings, make_request)
    clock.set(12, 30)

    async def broken_transition(*args, **kwargs):
        raise OperationalError("UPDATE lunch_orders", {}, Exception("disk I/O error"))

    monkeypatch.setattr(store, "transition", broken_transition)
    with pytest.raises(OrderStateConflictError) as exc:
        await service.cancel_order(order.id, order.child_id)
    assert exc.value.reason == OrderStateConflictError.ALREADY_COMPLETED
    monkeypatch.undo()
    assert (await store.get(order.id)).status is OrderStatus.PAID


@pytest.mark.anyio
async def test_forced_completion_restamps(store, clock, settings, make_request):
    service, order = await _place(store, clock, settings, make_request)
    clock.set(12, 0)
    assert await service.guard.force_complete(order.id, clock.now())
    clock.set(12, 45)
    assert await service.guard.force_complete(order.id, clock.now())
    stored = await store.get(order.id)
    assert stored.status is OrderStatus.COMPLETED
    assert stored.completed_on == clock.now()


@pytest.mark.anyio
async def test_forced_completion_leaves_cancelled_orders(
    store, clock, settings, make_request
):
    service, order = await _place(store, clock, settings, make_request)
    await service.cancel_order(order.id, order.child_id)
    assert not await service.guard.force_complete(order.id, clock.now())
    stored = await store.get(order.id)
    assert stored.status is OrderStatus.CANCELLED
    assert stored.completed_on is None


@pytest.mark.anyio
async def test_sweep_between_check_and_write_wins(
    store, clock, settings, make_request, monkeypatch
):
    service, order = await _place(store, clock, settings, make_request)
    original_check = service.guard.check

    async def check_then_sweep(order_id, child_id, now=None):
        checked = await original_check(order_id, child_id, now)
        await store.transition(
            order_id, (OrderStatus.PAID,), OrderStatus.COMPLETED, clock.now()
        )
        return checked

    monkeypatch.setattr(service.guard, "check", check_then_sweep)
    with pytest.raises(OrderStateConflictError) as exc:
        await service.cancel_order(order.id, order.child_id)
    assert exc.value.reason == OrderStateConflictError.ALREADY_COMPLETED
    assert (await store.get(order.id)).status is OrderStatus.COMPLETED
