"""Lunch order API routes.

Thin HTTP shell over :class:`~.services.order_service.LunchOrderService`;
domain errors are turned into error envelopes by the handler registered in
:mod:`.main`.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Request

from .domain import OrderStatus
from .models import LunchOrder
from .schemas import LunchOrderOut, LunchOrderRequest
from .services.order_service import LunchOrderService
from .utils.responses import ok

router = APIRouter(prefix="/api/v1/lunches")


def _service(request: Request) -> LunchOrderService:
    return request.app.state.order_service


def _dump(order: LunchOrder) -> dict:
    return LunchOrderOut.model_validate(order).model_dump(mode="json")


@router.post("/order", status_code=201)
async def create_lunch_order(payload: LunchOrderRequest, request: Request) -> dict:
    """Place and pay a lunch order."""
    order = await _service(request).create_order(payload)
    return ok(_dump(order))


@router.delete("/{order_id}")
async def cancel_lunch_order(order_id: UUID, child_id: UUID, request: Request) -> dict:
    """Cancel ``order_id`` on behalf of ``child_id``."""
    order = await _service(request).cancel_order(order_id, child_id)
    return ok(_dump(order))


@router.get("/child/{child_id}")
async def list_child_lunches(child_id: UUID, request: Request) -> dict:
    orders = await _service(request).list_orders(child_id)
    return ok([_dump(o) for o in orders])


@router.get("/parent/{parent_id}")
async def list_parent_lunches(
    parent_id: UUID, request: Request, status: Optional[OrderStatus] = None
) -> dict:
    """List a parent's lunches; ``status`` returns the raw per-status listing."""
    orders = await _service(request).list_for_parent(parent_id, status)
    return ok([_dump(o) for o in orders])
