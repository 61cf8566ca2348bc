"""Request and response models for the lunch API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .domain import Meal, OrderStatus


class LunchOrderRequest(BaseModel):
    """Payload for ordering a lunch.

    ``quantity`` and ``day_of_week`` are checked by the ordering rules rather
    than here so the caller gets the domain message for them.
    """

    parent_id: UUID
    wallet_id: Optional[UUID] = None
    child_id: UUID
    meal: Meal
    quantity: int = Field(..., description="Number of portions")
    day_of_week: str = Field(..., examples=["MONDAY"])


class LunchOrderOut(BaseModel):
    """Order snapshot returned to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    parent_id: UUID
    wallet_id: Optional[UUID] = None
    child_id: UUID
    meal: Meal
    quantity: int
    day_of_week: str
    unit_price: Decimal
    total: Decimal
    status: OrderStatus
    created_on: datetime
    updated_on: datetime
    completed_on: Optional[datetime] = None

    @computed_field  # type: ignore[misc]
    @property
    def meal_name(self) -> str:
        return self.meal.display_name

    @computed_field  # type: ignore[misc]
    @property
    def status_name(self) -> str:
        return self.status.display_name
