"""Database models for lunch orders.

The models are kept free of application wiring so they can be used from
tests and maintenance scripts independently.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    Index,
    Integer,
    Numeric,
    String,
    Uuid,
    text,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

from .domain import Meal, OrderStatus

Base = declarative_base()


class AwareDateTime(TypeDecorator):
    """Store datetimes as UTC and always hand back aware values.

    SQLite drops the offset of ``DateTime(timezone=True)`` values, so
    everything is normalised to UTC on the way in and re-tagged on the way
    out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, str):
            value = datetime.fromisoformat(value)
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class LunchOrder(Base):
    """A prepaid lunch for one child on one weekday."""

    __tablename__ = "lunch_orders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    parent_id = Column(Uuid, nullable=False, index=True)
    wallet_id = Column(Uuid, nullable=True)
    child_id = Column(Uuid, nullable=False, index=True)
    meal = Column(Enum(Meal), nullable=False)
    quantity = Column(Integer, nullable=False)
    # Stored as text so malformed rows can be skipped rather than fail to load
    day_of_week = Column(String(16), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    status = Column(Enum(OrderStatus), nullable=False)
    created_on = Column(AwareDateTime, nullable=False)
    updated_on = Column(AwareDateTime, nullable=False)
    completed_on = Column(AwareDateTime, nullable=True)

    __table_args__ = (
        Index(
            "uq_lunch_orders_child_day_active",
            "child_id",
            "day_of_week",
            unique=True,
            sqlite_where=text("status != 'CANCELLED'"),
            postgresql_where=text("status != 'CANCELLED'"),
        ),
    )

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return (
            f"<LunchOrder {self.id} child={self.child_id} "
            f"day={self.day_of_week} status={self.status}>"
        )


__all__ = ["AwareDateTime", "Base", "LunchOrder"]
