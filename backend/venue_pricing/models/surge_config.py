"""Surge pricing configuration for a location or sub-location."""

from __future__ import annotations

import datetime
import uuid
from typing import Any

from sqlalchemy import Boolean, DateTime, Enum, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from venue_pricing.db.base import Base
from venue_pricing.models.mixins import JSONB_TYPE, TimestampMixin
from venue_pricing.pricing.types import HierarchyLevel


class SurgeConfig(TimestampMixin, Base):
    """Demand/supply inputs plus the bounds of the surge multiplier."""

    __tablename__ = "surge_configs"
    __table_args__ = (
        Index("ix_surge_configs_level_entity", "applies_to_level", "entity_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1024))
    applies_to_level: Mapped[HierarchyLevel] = mapped_column(
        Enum(HierarchyLevel), nullable=False
    )
    entity_id: Mapped[uuid.UUID] = mapped_column(nullable=False)
    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    effective_from: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    effective_to: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True)
    )

    current_demand: Mapped[float] = mapped_column(Float, nullable=False)
    current_supply: Mapped[float] = mapped_column(Float, nullable=False)
    historical_avg_pressure: Mapped[float] = mapped_column(Float, nullable=False)

    alpha: Mapped[float] = mapped_column(Float, nullable=False)
    min_multiplier: Mapped[float] = mapped_column(Float, nullable=False)
    max_multiplier: Mapped[float] = mapped_column(Float, nullable=False)
    surge_duration_hours: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    time_windows: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB_TYPE, default=list, nullable=False
    )

    materialized_rule_id: Mapped[uuid.UUID | None] = mapped_column()
    last_materialized_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True)
    )
