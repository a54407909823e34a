"""Rate sheet rules attached at any hierarchy level."""

from __future__ import annotations

import datetime
import uuid
from typing import Any

from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from venue_pricing.db.base import Base
from venue_pricing.models.mixins import JSONB_TYPE, TimestampMixin
from venue_pricing.pricing.types import (
    ApprovalStatus,
    ConflictResolution,
    HierarchyLevel,
    RuleKind,
)


class PricingRule(TimestampMixin, Base):
    """Persisted rate sheet; ``time_windows`` holds an ordered list of window dicts."""

    __tablename__ = "pricing_rules"
    __table_args__ = (
        Index("ix_pricing_rules_level_entity", "applies_to_level", "entity_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1024))
    applies_to_level: Mapped[HierarchyLevel] = mapped_column(
        Enum(HierarchyLevel), nullable=False
    )
    entity_id: Mapped[uuid.UUID] = mapped_column(nullable=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False)
    kind: Mapped[RuleKind] = mapped_column(
        Enum(RuleKind), default=RuleKind.TIMING_BASED, nullable=False
    )
    conflict_resolution: Mapped[ConflictResolution] = mapped_column(
        Enum(ConflictResolution), default=ConflictResolution.PRIORITY, nullable=False
    )
    effective_from: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    effective_to: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True)
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    approval_status: Mapped[ApprovalStatus] = mapped_column(
        Enum(ApprovalStatus), default=ApprovalStatus.DRAFT, nullable=False
    )
    time_windows: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB_TYPE, default=list, nullable=False
    )
    surge_config_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("surge_configs.id", ondelete="SET NULL")
    )
    surge_multiplier_snapshot: Mapped[float | None] = mapped_column(Float)
    demand_supply_snapshot: Mapped[dict[str, Any] | None] = mapped_column(JSONB_TYPE)
