"""Pricing rule and time window schemas."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from venue_pricing.pricing.types import (
    ApprovalStatus,
    ConflictResolution,
    HierarchyLevel,
    RuleKind,
    WindowType,
)


class TimeWindowSchema(BaseModel):
    """Serialized time window as stored in the ``time_windows`` JSON column."""

    window_type: WindowType = WindowType.ABSOLUTE_TIME
    start_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    end_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    days_of_week: list[int] | None = None
    start_minute: int | None = Field(default=None, ge=0)
    end_minute: int | None = Field(default=None, ge=0)
    price_per_hour: Decimal = Field(default=Decimal("0.00"), ge=0)

    @model_validator(mode="after")
    def _check_days(self) -> "TimeWindowSchema":
        if self.days_of_week is not None and any(
            day < 0 or day > 6 for day in self.days_of_week
        ):
            raise ValueError("days_of_week entries must be between 0 (Sunday) and 6")
        return self


class PricingRuleRead(BaseModel):
    """Serialized pricing rule."""

    id: uuid.UUID
    name: str
    description: str | None = None
    applies_to_level: HierarchyLevel
    entity_id: uuid.UUID
    priority: int
    kind: RuleKind
    conflict_resolution: ConflictResolution
    effective_from: datetime
    effective_to: datetime | None = None
    is_active: bool
    approval_status: ApprovalStatus
    time_windows: list[TimeWindowSchema]
    surge_config_id: uuid.UUID | None = None
    surge_multiplier_snapshot: float | None = None
    demand_supply_snapshot: dict[str, Any] | None = None

    model_config = ConfigDict(from_attributes=True)


class RuleStatusAction(str, enum.Enum):
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    ARCHIVE = "archive"


class RuleStatusUpdate(BaseModel):
    """Approval workflow step to apply to a rule."""

    action: RuleStatusAction
