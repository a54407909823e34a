"""Timeline simulation schema definitions."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from venue_pricing.pricing.types import LayerSourceKind, PricingMode
from venue_pricing.schemas.common import UTCDateTime


class TimelineContext(BaseModel):
    """Which sub-location and range to price, and under what assumptions."""

    sub_location_id: uuid.UUID
    event_id: uuid.UUID | None = None
    range_start: UTCDateTime
    range_end: UTCDateTime
    mode: PricingMode | None = None
    is_event_booking: bool = False
    surge_enabled: bool = False
    enabled_layer_ids: list[str] | None = None

    @model_validator(mode="after")
    def _check_range(self) -> "TimelineContext":
        if self.range_end <= self.range_start:
            raise ValueError("range_end must be after range_start")
        return self


class TimelineRequest(TimelineContext):
    """Input payload for resolving an hourly timeline."""

    fallback_base_price: Decimal | None = Field(default=None, ge=0)


class LayerToggleRequest(TimelineContext):
    """Enable, disable or flip one layer against the current layer set."""

    layer_id: str
    enabled: bool | None = None


class LayerRead(BaseModel):
    """A discovered layer and whether it is currently enabled."""

    id: str
    name: str
    source_kind: LayerSourceKind
    priority: int
    is_enabled: bool

    model_config = ConfigDict(from_attributes=True)


class LayerResultRead(BaseModel):
    """Per-hour evaluation of one layer."""

    layer_id: str
    name: str
    source_kind: LayerSourceKind
    priority: int
    is_active: bool
    is_enabled: bool
    price: Decimal | None = None
    multiplier: float | None = None

    model_config = ConfigDict(from_attributes=True)


class TimeSlotRead(BaseModel):
    """Resolved price for one hour with the full layer breakdown."""

    hour: datetime
    layers: list[LayerResultRead]
    winning_layer: LayerResultRead | None = None
    winning_price: Decimal | None = None
    base_price: Decimal | None = None
    surge_price: Decimal | None = None
    surge_multiplier: float | None = None

    model_config = ConfigDict(from_attributes=True)


class TimelineSummaryRead(BaseModel):
    total_cost: Decimal
    priced_hours: int
    unpriced_hours: int
    hours_by_source: dict[str, int]

    model_config = ConfigDict(from_attributes=True)


class TimelineRead(BaseModel):
    """Aggregated timeline response."""

    sub_location_id: uuid.UUID
    timezone: str
    mode: PricingMode
    layers: list[LayerRead]
    enabled_layer_ids: list[str]
    slots: list[TimeSlotRead]
    summary: TimelineSummaryRead

    model_config = ConfigDict(from_attributes=True)


class LayerToggleRead(BaseModel):
    """Toggle outcome; a rejected toggle returns the unchanged set."""

    accepted: bool
    layer_id: str
    enabled_layer_ids: list[str]
    reason: str | None = None

    model_config = ConfigDict(from_attributes=True)
