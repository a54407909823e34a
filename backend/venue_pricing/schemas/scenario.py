"""Pricing scenario schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from venue_pricing.pricing.types import PricingMode
from venue_pricing.schemas.common import UTCDateTime
from venue_pricing.schemas.pricing import TimelineRead


class ScenarioWindow(BaseModel):
    start: UTCDateTime
    end: UTCDateTime


class PricingCoefficientsSchema(BaseModel):
    up: float | None = None
    down: float | None = None
    bias: float | None = None


class ScenarioConfig(BaseModel):
    """Simulator state captured by a scenario."""

    enabled_layer_ids: list[str] = Field(default_factory=list)
    selected_duration_hours: int = Field(default=12, gt=0)
    surge_enabled: bool = False
    is_event_booking: bool = False
    view_window: ScenarioWindow | None = None
    range_window: ScenarioWindow | None = None
    pricing_coefficients: PricingCoefficientsSchema = Field(
        default_factory=PricingCoefficientsSchema
    )


class ScenarioCreate(BaseModel):
    """Payload for saving a scenario."""

    sub_location_id: uuid.UUID
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    config: ScenarioConfig
    is_active: bool = True
    tags: list[str] = Field(default_factory=list)


class ScenarioUpdate(BaseModel):
    """Mutable scenario fields."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    config: ScenarioConfig | None = None
    is_active: bool | None = None
    tags: list[str] | None = None


class ScenarioRead(BaseModel):
    """Serialized scenario; ``config`` is the stored JSON blob."""

    id: uuid.UUID
    sub_location_id: uuid.UUID
    name: str
    description: str | None = None
    config: dict[str, Any]
    is_active: bool
    tags: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ScenarioLoadRequest(BaseModel):
    """Optional overrides when replaying a scenario."""

    mode: PricingMode = PricingMode.SIMULATION
    event_id: uuid.UUID | None = None


class ScenarioLoadRead(BaseModel):
    """Restored parameters plus the timeline resolved with reconciled layers."""

    scenario_id: uuid.UUID
    config: ScenarioConfig
    enabled_layer_ids: list[str]
    dropped_layer_ids: list[str]
    timeline: TimelineRead

    model_config = ConfigDict(from_attributes=True)


class ScenarioDiffRequest(BaseModel):
    """Current simulator state to compare with a saved scenario."""

    config: ScenarioConfig


class ScenarioDiffRead(BaseModel):
    scenario_id: uuid.UUID
    has_unsaved_changes: bool
