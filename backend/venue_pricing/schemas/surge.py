"""Surge calculation and materialization schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from venue_pricing.schemas.common import UTCDateTime


class SurgeParameters(BaseModel):
    """Ad-hoc surge inputs, useful for previewing a config before saving it."""

    current_demand: float = Field(ge=0)
    current_supply: float = Field(ge=0)
    historical_avg_pressure: float
    alpha: float = Field(ge=0)
    min_multiplier: float = Field(gt=0)
    max_multiplier: float = Field(gt=0)
    ema_alpha: float = Field(default=0.3, ge=0, le=1)
    previous_smoothed_pressure: float | None = None

    @model_validator(mode="after")
    def _check_bounds(self) -> "SurgeParameters":
        if self.min_multiplier > self.max_multiplier:
            raise ValueError("min_multiplier must not exceed max_multiplier")
        return self


class SurgeCalculationRead(BaseModel):
    """Breakdown of a computed surge factor."""

    factor: float
    pressure: float
    normalized_pressure: float
    smoothed_pressure: float
    raw_factor: float

    model_config = ConfigDict(from_attributes=True)


class SurgeMaterializeRequest(BaseModel):
    """Optional demand observation hour for predictive materialization."""

    demand_hour: UTCDateTime | None = None
