"""Application configuration via pydantic settings."""

from functools import lru_cache
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from venue_pricing.pricing.types import PricingMode, PriorityRange, PriorityRanges


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = "Venue Pricing API"
    api_v1_prefix: str = "/api/v1"

    database_url: str = Field(..., alias="DATABASE_URL")
    sync_database_url: str | None = Field(default=None, alias="SYNC_DATABASE_URL")

    default_timezone: str = Field("UTC", alias="DEFAULT_TIMEZONE")
    default_pricing_mode: PricingMode = Field(
        PricingMode.LIVE, alias="DEFAULT_PRICING_MODE"
    )

    customer_priority_min: int = Field(1000, alias="CUSTOMER_PRIORITY_MIN")
    customer_priority_max: int = Field(1999, alias="CUSTOMER_PRIORITY_MAX")
    location_priority_min: int = Field(2000, alias="LOCATION_PRIORITY_MIN")
    location_priority_max: int = Field(2999, alias="LOCATION_PRIORITY_MAX")
    sublocation_priority_min: int = Field(3000, alias="SUBLOCATION_PRIORITY_MIN")
    sublocation_priority_max: int = Field(3999, alias="SUBLOCATION_PRIORITY_MAX")
    event_priority_min: int = Field(4000, alias="EVENT_PRIORITY_MIN")
    event_priority_max: int = Field(4999, alias="EVENT_PRIORITY_MAX")

    surge_priority_base: int = Field(10000, alias="SURGE_PRIORITY_BASE")
    max_timeline_hours: int = Field(24 * 31, alias="MAX_TIMELINE_HOURS")

    cors_allow_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        alias="CORS_ALLOW_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[3] / ".env",
        case_sensitive=False,
    )

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("default_timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value!r}") from exc
        return value

    @property
    def priority_ranges(self) -> PriorityRanges:
        """Priority band per hierarchy level."""

        return PriorityRanges(
            customer=PriorityRange(self.customer_priority_min, self.customer_priority_max),
            location=PriorityRange(self.location_priority_min, self.location_priority_max),
            sublocation=PriorityRange(
                self.sublocation_priority_min, self.sublocation_priority_max
            ),
            event=PriorityRange(self.event_priority_min, self.event_priority_max),
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
