"""Value types shared by the pricing engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Final

MONEY_PLACES: Final = Decimal("0.01")
ONE_HOUR: Final = timedelta(hours=1)


def to_money(value: Decimal | float | str | int) -> Decimal:
    """Normalize numeric values to a two-place decimal."""

    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


class HierarchyLevel(str, enum.Enum):
    """Organizational level a rule or default rate is attached to."""

    CUSTOMER = "CUSTOMER"
    LOCATION = "LOCATION"
    SUBLOCATION = "SUBLOCATION"
    EVENT = "EVENT"


class RuleKind(str, enum.Enum):
    TIMING_BASED = "TIMING_BASED"
    DURATION_BASED = "DURATION_BASED"


class ConflictResolution(str, enum.Enum):
    PRIORITY = "PRIORITY"
    HIGHEST_PRICE = "HIGHEST_PRICE"
    LOWEST_PRICE = "LOWEST_PRICE"


class ApprovalStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    ARCHIVED = "ARCHIVED"


class WindowType(str, enum.Enum):
    ABSOLUTE_TIME = "ABSOLUTE_TIME"
    DURATION_BASED = "DURATION_BASED"


class PricingMode(str, enum.Enum):
    """LIVE only prices approved rules; SIMULATION also previews drafts."""

    LIVE = "LIVE"
    SIMULATION = "SIMULATION"


class LayerSourceKind(str, enum.Enum):
    RATESHEET = "RATESHEET"
    SURGE = "SURGE"
    LEVEL_DEFAULT = "LEVEL_DEFAULT"


@dataclass(frozen=True, slots=True)
class TimeWindow:
    """A priced window inside a rule.

    Absolute windows use local ``HH:MM`` bounds; duration windows count
    minutes elapsed since the owning rule's ``effective_from``.
    """

    price_per_hour: Decimal = Decimal("0.00")
    window_type: WindowType = WindowType.ABSOLUTE_TIME
    start_time: str | None = None
    end_time: str | None = None
    days_of_week: frozenset[int] | None = None
    start_minute: int | None = None
    end_minute: int | None = None


@dataclass(frozen=True, slots=True)
class PricingRule:
    """A priced policy attached at one hierarchy level."""

    id: str
    applies_to_level: HierarchyLevel
    priority: int
    effective_from: datetime
    name: str = ""
    kind: RuleKind = RuleKind.TIMING_BASED
    conflict_resolution: ConflictResolution = ConflictResolution.PRIORITY
    effective_to: datetime | None = None
    is_active: bool = True
    approval_status: ApprovalStatus = ApprovalStatus.APPROVED
    time_windows: tuple[TimeWindow, ...] = ()
    surge_config_id: str | None = None
    surge_multiplier_snapshot: float | None = None

    @property
    def is_materialized_surge(self) -> bool:
        return self.surge_config_id is not None

    def is_effective_at(self, hour: datetime) -> bool:
        if hour < self.effective_from:
            return False
        return self.effective_to is None or self.effective_to > hour

    def overlaps(self, range_start: datetime, range_end: datetime) -> bool:
        if self.effective_from >= range_end:
            return False
        return self.effective_to is None or self.effective_to > range_start


@dataclass(frozen=True, slots=True)
class DefaultRate:
    """Fallback hourly rate configured on a customer, location or sub-location."""

    level: HierarchyLevel
    default_hourly_rate: Decimal
    label: str = ""


@dataclass(frozen=True, slots=True)
class PriorityRange:
    min: int
    max: int

    @property
    def midpoint(self) -> int:
        return (self.min + self.max) // 2


@dataclass(frozen=True, slots=True)
class PriorityRanges:
    """Configured priority band for each hierarchy level."""

    customer: PriorityRange = PriorityRange(1000, 1999)
    location: PriorityRange = PriorityRange(2000, 2999)
    sublocation: PriorityRange = PriorityRange(3000, 3999)
    event: PriorityRange = PriorityRange(4000, 4999)

    def for_level(self, level: HierarchyLevel) -> PriorityRange:
        match level:
            case HierarchyLevel.CUSTOMER:
                return self.customer
            case HierarchyLevel.LOCATION:
                return self.location
            case HierarchyLevel.SUBLOCATION:
                return self.sublocation
            case HierarchyLevel.EVENT:
                return self.event
        raise ValueError(f"Unknown hierarchy level: {level}")


@dataclass(frozen=True, slots=True)
class SurgeConfig:
    """Demand/supply inputs and bounds for a live surge multiplier."""

    id: str
    current_demand: float
    current_supply: float
    historical_avg_pressure: float
    alpha: float
    min_multiplier: float
    max_multiplier: float
    effective_from: datetime
    name: str = ""
    applies_to_level: HierarchyLevel = HierarchyLevel.SUBLOCATION
    priority: int = 0
    is_active: bool = True
    effective_to: datetime | None = None
    ema_alpha: float = 0.3
    previous_smoothed_pressure: float | None = None
    surge_duration_hours: int = 1
    time_windows: tuple[TimeWindow, ...] = ()

    def is_effective_at(self, hour: datetime) -> bool:
        if hour < self.effective_from:
            return False
        return self.effective_to is None or self.effective_to > hour


@dataclass(frozen=True, slots=True)
class RuleSet:
    """Everything the repository supplies for one resolution pass."""

    rules: tuple[PricingRule, ...] = ()
    default_rates: tuple[DefaultRate, ...] = ()
    surge_config: SurgeConfig | None = None
    mode: PricingMode = PricingMode.LIVE
    priority_ranges: PriorityRanges = field(default_factory=PriorityRanges)
    surge_priority_base: int = 10000


@dataclass(frozen=True, slots=True)
class PricingQuery:
    """Range and booking context to resolve prices for."""

    entity_id: str
    range_start: datetime
    range_end: datetime
    hour_granularity: timedelta = ONE_HOUR
    is_event_booking: bool = False
    enabled_layer_ids: frozenset[str] | None = None
    surge_enabled: bool = False
    timezone: str = "UTC"
    fallback_base_price: Decimal | None = None


@dataclass(frozen=True, slots=True)
class LayerResult:
    """How one layer evaluated for one hour."""

    layer_id: str
    name: str
    source_kind: LayerSourceKind
    priority: int
    is_active: bool
    is_enabled: bool
    price: Decimal | None
    multiplier: float | None = None


@dataclass(frozen=True, slots=True)
class TimeSlot:
    """Resolved pricing for a single hour."""

    hour: datetime
    layers: tuple[LayerResult, ...]
    winning_layer: LayerResult | None
    winning_price: Decimal | None
    base_price: Decimal | None
    surge_price: Decimal | None
    surge_multiplier: float | None

    @property
    def is_priced(self) -> bool:
        return self.winning_price is not None


@dataclass(frozen=True, slots=True)
class TimelineSummary:
    total_cost: Decimal
    priced_hours: int
    unpriced_hours: int
    hours_by_source: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_cost": f"{self.total_cost:.2f}",
            "priced_hours": self.priced_hours,
            "unpriced_hours": self.unpriced_hours,
            "hours_by_source": dict(self.hours_by_source),
        }


__all__ = [
    "ApprovalStatus",
    "ConflictResolution",
    "DefaultRate",
    "HierarchyLevel",
    "LayerResult",
    "LayerSourceKind",
    "MONEY_PLACES",
    "ONE_HOUR",
    "PricingMode",
    "PricingQuery",
    "PricingRule",
    "PriorityRange",
    "PriorityRanges",
    "RuleKind",
    "RuleSet",
    "SurgeConfig",
    "TimeSlot",
    "TimeWindow",
    "TimelineSummary",
    "WindowType",
    "to_money",
]
