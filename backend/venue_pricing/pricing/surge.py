"""Surge multiplier calculation and materialization.

The multiplier follows a logarithmic response to demand pressure::

    pressure   = demand / supply
    normalized = pressure / historical_avg_pressure
    smoothed   = EMA(normalized)            (ad-hoc previews with a previous value)
    raw        = 1 + alpha * ln(smoothed)
    factor     = clamp(raw, min_multiplier, max_multiplier)

Stored configs carry no previous value, so their factor depends only on the
current inputs. A materialized surge rule freezes ``factor`` once and never
recomputes it.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from venue_pricing.pricing.errors import SurgeComputationError
from venue_pricing.pricing.types import (
    ApprovalStatus,
    ConflictResolution,
    HierarchyLevel,
    PricingRule,
    RuleKind,
    SurgeConfig,
    TimeWindow,
    WindowType,
)

logger = logging.getLogger(__name__)

_LEVEL_PREFERENCE = {HierarchyLevel.SUBLOCATION: 1, HierarchyLevel.LOCATION: 0}


@dataclass(frozen=True, slots=True)
class SurgeCalculation:
    """Breakdown of a surge factor computation."""

    factor: float
    pressure: float
    normalized_pressure: float
    smoothed_pressure: float
    raw_factor: float


def calculate_surge(config: SurgeConfig) -> SurgeCalculation:
    """Compute the bounded surge multiplier for ``config``.

    Raises:
        SurgeComputationError: supply is zero, the historical pressure is not
            positive, or the resulting pressure has no logarithm.
    """

    if config.current_supply == 0:
        raise SurgeComputationError("Surge undefined: current supply is zero")
    if config.historical_avg_pressure <= 0:
        raise SurgeComputationError(
            "Surge undefined: historical average pressure must be positive"
        )

    pressure = config.current_demand / config.current_supply
    normalized = pressure / config.historical_avg_pressure
    if config.previous_smoothed_pressure is not None:
        smoothed = (
            config.ema_alpha * normalized
            + (1 - config.ema_alpha) * config.previous_smoothed_pressure
        )
    else:
        smoothed = normalized
    if smoothed <= 0:
        raise SurgeComputationError(
            f"Surge undefined: non-positive pressure {smoothed!r}"
        )

    raw_factor = 1 + config.alpha * math.log(smoothed)
    factor = max(config.min_multiplier, min(config.max_multiplier, raw_factor))
    return SurgeCalculation(
        factor=factor,
        pressure=pressure,
        normalized_pressure=normalized,
        smoothed_pressure=smoothed,
        raw_factor=raw_factor,
    )


def calculate_surge_factor(config: SurgeConfig) -> float:
    """Return only the clamped multiplier."""

    return calculate_surge(config).factor


def select_active_config(configs: Iterable[SurgeConfig]) -> SurgeConfig | None:
    """Pick the single surge config that governs a sub-location.

    Highest priority wins; on a tie a sub-location config beats a location one.
    """

    active = [config for config in configs if config.is_active]
    if not active:
        return None
    return max(
        active,
        key=lambda config: (
            config.priority,
            _LEVEL_PREFERENCE.get(config.applies_to_level, -1),
        ),
    )


def surge_priority(config: SurgeConfig, base: int) -> int:
    return base + config.priority


def _materialized_windows(
    config: SurgeConfig, multiplier: Decimal, demand_hour: datetime | None
) -> tuple[TimeWindow, ...]:
    # Predictive rules are already scoped to the next hours by their effective range.
    if demand_hour is not None or not config.time_windows:
        return (TimeWindow(price_per_hour=multiplier, start_time="00:00", end_time="24:00"),)
    return tuple(
        TimeWindow(
            price_per_hour=multiplier,
            window_type=WindowType.ABSOLUTE_TIME,
            start_time=window.start_time or "00:00",
            end_time=window.end_time or "24:00",
            days_of_week=window.days_of_week or None,
        )
        for window in config.time_windows
    )


def build_materialized_rule(
    config: SurgeConfig,
    *,
    rule_id: str,
    priority_base: int,
    demand_hour: datetime | None = None,
) -> PricingRule:
    """Freeze the current surge factor into a draft rule awaiting approval.

    In predictive mode (``demand_hour`` given) the rule covers the hours
    following the demand observation; otherwise it starts at the config's
    ``effective_from``. Either way it lasts ``surge_duration_hours``.
    """

    calculation = calculate_surge(config)
    multiplier = Decimal(repr(round(calculation.factor, 4)))

    if demand_hour is not None:
        effective_from = demand_hour.replace(minute=0, second=0, microsecond=0) + timedelta(
            hours=1
        )
    else:
        effective_from = config.effective_from
    effective_to = effective_from + timedelta(hours=config.surge_duration_hours)

    logger.info(
        "Materializing surge config %s at %.3fx (pressure %.2f) for %s - %s",
        config.id,
        calculation.factor,
        calculation.pressure,
        effective_from.isoformat(),
        effective_to.isoformat(),
    )

    return PricingRule(
        id=rule_id,
        name=f"SURGE: {config.name}",
        applies_to_level=config.applies_to_level,
        priority=surge_priority(config, priority_base),
        kind=RuleKind.TIMING_BASED,
        conflict_resolution=ConflictResolution.PRIORITY,
        effective_from=effective_from,
        effective_to=effective_to,
        is_active=False,
        approval_status=ApprovalStatus.DRAFT,
        time_windows=_materialized_windows(config, multiplier, demand_hour),
        surge_config_id=config.id,
        surge_multiplier_snapshot=calculation.factor,
    )


__all__ = [
    "SurgeCalculation",
    "build_materialized_rule",
    "calculate_surge",
    "calculate_surge_factor",
    "select_active_config",
    "surge_priority",
]
