"""Normalize rules, default rates and surge into priority-ordered layers."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import ClassVar

from venue_pricing.pricing.errors import ConfigurationError, SurgeComputationError
from venue_pricing.pricing.surge import calculate_surge_factor, surge_priority
from venue_pricing.pricing.types import (
    ApprovalStatus,
    DefaultRate,
    LayerSourceKind,
    PricingMode,
    PricingRule,
    RuleSet,
    SurgeConfig,
)
from venue_pricing.pricing.windows import match_rule, window_matches

logger = logging.getLogger(__name__)

_SIMULATION_STATUSES = frozenset(
    {
        ApprovalStatus.DRAFT,
        ApprovalStatus.PENDING_APPROVAL,
        ApprovalStatus.APPROVED,
    }
)


@dataclass(frozen=True, slots=True)
class EvaluationContext:
    """Booking context every layer is evaluated against."""

    timezone: str = "UTC"
    is_event_booking: bool = False


@dataclass(frozen=True, slots=True)
class LayerEvaluation:
    is_active: bool
    price: Decimal | None = None
    multiplier: float | None = None


INACTIVE = LayerEvaluation(is_active=False)


@dataclass(frozen=True, slots=True)
class RatesheetLayer:
    """A regular rate sheet rule."""

    source_kind: ClassVar[LayerSourceKind] = LayerSourceKind.RATESHEET

    rule: PricingRule

    @property
    def id(self) -> str:
        return self.rule.id

    @property
    def name(self) -> str:
        return self.rule.name or self.rule.id

    @property
    def priority(self) -> int:
        return self.rule.priority

    def evaluate(self, hour: datetime, context: EvaluationContext) -> LayerEvaluation:
        if not self.rule.is_effective_at(hour):
            return INACTIVE
        match = match_rule(
            self.rule,
            hour,
            timezone=context.timezone,
            is_event_booking=context.is_event_booking,
        )
        if not match.is_active:
            return INACTIVE
        return LayerEvaluation(is_active=True, price=match.price_per_hour)


@dataclass(frozen=True, slots=True)
class LevelDefaultLayer:
    """Always-on fallback rate for a hierarchy level."""

    source_kind: ClassVar[LayerSourceKind] = LayerSourceKind.LEVEL_DEFAULT

    rate: DefaultRate
    priority: int

    @property
    def id(self) -> str:
        return f"{self.rate.level.value.lower()}-default"

    @property
    def name(self) -> str:
        return self.rate.label or f"{self.rate.level.value.title()} Default"

    def evaluate(self, hour: datetime, context: EvaluationContext) -> LayerEvaluation:
        return LayerEvaluation(is_active=True, price=self.rate.default_hourly_rate)


@dataclass(frozen=True, slots=True)
class SurgeLayer:
    """Surge multiplier layer, either virtual (live config) or materialized.

    The layer only reports a multiplier; its price depends on the base price
    of the other layers and is resolved by the waterfall.
    """

    source_kind: ClassVar[LayerSourceKind] = LayerSourceKind.SURGE

    id: str
    name: str
    priority: int
    multiplier: float | None
    config: SurgeConfig | None = None
    rule: PricingRule | None = None

    @property
    def is_materialized(self) -> bool:
        return self.rule is not None

    def evaluate(self, hour: datetime, context: EvaluationContext) -> LayerEvaluation:
        if self.rule is not None:
            return self._evaluate_materialized(self.rule, hour, context)
        if self.config is None or self.multiplier is None:
            return INACTIVE
        if not self.config.is_effective_at(hour):
            return INACTIVE
        if self.config.time_windows and not self._config_window_matches(hour, context):
            return INACTIVE
        return LayerEvaluation(is_active=True, multiplier=self.multiplier)

    def _evaluate_materialized(
        self, rule: PricingRule, hour: datetime, context: EvaluationContext
    ) -> LayerEvaluation:
        if not rule.is_effective_at(hour):
            return INACTIVE
        match = match_rule(
            rule,
            hour,
            timezone=context.timezone,
            is_event_booking=context.is_event_booking,
        )
        if not match.is_active:
            return INACTIVE
        multiplier = self.multiplier
        if multiplier is None and match.price_per_hour is not None:
            multiplier = float(match.price_per_hour)
        return LayerEvaluation(is_active=True, multiplier=multiplier)

    def _config_window_matches(self, hour: datetime, context: EvaluationContext) -> bool:
        assert self.config is not None
        for window in self.config.time_windows:
            try:
                if window_matches(
                    window,
                    hour,
                    anchor=self.config.effective_from,
                    timezone=context.timezone,
                ):
                    return True
            except ConfigurationError as exc:
                logger.warning("Skipping surge window of config %s: %s", self.config.id, exc)
        return False


PricingLayer = RatesheetLayer | LevelDefaultLayer | SurgeLayer


def is_candidate_rule(rule: PricingRule, mode: PricingMode) -> bool:
    """Apply the live/simulation approval filter."""

    if not rule.is_active:
        return False
    if mode is PricingMode.LIVE:
        return rule.approval_status is ApprovalStatus.APPROVED
    return rule.approval_status in _SIMULATION_STATUSES


def _rule_layer(rule: PricingRule) -> PricingLayer:
    if rule.is_materialized_surge:
        return SurgeLayer(
            id=rule.id,
            name=rule.name or rule.id,
            priority=rule.priority,
            multiplier=rule.surge_multiplier_snapshot,
            rule=rule,
        )
    return RatesheetLayer(rule=rule)


def _default_layers(rule_set: RuleSet) -> list[LevelDefaultLayer]:
    layers: list[LevelDefaultLayer] = []
    for rate in rule_set.default_rates:
        if not rate.default_hourly_rate or rate.default_hourly_rate <= 0:
            continue
        priority = rule_set.priority_ranges.for_level(rate.level).midpoint
        layers.append(LevelDefaultLayer(rate=rate, priority=priority))
    return layers


def _has_materialized_surge(
    rules: Iterable[PricingRule],
    config: SurgeConfig,
    range_start: datetime | None,
    range_end: datetime | None,
) -> bool:
    for rule in rules:
        if rule.surge_config_id != config.id:
            continue
        if range_start is None or range_end is None:
            return True
        if rule.overlaps(range_start, range_end):
            return True
    return False


def _virtual_surge_layer(rule_set: RuleSet, config: SurgeConfig) -> SurgeLayer:
    try:
        multiplier: float | None = calculate_surge_factor(config)
    except SurgeComputationError as exc:
        logger.warning("Surge config %s treated as inactive: %s", config.id, exc)
        multiplier = None
    return SurgeLayer(
        id=f"surge-{config.id}",
        name=config.name or f"Surge {config.id}",
        priority=surge_priority(config, rule_set.surge_priority_base),
        multiplier=multiplier,
        config=config,
    )


def normalize_layers(
    rule_set: RuleSet,
    *,
    surge_enabled: bool,
    range_start: datetime | None = None,
    range_end: datetime | None = None,
) -> list[PricingLayer]:
    """Turn a rule set into layers sorted by priority, highest first.

    A live surge config contributes a virtual layer only when no materialized
    rule for the same config overlaps the queried range, so the same surge is
    never counted twice.
    """

    candidates = [rule for rule in rule_set.rules if is_candidate_rule(rule, rule_set.mode)]
    layers: list[PricingLayer] = [_rule_layer(rule) for rule in candidates]
    layers.extend(_default_layers(rule_set))

    config = rule_set.surge_config
    if surge_enabled and config is not None and config.is_active:
        if _has_materialized_surge(candidates, config, range_start, range_end):
            logger.debug("Using materialized surge rule for config %s", config.id)
        else:
            layers.append(_virtual_surge_layer(rule_set, config))

    return sorted(layers, key=lambda layer: -layer.priority)


def layer_ids(layers: Sequence[PricingLayer]) -> frozenset[str]:
    return frozenset(layer.id for layer in layers)


__all__ = [
    "EvaluationContext",
    "INACTIVE",
    "LayerEvaluation",
    "LevelDefaultLayer",
    "PricingLayer",
    "RatesheetLayer",
    "SurgeLayer",
    "is_candidate_rule",
    "layer_ids",
    "normalize_layers",
]
