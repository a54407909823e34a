"""Unit tests for layer normalization."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal

from venue_pricing.pricing.layers import (
    EvaluationContext,
    LevelDefaultLayer,
    RatesheetLayer,
    SurgeLayer,
    is_candidate_rule,
    layer_ids,
    normalize_layers,
)
from venue_pricing.pricing.types import (
    ApprovalStatus,
    DefaultRate,
    HierarchyLevel,
    PricingMode,
    PricingRule,
    RuleSet,
    SurgeConfig,
    TimeWindow,
)

START = datetime(2026, 10, 17, 0, tzinfo=UTC)
END = START + timedelta(days=1)
ALL_DAY = (TimeWindow(price_per_hour=Decimal("20.00"), start_time="00:00", end_time="24:00"),)


def _rule(rule_id: str, **overrides: object) -> PricingRule:
    values: dict[str, object] = {
        "id": rule_id,
        "applies_to_level": HierarchyLevel.SUBLOCATION,
        "priority": 3500,
        "effective_from": START,
        "time_windows": ALL_DAY,
    }
    values.update(overrides)
    return PricingRule(**values)  # type: ignore[arg-type]


def _surge_config(**overrides: object) -> SurgeConfig:
    values: dict[str, object] = {
        "id": "cfg",
        "name": "Rush",
        "current_demand": 20.0,
        "current_supply": 10.0,
        "historical_avg_pressure": 1.0,
        "alpha": 0.5,
        "min_multiplier": 0.5,
        "max_multiplier": 3.0,
        "effective_from": START,
        "priority": 3,
    }
    values.update(overrides)
    return SurgeConfig(**values)  # type: ignore[arg-type]


def test_live_mode_only_accepts_approved_active_rules() -> None:
    approved = _rule("approved")
    draft = _rule("draft", approval_status=ApprovalStatus.DRAFT)
    inactive = _rule("inactive", is_active=False)

    assert is_candidate_rule(approved, PricingMode.LIVE)
    assert not is_candidate_rule(draft, PricingMode.LIVE)
    assert not is_candidate_rule(inactive, PricingMode.LIVE)


def test_simulation_mode_previews_drafts_but_not_rejected_rules() -> None:
    statuses = {
        status: is_candidate_rule(_rule(status.value, approval_status=status), PricingMode.SIMULATION)
        for status in ApprovalStatus
    }
    assert statuses == {
        ApprovalStatus.DRAFT: True,
        ApprovalStatus.PENDING_APPROVAL: True,
        ApprovalStatus.APPROVED: True,
        ApprovalStatus.REJECTED: False,
        ApprovalStatus.ARCHIVED: False,
    }
    assert not is_candidate_rule(_rule("off", is_active=False), PricingMode.SIMULATION)


def test_default_rates_become_midpoint_layers() -> None:
    rule_set = RuleSet(
        default_rates=(
            DefaultRate(level=HierarchyLevel.CUSTOMER, default_hourly_rate=Decimal("8.00")),
            DefaultRate(level=HierarchyLevel.LOCATION, default_hourly_rate=Decimal("0")),
            DefaultRate(level=HierarchyLevel.SUBLOCATION, default_hourly_rate=Decimal("10.00")),
        )
    )
    layers = normalize_layers(rule_set, surge_enabled=False)

    assert [(layer.id, layer.priority) for layer in layers] == [
        ("sublocation-default", 3499),
        ("customer-default", 1499),
    ]
    assert all(isinstance(layer, LevelDefaultLayer) for layer in layers)


def test_layers_are_sorted_by_priority_descending() -> None:
    rule_set = RuleSet(
        rules=(_rule("low", priority=1200), _rule("high", priority=4200)),
        default_rates=(
            DefaultRate(level=HierarchyLevel.SUBLOCATION, default_hourly_rate=Decimal("10.00")),
        ),
    )
    layers = normalize_layers(rule_set, surge_enabled=False)
    assert [layer.id for layer in layers] == ["high", "sublocation-default", "low"]


def test_virtual_surge_layer_only_when_enabled() -> None:
    rule_set = RuleSet(surge_config=_surge_config())

    assert normalize_layers(rule_set, surge_enabled=False) == []

    (layer,) = normalize_layers(rule_set, surge_enabled=True)
    assert isinstance(layer, SurgeLayer)
    assert layer.id == "surge-cfg"
    assert layer.priority == 10003
    assert not layer.is_materialized
    assert layer.multiplier is not None


def test_materialized_rule_replaces_virtual_surge_for_overlapping_range() -> None:
    materialized = _rule(
        "surge-rule",
        priority=10003,
        effective_to=START + timedelta(hours=4),
        surge_config_id="cfg",
        surge_multiplier_snapshot=1.5,
    )
    rule_set = RuleSet(rules=(materialized,), surge_config=_surge_config())

    layers = normalize_layers(rule_set, surge_enabled=True, range_start=START, range_end=END)
    assert layer_ids(layers) == {"surge-rule"}
    assert isinstance(layers[0], SurgeLayer)
    assert layers[0].is_materialized

    later = normalize_layers(
        rule_set,
        surge_enabled=True,
        range_start=START + timedelta(days=2),
        range_end=END + timedelta(days=2),
    )
    assert layer_ids(later) == {"surge-rule", "surge-cfg"}


def test_materialized_rule_stays_when_surge_disabled() -> None:
    materialized = _rule("surge-rule", surge_config_id="cfg", surge_multiplier_snapshot=1.5)
    layers = normalize_layers(
        RuleSet(rules=(materialized,), surge_config=_surge_config()), surge_enabled=False
    )
    assert layer_ids(layers) == {"surge-rule"}


def test_undefined_surge_emits_inactive_layer() -> None:
    rule_set = RuleSet(surge_config=_surge_config(current_supply=0.0))

    (layer,) = normalize_layers(rule_set, surge_enabled=True)
    assert layer.multiplier is None
    assert not layer.evaluate(START, EvaluationContext()).is_active


def test_ratesheet_layer_respects_effective_range() -> None:
    layer = RatesheetLayer(rule=_rule("r", effective_to=START + timedelta(hours=2)))
    context = EvaluationContext()

    assert layer.evaluate(START + timedelta(hours=1), context).price == Decimal("20.00")
    assert not layer.evaluate(START + timedelta(hours=2), context).is_active
    assert not layer.evaluate(START - timedelta(hours=1), context).is_active
