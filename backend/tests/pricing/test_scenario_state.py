"""Unit tests for scenario snapshots and replay."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from venue_pricing.pricing.errors import ConfigurationError
from venue_pricing.pricing.layers import normalize_layers
from venue_pricing.pricing.scenarios import (
    PricingCoefficients,
    ScenarioParameters,
    TimeRange,
    has_unsaved_changes,
    reconcile,
    restore,
    snapshot,
)
from venue_pricing.pricing.types import DefaultRate, HierarchyLevel, RuleSet, SurgeConfig

START = datetime(2026, 10, 17, 8, tzinfo=UTC)

RULE_SET = RuleSet(
    default_rates=(
        DefaultRate(level=HierarchyLevel.SUBLOCATION, default_hourly_rate=Decimal("10.00")),
    ),
    surge_config=SurgeConfig(
        id="cfg",
        current_demand=20.0,
        current_supply=10.0,
        historical_avg_pressure=1.0,
        alpha=0.5,
        min_multiplier=0.5,
        max_multiplier=3.0,
        effective_from=START,
    ),
)


def _parameters(**overrides: object) -> ScenarioParameters:
    values: dict[str, object] = {
        "selected_duration_hours": 6,
        "surge_enabled": True,
        "is_event_booking": False,
        "view_window": TimeRange(start=START, end=START + timedelta(hours=6)),
        "pricing_coefficients": PricingCoefficients(up=1.1, down=0.9, bias=None),
    }
    values.update(overrides)
    return ScenarioParameters(**values)  # type: ignore[arg-type]


def test_snapshot_blob_uses_stored_field_names() -> None:
    blob = snapshot({"surge-cfg", "sublocation-default"}, _parameters())

    assert blob == {
        "enabledLayerIds": ["sublocation-default", "surge-cfg"],
        "selectedDuration": 6,
        "isEventBooking": False,
        "viewWindow": {
            "start": "2026-10-17T08:00:00+00:00",
            "end": "2026-10-17T14:00:00+00:00",
        },
        "rangeWindow": None,
        "surgeEnabled": True,
        "pricingCoefficients": {"up": 1.1, "down": 0.9, "bias": None},
    }


def test_restore_defers_layer_ids_until_surge_layers_exist() -> None:
    blob = snapshot({"surge-cfg", "sublocation-default", "retired-rule"}, _parameters())

    pending = restore(blob)
    assert pending.parameters == _parameters()

    before = normalize_layers(RULE_SET, surge_enabled=False)
    assert pending.complete(before) == {"sublocation-default"}

    after = normalize_layers(RULE_SET, surge_enabled=pending.parameters.surge_enabled)
    assert pending.complete(after) == {"sublocation-default", "surge-cfg"}


def test_reconcile_drops_unknown_ids() -> None:
    layers = normalize_layers(RULE_SET, surge_enabled=False)
    assert reconcile(["gone", "sublocation-default"], layers) == {"sublocation-default"}


def test_restore_rejects_malformed_blobs() -> None:
    with pytest.raises(ConfigurationError):
        restore({"enabledLayerIds": "sublocation-default"})
    with pytest.raises(ConfigurationError):
        restore({"selectedDuration": "a day"})
    with pytest.raises(ConfigurationError):
        restore({"viewWindow": {"start": "yesterday"}})


def test_restore_fills_defaults_for_missing_fields() -> None:
    pending = restore({})
    assert pending.parameters == ScenarioParameters()
    assert pending.saved_layer_ids == frozenset()


def test_unsaved_changes_compare_ids_duration_surge_and_coefficients() -> None:
    ids = {"sublocation-default", "surge-cfg"}
    saved = _parameters()

    assert not has_unsaved_changes(ids, saved, ids, saved)
    assert has_unsaved_changes({"sublocation-default"}, saved, ids, saved)
    assert has_unsaved_changes(ids, _parameters(selected_duration_hours=12), ids, saved)
    assert has_unsaved_changes(ids, _parameters(surge_enabled=False), ids, saved)
    assert has_unsaved_changes(
        ids, _parameters(pricing_coefficients=PricingCoefficients(up=1.2)), ids, saved
    )
    moved_view = _parameters(view_window=TimeRange(start=START, end=START + timedelta(hours=1)))
    assert not has_unsaved_changes(ids, moved_view, ids, saved)
