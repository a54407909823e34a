"""Scenario snapshots and two-phase replay of simulation state.

Loading a scenario happens in two explicit steps: ``restore`` hands back the
saved parameters immediately while holding the saved layer ids aside, and
``reconcile`` filters those ids once the caller has normalized layers with
the restored parameters. Surge layer ids only exist after that second step.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from venue_pricing.pricing.errors import ConfigurationError
from venue_pricing.pricing.layers import PricingLayer

DEFAULT_DURATION_HOURS = 12


@dataclass(frozen=True, slots=True)
class TimeRange:
    start: datetime
    end: datetime


@dataclass(frozen=True, slots=True)
class PricingCoefficients:
    up: float | None = None
    down: float | None = None
    bias: float | None = None


@dataclass(frozen=True, slots=True)
class ScenarioParameters:
    """Scalar simulation inputs saved alongside the enabled layer ids."""

    selected_duration_hours: int = DEFAULT_DURATION_HOURS
    surge_enabled: bool = False
    is_event_booking: bool = False
    view_window: TimeRange | None = None
    range_window: TimeRange | None = None
    pricing_coefficients: PricingCoefficients = field(default_factory=PricingCoefficients)


@dataclass(frozen=True, slots=True)
class PendingRestore:
    """Parameters restored now; layer ids still waiting for reconciliation."""

    parameters: ScenarioParameters
    saved_layer_ids: frozenset[str]

    def complete(self, layers: Iterable[PricingLayer]) -> frozenset[str]:
        return reconcile(self.saved_layer_ids, layers)


def _range_to_blob(window: TimeRange | None) -> dict[str, str] | None:
    if window is None:
        return None
    return {"start": window.start.isoformat(), "end": window.end.isoformat()}


def _range_from_blob(value: Any, key: str) -> TimeRange | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Scenario field {key!r} must be an object")
    try:
        start = datetime.fromisoformat(value["start"])
        end = datetime.fromisoformat(value["end"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Scenario field {key!r} is not a valid range") from exc
    return TimeRange(start=start, end=end)


def _optional_float(value: Any, key: str) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Scenario coefficient {key!r} must be numeric") from exc


def snapshot(enabled_layer_ids: Iterable[str], parameters: ScenarioParameters) -> dict[str, Any]:
    """Serialize the simulation state to the JSON blob stored with a scenario."""

    coefficients = parameters.pricing_coefficients
    return {
        "enabledLayerIds": sorted(enabled_layer_ids),
        "selectedDuration": parameters.selected_duration_hours,
        "isEventBooking": parameters.is_event_booking,
        "viewWindow": _range_to_blob(parameters.view_window),
        "rangeWindow": _range_to_blob(parameters.range_window),
        "surgeEnabled": parameters.surge_enabled,
        "pricingCoefficients": {
            "up": coefficients.up,
            "down": coefficients.down,
            "bias": coefficients.bias,
        },
    }


def restore(blob: Mapping[str, Any]) -> PendingRestore:
    """Read a scenario blob back; layer ids are deferred until ``reconcile``.

    Raises:
        ConfigurationError: the blob holds values of the wrong shape.
    """

    ids = blob.get("enabledLayerIds") or []
    if isinstance(ids, (str, bytes)) or not isinstance(ids, Iterable):
        raise ConfigurationError("Scenario field 'enabledLayerIds' must be a list")

    coefficients = blob.get("pricingCoefficients") or {}
    if not isinstance(coefficients, Mapping):
        raise ConfigurationError("Scenario field 'pricingCoefficients' must be an object")

    try:
        duration = int(blob.get("selectedDuration", DEFAULT_DURATION_HOURS))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError("Scenario field 'selectedDuration' must be an integer") from exc

    parameters = ScenarioParameters(
        selected_duration_hours=duration,
        surge_enabled=bool(blob.get("surgeEnabled", False)),
        is_event_booking=bool(blob.get("isEventBooking", False)),
        view_window=_range_from_blob(blob.get("viewWindow"), "viewWindow"),
        range_window=_range_from_blob(blob.get("rangeWindow"), "rangeWindow"),
        pricing_coefficients=PricingCoefficients(
            up=_optional_float(coefficients.get("up"), "up"),
            down=_optional_float(coefficients.get("down"), "down"),
            bias=_optional_float(coefficients.get("bias"), "bias"),
        ),
    )
    return PendingRestore(parameters=parameters, saved_layer_ids=frozenset(str(i) for i in ids))


def reconcile(saved_layer_ids: Iterable[str], layers: Iterable[PricingLayer]) -> frozenset[str]:
    """Keep only saved ids that still name a discovered layer."""

    discovered = {layer.id for layer in layers}
    return frozenset(layer_id for layer_id in saved_layer_ids if layer_id in discovered)


def has_unsaved_changes(
    current_layer_ids: Iterable[str],
    current: ScenarioParameters,
    saved_layer_ids: Iterable[str],
    saved: ScenarioParameters,
) -> bool:
    """Exact comparison of layer ids, duration, surge flag and coefficients."""

    if frozenset(current_layer_ids) != frozenset(saved_layer_ids):
        return True
    return (
        current.selected_duration_hours != saved.selected_duration_hours
        or current.surge_enabled != saved.surge_enabled
        or current.pricing_coefficients != saved.pricing_coefficients
    )


__all__ = [
    "PendingRestore",
    "PricingCoefficients",
    "ScenarioParameters",
    "TimeRange",
    "has_unsaved_changes",
    "reconcile",
    "restore",
    "snapshot",
]
