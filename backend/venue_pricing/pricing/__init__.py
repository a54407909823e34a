"""Pure pricing resolution engine: no I/O, no database or web imports."""

from __future__ import annotations

from venue_pricing.pricing.errors import (
    ConfigurationError,
    DomainError,
    InvalidRangeError,
    InvariantViolation,
    PricingError,
    SurgeComputationError,
)
from venue_pricing.pricing.layers import (
    EvaluationContext,
    LevelDefaultLayer,
    PricingLayer,
    RatesheetLayer,
    SurgeLayer,
    normalize_layers,
)
from venue_pricing.pricing.resolver import resolve, resolve_hour, resolve_layers, summarize
from venue_pricing.pricing.scenarios import (
    PendingRestore,
    ScenarioParameters,
    has_unsaved_changes,
    reconcile,
    restore,
    snapshot,
)
from venue_pricing.pricing.surge import (
    build_materialized_rule,
    calculate_surge,
    calculate_surge_factor,
    select_active_config,
)
from venue_pricing.pricing.toggles import ToggleResult, set_layer_enabled, toggle_layer

__all__ = [
    "ConfigurationError",
    "DomainError",
    "EvaluationContext",
    "InvalidRangeError",
    "InvariantViolation",
    "LevelDefaultLayer",
    "PendingRestore",
    "PricingError",
    "PricingLayer",
    "RatesheetLayer",
    "ScenarioParameters",
    "SurgeComputationError",
    "SurgeLayer",
    "ToggleResult",
    "build_materialized_rule",
    "calculate_surge",
    "calculate_surge_factor",
    "has_unsaved_changes",
    "normalize_layers",
    "reconcile",
    "resolve",
    "resolve_hour",
    "resolve_layers",
    "restore",
    "select_active_config",
    "set_layer_enabled",
    "snapshot",
    "summarize",
    "toggle_layer",
]
