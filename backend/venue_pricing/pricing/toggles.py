"""Enable/disable state for simulation layers."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from venue_pricing.pricing.errors import InvariantViolation
from venue_pricing.pricing.layers import LevelDefaultLayer, PricingLayer
from venue_pricing.pricing.types import LayerSourceKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ToggleResult:
    """Outcome of a toggle request; rejected toggles keep the previous set."""

    accepted: bool
    enabled_layer_ids: frozenset[str]
    reason: str | None = None


def initial_enabled_ids(layers: Iterable[PricingLayer]) -> frozenset[str]:
    """Every discovered layer starts enabled."""

    return frozenset(layer.id for layer in layers)


def enabled_default_ids(
    layers: Iterable[PricingLayer], enabled_layer_ids: frozenset[str]
) -> frozenset[str]:
    return frozenset(
        layer.id
        for layer in layers
        if isinstance(layer, LevelDefaultLayer) and layer.id in enabled_layer_ids
    )


def check_can_disable(
    layers: Sequence[PricingLayer],
    enabled_layer_ids: frozenset[str],
    layer_id: str,
) -> None:
    """Raise when disabling ``layer_id`` would leave no enabled default rate.

    Raises:
        InvariantViolation: ``layer_id`` is the last enabled level default.
    """

    layer = next((candidate for candidate in layers if candidate.id == layer_id), None)
    if layer is None or layer.source_kind is not LayerSourceKind.LEVEL_DEFAULT:
        return
    remaining = enabled_default_ids(layers, enabled_layer_ids) - {layer_id}
    if not remaining:
        raise InvariantViolation(
            f"Cannot disable {layer_id}: at least one default rate must stay enabled"
        )


def set_layer_enabled(
    layers: Sequence[PricingLayer],
    enabled_layer_ids: frozenset[str],
    layer_id: str,
    enabled: bool,
) -> ToggleResult:
    """Enable or disable one layer without mutating the caller's set."""

    if enabled:
        return ToggleResult(accepted=True, enabled_layer_ids=enabled_layer_ids | {layer_id})
    if layer_id not in enabled_layer_ids:
        return ToggleResult(accepted=True, enabled_layer_ids=enabled_layer_ids)
    try:
        check_can_disable(layers, enabled_layer_ids, layer_id)
    except InvariantViolation as exc:
        logger.info("Rejected disabling layer %s: %s", layer_id, exc)
        return ToggleResult(accepted=False, enabled_layer_ids=enabled_layer_ids, reason=str(exc))
    return ToggleResult(accepted=True, enabled_layer_ids=enabled_layer_ids - {layer_id})


def toggle_layer(
    layers: Sequence[PricingLayer],
    enabled_layer_ids: frozenset[str],
    layer_id: str,
) -> ToggleResult:
    """Flip ``layer_id`` between ENABLED and DISABLED."""

    return set_layer_enabled(
        layers, enabled_layer_ids, layer_id, enabled=layer_id not in enabled_layer_ids
    )


__all__ = [
    "ToggleResult",
    "check_can_disable",
    "enabled_default_ids",
    "initial_enabled_ids",
    "set_layer_enabled",
    "toggle_layer",
]
