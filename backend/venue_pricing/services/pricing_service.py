"""Timeline simulation service wrapping the pricing engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from venue_pricing.core.config import get_settings
from venue_pricing.pricing.layers import PricingLayer, normalize_layers
from venue_pricing.pricing.resolver import resolve_layers, summarize
from venue_pricing.pricing.scenarios import reconcile
from venue_pricing.pricing.toggles import (
    ToggleResult,
    initial_enabled_ids,
    set_layer_enabled,
    toggle_layer as toggle_enabled_layer,
)
from venue_pricing.pricing.types import (
    LayerSourceKind,
    PricingMode,
    PricingQuery,
    TimelineSummary,
    TimeSlot,
)
from venue_pricing.services import ruleset_service

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LayerInfo:
    """Discovered layer as presented to the simulator."""

    id: str
    name: str
    source_kind: LayerSourceKind
    priority: int
    is_enabled: bool


@dataclass(slots=True)
class LayerSet:
    """Normalized layers for one sub-location and range."""

    sub_location_id: UUID
    timezone: str
    mode: PricingMode
    layers: list[PricingLayer]


@dataclass(slots=True)
class TimelineResult:
    """Resolved timeline for a sub-location."""

    sub_location_id: UUID
    timezone: str
    mode: PricingMode
    layers: list[LayerInfo]
    enabled_layer_ids: list[str]
    slots: list[TimeSlot]
    summary: TimelineSummary


def _hour_count(range_start: datetime, range_end: datetime) -> float:
    return (range_end - range_start).total_seconds() / 3600


async def load_layers(
    session: AsyncSession,
    *,
    sub_location_id: UUID,
    range_start: datetime,
    range_end: datetime,
    mode: PricingMode | None = None,
    event_id: UUID | None = None,
    surge_enabled: bool = False,
) -> LayerSet:
    """Load the rule set for a sub-location and normalize it into layers."""
    settings = get_settings()
    if _hour_count(range_start, range_end) > settings.max_timeline_hours:
        raise ValueError(
            f"Timeline may span at most {settings.max_timeline_hours} hours"
        )
    effective_mode = mode or settings.default_pricing_mode
    rule_set, timezone = await ruleset_service.load_rule_set(
        session,
        sub_location_id=sub_location_id,
        range_start=range_start,
        range_end=range_end,
        mode=effective_mode,
        event_id=event_id,
    )
    layers = normalize_layers(
        rule_set,
        surge_enabled=surge_enabled,
        range_start=range_start,
        range_end=range_end,
    )
    return LayerSet(
        sub_location_id=sub_location_id,
        timezone=timezone,
        mode=effective_mode,
        layers=layers,
    )


def resolve_enabled_ids(
    layer_set: LayerSet, requested: list[str] | frozenset[str] | None
) -> frozenset[str]:
    """Every layer starts enabled; live pricing ignores simulation toggles."""
    if requested is None or layer_set.mode is PricingMode.LIVE:
        if requested is not None:
            logger.debug("Ignoring enabled_layer_ids in live mode")
        return initial_enabled_ids(layer_set.layers)
    return reconcile(requested, layer_set.layers)


def build_timeline(
    layer_set: LayerSet,
    *,
    range_start: datetime,
    range_end: datetime,
    enabled_layer_ids: frozenset[str],
    is_event_booking: bool = False,
    surge_enabled: bool = False,
    fallback_base_price: Decimal | None = None,
) -> TimelineResult:
    """Resolve every hour against an already loaded layer set."""
    query = PricingQuery(
        entity_id=str(layer_set.sub_location_id),
        range_start=range_start,
        range_end=range_end,
        is_event_booking=is_event_booking,
        enabled_layer_ids=enabled_layer_ids,
        surge_enabled=surge_enabled,
        timezone=layer_set.timezone,
        fallback_base_price=fallback_base_price,
    )
    slots = resolve_layers(layer_set.layers, query)
    summary = summarize(slots)
    logger.info(
        "Resolved %s hour(s) for sub-location %s: total %s, %s unpriced",
        len(slots),
        layer_set.sub_location_id,
        summary.total_cost,
        summary.unpriced_hours,
    )
    return TimelineResult(
        sub_location_id=layer_set.sub_location_id,
        timezone=layer_set.timezone,
        mode=layer_set.mode,
        layers=[
            LayerInfo(
                id=layer.id,
                name=layer.name,
                source_kind=layer.source_kind,
                priority=layer.priority,
                is_enabled=layer.id in enabled_layer_ids,
            )
            for layer in layer_set.layers
        ],
        enabled_layer_ids=sorted(enabled_layer_ids),
        slots=slots,
        summary=summary,
    )


async def simulate_timeline(
    session: AsyncSession,
    *,
    sub_location_id: UUID,
    range_start: datetime,
    range_end: datetime,
    mode: PricingMode | None = None,
    event_id: UUID | None = None,
    is_event_booking: bool = False,
    surge_enabled: bool = False,
    enabled_layer_ids: list[str] | None = None,
    fallback_base_price: Decimal | None = None,
) -> TimelineResult:
    """Resolve the hourly price timeline for a sub-location."""
    layer_set = await load_layers(
        session,
        sub_location_id=sub_location_id,
        range_start=range_start,
        range_end=range_end,
        mode=mode,
        event_id=event_id,
        surge_enabled=surge_enabled,
    )
    return build_timeline(
        layer_set,
        range_start=range_start,
        range_end=range_end,
        enabled_layer_ids=resolve_enabled_ids(layer_set, enabled_layer_ids),
        is_event_booking=is_event_booking,
        surge_enabled=surge_enabled,
        fallback_base_price=fallback_base_price,
    )


async def toggle_layer(
    session: AsyncSession,
    *,
    sub_location_id: UUID,
    range_start: datetime,
    range_end: datetime,
    layer_id: str,
    enabled: bool | None = None,
    mode: PricingMode | None = None,
    event_id: UUID | None = None,
    surge_enabled: bool = False,
    enabled_layer_ids: list[str] | None = None,
) -> ToggleResult:
    """Enable, disable or flip one layer, keeping at least one default rate on."""
    layer_set = await load_layers(
        session,
        sub_location_id=sub_location_id,
        range_start=range_start,
        range_end=range_end,
        mode=mode or PricingMode.SIMULATION,
        event_id=event_id,
        surge_enabled=surge_enabled,
    )
    if all(layer.id != layer_id for layer in layer_set.layers):
        raise ValueError(f"Unknown layer: {layer_id}")
    current = resolve_enabled_ids(layer_set, enabled_layer_ids)
    if enabled is None:
        return toggle_enabled_layer(layer_set.layers, current, layer_id)
    return set_layer_enabled(layer_set.layers, current, layer_id, enabled)
