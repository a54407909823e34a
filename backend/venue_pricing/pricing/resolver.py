"""Priority waterfall resolution over normalized pricing layers."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import Decimal

from venue_pricing.pricing.errors import InvalidRangeError
from venue_pricing.pricing.layers import (
    EvaluationContext,
    LevelDefaultLayer,
    PricingLayer,
    RatesheetLayer,
    SurgeLayer,
    normalize_layers,
)
from venue_pricing.pricing.types import (
    LayerResult,
    PricingQuery,
    RuleSet,
    TimelineSummary,
    TimeSlot,
    to_money,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def _is_enabled(layer_id: str, enabled_layer_ids: frozenset[str] | None) -> bool:
    return enabled_layer_ids is None or layer_id in enabled_layer_ids


def _evaluate(
    layer: PricingLayer,
    hour: datetime,
    context: EvaluationContext,
    enabled_layer_ids: frozenset[str] | None,
) -> LayerResult:
    evaluation = layer.evaluate(hour, context)
    return LayerResult(
        layer_id=layer.id,
        name=layer.name,
        source_kind=layer.source_kind,
        priority=layer.priority,
        is_active=evaluation.is_active,
        is_enabled=_is_enabled(layer.id, enabled_layer_ids),
        price=evaluation.price,
        multiplier=evaluation.multiplier,
    )


def _base_price(
    layers: Sequence[PricingLayer],
    results: Sequence[LayerResult],
    fallback: Decimal | None,
) -> Decimal | None:
    # Layers arrive sorted by priority, so the first priced non-surge candidate is the base.
    for layer, result in zip(layers, results):
        match layer:
            case SurgeLayer():
                continue
            case RatesheetLayer() | LevelDefaultLayer():
                if result.is_active and result.is_enabled and result.price is not None:
                    return result.price
    return fallback


def _surge_price(base: Decimal | None, multiplier: float | None) -> Decimal | None:
    if base is None or multiplier is None:
        return None
    return to_money(base * Decimal(repr(multiplier)))


def _price_surge_layers(
    layers: Sequence[PricingLayer],
    results: list[LayerResult],
    base: Decimal | None,
) -> list[LayerResult]:
    priced: list[LayerResult] = []
    for layer, result in zip(layers, results):
        match layer:
            case SurgeLayer() if result.is_active:
                result = LayerResult(
                    layer_id=result.layer_id,
                    name=result.name,
                    source_kind=result.source_kind,
                    priority=result.priority,
                    is_active=result.is_active,
                    is_enabled=result.is_enabled,
                    price=_surge_price(base, result.multiplier),
                    multiplier=result.multiplier,
                )
            case _:
                pass
        priced.append(result)
    return priced


def _ranking_key(result: LayerResult) -> tuple[int, int, Decimal]:
    # Priority first, then price; unpriced candidates lose every price tie.
    has_price = 0 if result.price is None else 1
    return (result.priority, has_price, result.price if result.price is not None else ZERO)


def resolve_hour(
    layers: Sequence[PricingLayer],
    hour: datetime,
    *,
    enabled_layer_ids: frozenset[str] | None = None,
    context: EvaluationContext | None = None,
    fallback_base_price: Decimal | None = None,
) -> TimeSlot:
    """Pick the single winning layer for ``hour``.

    Every layer is evaluated regardless of its enabled state so the slot
    carries a full breakdown. Only active and enabled layers compete; the
    highest priority wins, and a priority tie goes to the higher price. A
    surge layer is priced as the base price times its multiplier, the base
    being the best active, enabled, non-surge layer or ``fallback_base_price``.
    """

    context = context or EvaluationContext()
    raw_results = [_evaluate(layer, hour, context, enabled_layer_ids) for layer in layers]
    base = _base_price(layers, raw_results, fallback_base_price)
    results = _price_surge_layers(layers, raw_results, base)

    candidates = [result for result in results if result.is_active and result.is_enabled]
    winner = max(candidates, key=_ranking_key) if candidates else None

    surge_multiplier: float | None = None
    surge_price: Decimal | None = None
    if winner is not None and winner.multiplier is not None:
        surge_multiplier = winner.multiplier
        surge_price = winner.price

    if winner is None:
        logger.debug("No active layer for %s", hour.isoformat())
    else:
        logger.debug(
            "Hour %s won by %s (priority %s) at %s",
            hour.isoformat(),
            winner.layer_id,
            winner.priority,
            winner.price,
        )

    return TimeSlot(
        hour=hour,
        layers=tuple(results),
        winning_layer=winner,
        winning_price=winner.price if winner is not None else None,
        base_price=base,
        surge_price=surge_price,
        surge_multiplier=surge_multiplier,
    )


def iter_hours(query: PricingQuery) -> Iterable[datetime]:
    hour = query.range_start
    while hour < query.range_end:
        yield hour
        hour = hour + query.hour_granularity


def resolve_layers(layers: Sequence[PricingLayer], query: PricingQuery) -> list[TimeSlot]:
    """Resolve every hour of ``query`` against already normalized layers."""

    _validate_query(query)
    context = EvaluationContext(
        timezone=query.timezone, is_event_booking=query.is_event_booking
    )
    return [
        resolve_hour(
            layers,
            hour,
            enabled_layer_ids=query.enabled_layer_ids,
            context=context,
            fallback_base_price=query.fallback_base_price,
        )
        for hour in iter_hours(query)
    ]


def resolve(rule_set: RuleSet, query: PricingQuery) -> list[TimeSlot]:
    """Normalize ``rule_set`` once and resolve one slot per hour of the query range.

    Raises:
        InvalidRangeError: the range is empty or inverted, or the step is not positive.
    """

    _validate_query(query)
    layers = normalize_layers(
        rule_set,
        surge_enabled=query.surge_enabled,
        range_start=query.range_start,
        range_end=query.range_end,
    )
    return resolve_layers(layers, query)


def _validate_query(query: PricingQuery) -> None:
    if query.range_end <= query.range_start:
        raise InvalidRangeError(
            f"range_end {query.range_end.isoformat()} must be after "
            f"range_start {query.range_start.isoformat()}"
        )
    if query.hour_granularity.total_seconds() <= 0:
        raise InvalidRangeError("hour_granularity must be positive")


def summarize(slots: Iterable[TimeSlot]) -> TimelineSummary:
    """Total the winning prices; unpriced hours contribute nothing."""

    total = ZERO
    priced = 0
    unpriced = 0
    by_source: Counter[str] = Counter()
    for slot in slots:
        if slot.winning_price is None or slot.winning_layer is None:
            unpriced += 1
            continue
        priced += 1
        total += slot.winning_price
        by_source[slot.winning_layer.source_kind.value] += 1
    return TimelineSummary(
        total_cost=to_money(total),
        priced_hours=priced,
        unpriced_hours=unpriced,
        hours_by_source=dict(by_source),
    )


__all__ = [
    "iter_hours",
    "resolve",
    "resolve_hour",
    "resolve_layers",
    "summarize",
]
