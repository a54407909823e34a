"""Load persisted rules, default rates and surge configs into engine snapshots."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from venue_pricing.core.config import get_settings
from venue_pricing.models import Event, Location, SubLocation
from venue_pricing.models import PricingRule as PricingRuleModel
from venue_pricing.models import SurgeConfig as SurgeConfigModel
from venue_pricing.pricing.errors import ConfigurationError
from venue_pricing.pricing.surge import select_active_config
from venue_pricing.pricing.types import (
    DefaultRate,
    HierarchyLevel,
    PricingMode,
    PricingRule,
    RuleSet,
    SurgeConfig,
    TimeWindow,
    WindowType,
    to_money,
)
from venue_pricing.pricing.windows import zone_for
from venue_pricing.schemas.pricing_rule import TimeWindowSchema

logger = logging.getLogger(__name__)


def _aware(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def window_from_dict(data: Mapping[str, Any]) -> TimeWindow:
    """Build an engine window from its stored JSON form."""

    days = data.get("days_of_week")
    return TimeWindow(
        price_per_hour=Decimal(str(data.get("price_per_hour") or "0")),
        window_type=WindowType(data.get("window_type") or WindowType.ABSOLUTE_TIME.value),
        start_time=data.get("start_time"),
        end_time=data.get("end_time"),
        days_of_week=frozenset(int(day) for day in days) if days else None,
        start_minute=data.get("start_minute"),
        end_minute=data.get("end_minute"),
    )


def window_to_dict(window: TimeWindow) -> dict[str, Any]:
    """Store an engine window in the ``time_windows`` JSON column."""

    schema = TimeWindowSchema(
        window_type=window.window_type,
        start_time=window.start_time,
        end_time=window.end_time,
        days_of_week=sorted(window.days_of_week) if window.days_of_week else None,
        start_minute=window.start_minute,
        end_minute=window.end_minute,
        price_per_hour=window.price_per_hour,
    )
    return schema.model_dump(mode="json")


def rule_from_model(model: PricingRuleModel) -> PricingRule:
    effective_from = _aware(model.effective_from)
    assert effective_from is not None
    return PricingRule(
        id=str(model.id),
        name=model.name,
        applies_to_level=model.applies_to_level,
        priority=model.priority,
        kind=model.kind,
        conflict_resolution=model.conflict_resolution,
        effective_from=effective_from,
        effective_to=_aware(model.effective_to),
        is_active=model.is_active,
        approval_status=model.approval_status,
        time_windows=tuple(window_from_dict(item) for item in model.time_windows or []),
        surge_config_id=str(model.surge_config_id) if model.surge_config_id else None,
        surge_multiplier_snapshot=model.surge_multiplier_snapshot,
    )


def surge_config_from_model(model: SurgeConfigModel) -> SurgeConfig:
    effective_from = _aware(model.effective_from)
    assert effective_from is not None
    return SurgeConfig(
        id=str(model.id),
        name=model.name,
        applies_to_level=model.applies_to_level,
        priority=model.priority,
        is_active=model.is_active,
        effective_from=effective_from,
        effective_to=_aware(model.effective_to),
        current_demand=model.current_demand,
        current_supply=model.current_supply,
        historical_avg_pressure=model.historical_avg_pressure,
        alpha=model.alpha,
        min_multiplier=model.min_multiplier,
        max_multiplier=model.max_multiplier,
        surge_duration_hours=model.surge_duration_hours,
        time_windows=tuple(window_from_dict(item) for item in model.time_windows or []),
    )


def usable_timezone(timezone: str, *, fallback: str) -> str:
    """Return ``timezone`` if it names a known zone, else ``fallback``."""

    try:
        zone_for(timezone)
    except ConfigurationError:
        logger.warning("Unknown timezone %r; falling back to %s", timezone, fallback)
        return fallback
    return timezone


async def get_sub_location(
    session: AsyncSession, *, sub_location_id: uuid.UUID
) -> SubLocation | None:
    """Fetch a sub-location with its location and customer eagerly loaded."""
    stmt = (
        select(SubLocation)
        .where(SubLocation.id == sub_location_id)
        .options(selectinload(SubLocation.location).selectinload(Location.customer))
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def _event_ids(
    session: AsyncSession,
    *,
    sub_location: SubLocation,
    range_start: datetime,
    range_end: datetime,
    event_id: uuid.UUID | None,
) -> list[uuid.UUID]:
    if event_id is not None:
        event = await session.get(Event, event_id)
        if event is None or event.sub_location_id != sub_location.id:
            raise ValueError("Event not found for sub-location")
        return [event.id]
    result = await session.execute(
        select(Event).where(Event.sub_location_id == sub_location.id)
    )
    event_ids: list[uuid.UUID] = []
    for event in result.scalars():
        start = _aware(event.start_date)
        end = _aware(event.end_date)
        assert start is not None and end is not None
        if start < range_end and end > range_start:
            event_ids.append(event.id)
    return event_ids


def _default_rates(sub_location: SubLocation) -> list[DefaultRate]:
    location = sub_location.location
    customer = location.customer
    candidates: Iterable[tuple[HierarchyLevel, Decimal | None, str]] = (
        (HierarchyLevel.CUSTOMER, customer.default_hourly_rate, customer.name),
        (HierarchyLevel.LOCATION, location.default_hourly_rate, location.name),
        (HierarchyLevel.SUBLOCATION, sub_location.default_hourly_rate, sub_location.label),
    )
    return [
        DefaultRate(level=level, default_hourly_rate=to_money(rate), label=f"{name} default")
        for level, rate, name in candidates
        if rate is not None
    ]


async def load_rule_set(
    session: AsyncSession,
    *,
    sub_location_id: uuid.UUID,
    range_start: datetime,
    range_end: datetime,
    mode: PricingMode,
    event_id: uuid.UUID | None = None,
) -> tuple[RuleSet, str]:
    """Collect every pricing input for a sub-location and time range.

    Rules come from the sub-location, its location, its customer and any event
    of the sub-location overlapping the range. The mode filter is left to the
    layer normalizer, so all approval states are loaded.

    Returns:
        The rule set and the sub-location's effective timezone.
    """

    settings = get_settings()
    sub_location = await get_sub_location(session, sub_location_id=sub_location_id)
    if sub_location is None:
        raise ValueError("Sub-location not found")
    location = sub_location.location

    event_ids = await _event_ids(
        session,
        sub_location=sub_location,
        range_start=range_start,
        range_end=range_end,
        event_id=event_id,
    )
    scopes = [
        and_(
            PricingRuleModel.applies_to_level == HierarchyLevel.CUSTOMER,
            PricingRuleModel.entity_id == location.customer_id,
        ),
        and_(
            PricingRuleModel.applies_to_level == HierarchyLevel.LOCATION,
            PricingRuleModel.entity_id == location.id,
        ),
        and_(
            PricingRuleModel.applies_to_level == HierarchyLevel.SUBLOCATION,
            PricingRuleModel.entity_id == sub_location.id,
        ),
    ]
    if event_ids:
        scopes.append(
            and_(
                PricingRuleModel.applies_to_level == HierarchyLevel.EVENT,
                PricingRuleModel.entity_id.in_(event_ids),
            )
        )
    rule_rows = await session.execute(
        select(PricingRuleModel)
        .where(or_(*scopes))
        .order_by(PricingRuleModel.priority.desc(), PricingRuleModel.created_at)
    )
    rules = [
        rule
        for rule in (rule_from_model(row) for row in rule_rows.scalars())
        if rule.overlaps(range_start, range_end)
    ]

    surge_rows = await session.execute(
        select(SurgeConfigModel).where(
            or_(
                and_(
                    SurgeConfigModel.applies_to_level == HierarchyLevel.SUBLOCATION,
                    SurgeConfigModel.entity_id == sub_location.id,
                ),
                and_(
                    SurgeConfigModel.applies_to_level == HierarchyLevel.LOCATION,
                    SurgeConfigModel.entity_id == location.id,
                ),
            ),
            SurgeConfigModel.is_active.is_(True),
        )
    )
    surge_config = select_active_config(
        config
        for config in (surge_config_from_model(row) for row in surge_rows.scalars())
        if config.effective_from < range_end
        and (config.effective_to is None or config.effective_to > range_start)
    )

    timezone = usable_timezone(
        sub_location.resolve_timezone(settings.default_timezone),
        fallback=settings.default_timezone,
    )
    logger.debug(
        "Loaded %s rule(s) for sub-location %s (surge config: %s)",
        len(rules),
        sub_location.id,
        surge_config.id if surge_config else None,
    )
    rule_set = RuleSet(
        rules=tuple(rules),
        default_rates=tuple(_default_rates(sub_location)),
        surge_config=surge_config,
        mode=mode,
        priority_ranges=settings.priority_ranges,
        surge_priority_base=settings.surge_priority_base,
    )
    return rule_set, timezone
