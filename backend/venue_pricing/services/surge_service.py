"""Surge factor computation and materialization into draft rules."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from venue_pricing.core.config import get_settings
from venue_pricing.models import PricingRule as PricingRuleModel
from venue_pricing.models import SurgeConfig as SurgeConfigModel
from venue_pricing.pricing.surge import (
    SurgeCalculation,
    build_materialized_rule,
    calculate_surge,
)
from venue_pricing.pricing.types import ApprovalStatus, SurgeConfig
from venue_pricing.schemas.surge import SurgeParameters
from venue_pricing.services.ruleset_service import surge_config_from_model, window_to_dict

logger = logging.getLogger(__name__)


def calculate_for_parameters(params: SurgeParameters) -> SurgeCalculation:
    """Compute a factor from ad-hoc inputs without touching the database.

    Raises:
        SurgeComputationError: the inputs make the factor undefined.
    """
    config = SurgeConfig(
        id="preview",
        current_demand=params.current_demand,
        current_supply=params.current_supply,
        historical_avg_pressure=params.historical_avg_pressure,
        alpha=params.alpha,
        min_multiplier=params.min_multiplier,
        max_multiplier=params.max_multiplier,
        ema_alpha=params.ema_alpha,
        previous_smoothed_pressure=params.previous_smoothed_pressure,
        effective_from=datetime.now(UTC),
    )
    return calculate_surge(config)


async def get_surge_config(
    session: AsyncSession, *, config_id: uuid.UUID
) -> SurgeConfigModel | None:
    return await session.get(SurgeConfigModel, config_id)


async def calculate_for_config(
    session: AsyncSession, *, config_id: uuid.UUID
) -> SurgeCalculation:
    """Compute the live factor of a stored config."""
    config = await get_surge_config(session, config_id=config_id)
    if config is None:
        raise ValueError("Surge config not found")
    return calculate_surge(surge_config_from_model(config))


async def materialize_surge_config(
    session: AsyncSession,
    *,
    config: SurgeConfigModel,
    demand_hour: datetime | None = None,
) -> PricingRuleModel:
    """Freeze the config's current factor into a new DRAFT pricing rule.

    The rule waits for approval before it prices anything; the config keeps a
    reference to it so it can later be archived.
    """
    settings = get_settings()
    snapshot_config = surge_config_from_model(config)
    calculation = calculate_surge(snapshot_config)
    rule_id = uuid.uuid4()
    rule = build_materialized_rule(
        snapshot_config,
        rule_id=str(rule_id),
        priority_base=settings.surge_priority_base,
        demand_hour=demand_hour,
    )
    now = datetime.now(UTC)
    if demand_hour is not None:
        description = f"Predictive surge for {demand_hour.isoformat()}"
    else:
        description = f"Auto-generated surge rule from config {config.id}"

    model = PricingRuleModel(
        id=rule_id,
        name=rule.name,
        description=description,
        applies_to_level=config.applies_to_level,
        entity_id=config.entity_id,
        priority=rule.priority,
        kind=rule.kind,
        conflict_resolution=rule.conflict_resolution,
        effective_from=rule.effective_from,
        effective_to=rule.effective_to,
        is_active=rule.is_active,
        approval_status=rule.approval_status,
        time_windows=[window_to_dict(window) for window in rule.time_windows],
        surge_config_id=config.id,
        surge_multiplier_snapshot=rule.surge_multiplier_snapshot,
        demand_supply_snapshot={
            "demand": config.current_demand,
            "supply": config.current_supply,
            "pressure": calculation.pressure,
            "normalized_pressure": calculation.normalized_pressure,
            "timestamp": now.isoformat(),
        },
    )
    session.add(model)
    config.materialized_rule_id = rule_id
    config.last_materialized_at = now
    await session.commit()
    await session.refresh(model)
    return model


async def archive_materialized_rule(
    session: AsyncSession, *, config: SurgeConfigModel
) -> PricingRuleModel | None:
    """Deactivate and archive the rule last materialized from ``config``, if any."""
    if config.materialized_rule_id is None:
        logger.info("Surge config %s has no materialized rule to archive", config.id)
        return None
    rule = await session.get(PricingRuleModel, config.materialized_rule_id)
    if rule is None:
        return None
    rule.is_active = False
    rule.approval_status = ApprovalStatus.ARCHIVED
    await session.commit()
    await session.refresh(rule)
    logger.info("Archived surge rule %s of config %s", rule.id, config.id)
    return rule
