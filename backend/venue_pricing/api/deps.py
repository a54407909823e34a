"""Common API dependencies."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from venue_pricing.db.session import get_session
from venue_pricing.models import PricingRule, PricingScenario, SurgeConfig
from venue_pricing.services import rule_service, scenario_service, surge_service


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


async def get_scenario_or_404(
    scenario_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PricingScenario:
    """Resolve the ``scenario_id`` path parameter to a stored scenario."""
    scenario = await scenario_service.get_scenario(session, scenario_id=scenario_id)
    if scenario is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Scenario not found")
    return scenario


async def get_surge_config_or_404(
    config_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> SurgeConfig:
    """Resolve the ``config_id`` path parameter to a stored surge config."""
    config = await surge_service.get_surge_config(session, config_id=config_id)
    if config is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Surge config not found"
        )
    return config


async def get_rule_or_404(
    rule_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PricingRule:
    """Resolve the ``rule_id`` path parameter to a stored pricing rule."""
    rule = await rule_service.get_rule(session, rule_id=rule_id)
    if rule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rule not found")
    return rule
