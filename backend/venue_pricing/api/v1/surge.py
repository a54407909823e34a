"""Surge pricing API endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from venue_pricing.api import deps
from venue_pricing.models import SurgeConfig
from venue_pricing.schemas.pricing_rule import PricingRuleRead
from venue_pricing.schemas.surge import (
    SurgeCalculationRead,
    SurgeMaterializeRequest,
    SurgeParameters,
)
from venue_pricing.services import surge_service

router = APIRouter(prefix="/surge", tags=["surge"])


@router.post(
    "/calculate",
    response_model=SurgeCalculationRead,
    summary="Compute a surge factor from ad-hoc inputs",
)
async def calculate_surge(payload: SurgeParameters) -> SurgeCalculationRead:
    try:
        calculation = surge_service.calculate_for_parameters(payload)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return SurgeCalculationRead.model_validate(calculation)


@router.get(
    "/configs/{config_id}/factor",
    response_model=SurgeCalculationRead,
    summary="Live surge factor of a stored config",
)
async def read_surge_factor(
    config: Annotated[SurgeConfig, Depends(deps.get_surge_config_or_404)],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> SurgeCalculationRead:
    try:
        calculation = await surge_service.calculate_for_config(session, config_id=config.id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return SurgeCalculationRead.model_validate(calculation)


@router.post(
    "/configs/{config_id}/materialize",
    response_model=PricingRuleRead,
    status_code=status.HTTP_201_CREATED,
    summary="Freeze the current surge factor into a draft rule",
)
async def materialize_surge(
    config: Annotated[SurgeConfig, Depends(deps.get_surge_config_or_404)],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    payload: SurgeMaterializeRequest | None = None,
) -> PricingRuleRead:
    try:
        rule = await surge_service.materialize_surge_config(
            session,
            config=config,
            demand_hour=payload.demand_hour if payload else None,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return PricingRuleRead.model_validate(rule)


@router.post(
    "/configs/{config_id}/archive",
    response_model=PricingRuleRead,
    summary="Deactivate the last materialized surge rule",
)
async def archive_surge_rule(
    config: Annotated[SurgeConfig, Depends(deps.get_surge_config_or_404)],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> PricingRuleRead:
    rule = await surge_service.archive_materialized_rule(session, config=config)
    if rule is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="No materialized surge rule"
        )
    return PricingRuleRead.model_validate(rule)
