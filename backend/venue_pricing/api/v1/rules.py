"""Pricing rule approval endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from venue_pricing.api import deps
from venue_pricing.models import PricingRule
from venue_pricing.schemas.pricing_rule import PricingRuleRead, RuleStatusUpdate
from venue_pricing.services import rule_service

router = APIRouter(prefix="/rules", tags=["rules"])


@router.get("/{rule_id}", response_model=PricingRuleRead, summary="Get pricing rule")
async def get_rule(
    rule: Annotated[PricingRule, Depends(deps.get_rule_or_404)],
) -> PricingRuleRead:
    return PricingRuleRead.model_validate(rule)


@router.patch(
    "/{rule_id}/status",
    response_model=PricingRuleRead,
    summary="Submit, approve, reject or archive a rule",
)
async def update_rule_status(
    payload: RuleStatusUpdate,
    rule: Annotated[PricingRule, Depends(deps.get_rule_or_404)],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> PricingRuleRead:
    try:
        updated = await rule_service.change_rule_status(
            session, rule=rule, action=payload.action
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return PricingRuleRead.model_validate(updated)
