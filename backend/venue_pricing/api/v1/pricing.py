"""Timeline simulation API endpoints."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from venue_pricing.api import deps
from venue_pricing.schemas.pricing import (
    LayerToggleRead,
    LayerToggleRequest,
    TimelineRead,
    TimelineRequest,
)
from venue_pricing.services import pricing_service, ruleset_service

router = APIRouter(prefix="/pricing", tags=["pricing"])


async def _assert_sub_location(session: AsyncSession, sub_location_id: UUID) -> None:
    sub_location = await ruleset_service.get_sub_location(
        session, sub_location_id=sub_location_id
    )
    if sub_location is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Sub-location not found"
        )


@router.post(
    "/timeline", response_model=TimelineRead, summary="Resolve hourly prices"
)
async def resolve_timeline(
    payload: TimelineRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> TimelineRead:
    await _assert_sub_location(session, payload.sub_location_id)
    try:
        timeline = await pricing_service.simulate_timeline(
            session,
            sub_location_id=payload.sub_location_id,
            range_start=payload.range_start,
            range_end=payload.range_end,
            mode=payload.mode,
            event_id=payload.event_id,
            is_event_booking=payload.is_event_booking,
            surge_enabled=payload.surge_enabled,
            enabled_layer_ids=payload.enabled_layer_ids,
            fallback_base_price=payload.fallback_base_price,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return TimelineRead.model_validate(timeline)


@router.post(
    "/layers/toggle",
    response_model=LayerToggleRead,
    summary="Enable or disable a simulation layer",
)
async def toggle_layer(
    payload: LayerToggleRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> LayerToggleRead:
    await _assert_sub_location(session, payload.sub_location_id)
    try:
        result = await pricing_service.toggle_layer(
            session,
            sub_location_id=payload.sub_location_id,
            range_start=payload.range_start,
            range_end=payload.range_end,
            layer_id=payload.layer_id,
            enabled=payload.enabled,
            mode=payload.mode,
            event_id=payload.event_id,
            surge_enabled=payload.surge_enabled,
            enabled_layer_ids=payload.enabled_layer_ids,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return LayerToggleRead(
        accepted=result.accepted,
        layer_id=payload.layer_id,
        enabled_layer_ids=sorted(result.enabled_layer_ids),
        reason=result.reason,
    )
