"""Pricing scenario API endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from venue_pricing.api import deps
from venue_pricing.models import PricingScenario
from venue_pricing.schemas.scenario import (
    ScenarioCreate,
    ScenarioDiffRead,
    ScenarioDiffRequest,
    ScenarioLoadRead,
    ScenarioLoadRequest,
    ScenarioRead,
    ScenarioUpdate,
)
from venue_pricing.services import scenario_service

router = APIRouter()


@router.get("", response_model=list[ScenarioRead], summary="List scenarios")
async def list_scenarios(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    sub_location_id: uuid.UUID | None = None,
    tag: str | None = None,
    include_inactive: bool = False,
    skip: int = 0,
    limit: int = 50,
) -> list[ScenarioRead]:
    scenarios = await scenario_service.list_scenarios(
        session,
        sub_location_id=sub_location_id,
        tag=tag,
        include_inactive=include_inactive,
        skip=skip,
        limit=limit,
    )
    return [ScenarioRead.model_validate(obj) for obj in scenarios]


@router.post(
    "",
    response_model=ScenarioRead,
    status_code=status.HTTP_201_CREATED,
    summary="Save scenario",
)
async def create_scenario(
    payload: ScenarioCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> ScenarioRead:
    try:
        scenario = await scenario_service.create_scenario(session, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return ScenarioRead.model_validate(scenario)


@router.get("/{scenario_id}", response_model=ScenarioRead, summary="Get scenario")
async def read_scenario(
    scenario: Annotated[PricingScenario, Depends(deps.get_scenario_or_404)],
) -> ScenarioRead:
    return ScenarioRead.model_validate(scenario)


@router.patch("/{scenario_id}", response_model=ScenarioRead, summary="Update scenario")
async def update_scenario(
    payload: ScenarioUpdate,
    scenario: Annotated[PricingScenario, Depends(deps.get_scenario_or_404)],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> ScenarioRead:
    updated = await scenario_service.update_scenario(session, scenario, payload)
    return ScenarioRead.model_validate(updated)


@router.delete(
    "/{scenario_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete scenario",
)
async def delete_scenario(
    scenario: Annotated[PricingScenario, Depends(deps.get_scenario_or_404)],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> None:
    await scenario_service.delete_scenario(session, scenario)


@router.post(
    "/{scenario_id}/load",
    response_model=ScenarioLoadRead,
    summary="Replay a scenario against current rules",
)
async def load_scenario(
    scenario: Annotated[PricingScenario, Depends(deps.get_scenario_or_404)],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    payload: ScenarioLoadRequest | None = None,
) -> ScenarioLoadRead:
    options = payload or ScenarioLoadRequest()
    try:
        result = await scenario_service.load_scenario(
            session, scenario, mode=options.mode, event_id=options.event_id
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return ScenarioLoadRead.model_validate(result)


@router.post(
    "/{scenario_id}/diff",
    response_model=ScenarioDiffRead,
    summary="Compare simulator state with a saved scenario",
)
async def diff_scenario(
    payload: ScenarioDiffRequest,
    scenario: Annotated[PricingScenario, Depends(deps.get_scenario_or_404)],
) -> ScenarioDiffRead:
    try:
        changed = scenario_service.scenario_has_unsaved_changes(scenario, payload.config)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return ScenarioDiffRead(scenario_id=scenario.id, has_unsaved_changes=changed)
