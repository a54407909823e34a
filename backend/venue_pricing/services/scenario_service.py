"""Pricing scenario persistence and replay."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from venue_pricing.models import PricingScenario, SubLocation
from venue_pricing.pricing.scenarios import (
    PricingCoefficients,
    ScenarioParameters,
    TimeRange,
    has_unsaved_changes,
    restore,
    snapshot,
)
from venue_pricing.pricing.types import PricingMode
from venue_pricing.schemas.scenario import (
    PricingCoefficientsSchema,
    ScenarioConfig,
    ScenarioCreate,
    ScenarioUpdate,
    ScenarioWindow,
)
from venue_pricing.services import pricing_service

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScenarioLoadResult:
    """Outcome of the two-phase scenario replay."""

    scenario_id: uuid.UUID
    config: ScenarioConfig
    enabled_layer_ids: list[str]
    dropped_layer_ids: list[str]
    timeline: pricing_service.TimelineResult


def _range(window: ScenarioWindow | None) -> TimeRange | None:
    if window is None:
        return None
    return TimeRange(start=window.start, end=window.end)


def _window(value: TimeRange | None) -> ScenarioWindow | None:
    if value is None:
        return None
    return ScenarioWindow(start=value.start, end=value.end)


def parameters_from_config(config: ScenarioConfig) -> ScenarioParameters:
    coefficients = config.pricing_coefficients
    return ScenarioParameters(
        selected_duration_hours=config.selected_duration_hours,
        surge_enabled=config.surge_enabled,
        is_event_booking=config.is_event_booking,
        view_window=_range(config.view_window),
        range_window=_range(config.range_window),
        pricing_coefficients=PricingCoefficients(
            up=coefficients.up, down=coefficients.down, bias=coefficients.bias
        ),
    )


def config_from_parameters(
    parameters: ScenarioParameters, enabled_layer_ids: list[str]
) -> ScenarioConfig:
    coefficients = parameters.pricing_coefficients
    return ScenarioConfig(
        enabled_layer_ids=enabled_layer_ids,
        selected_duration_hours=parameters.selected_duration_hours,
        surge_enabled=parameters.surge_enabled,
        is_event_booking=parameters.is_event_booking,
        view_window=_window(parameters.view_window),
        range_window=_window(parameters.range_window),
        pricing_coefficients=PricingCoefficientsSchema(
            up=coefficients.up, down=coefficients.down, bias=coefficients.bias
        ),
    )


def config_blob(config: ScenarioConfig) -> dict[str, object]:
    return snapshot(config.enabled_layer_ids, parameters_from_config(config))


async def list_scenarios(
    session: AsyncSession,
    *,
    sub_location_id: uuid.UUID | None = None,
    tag: str | None = None,
    include_inactive: bool = False,
    skip: int = 0,
    limit: int = 50,
) -> list[PricingScenario]:
    """Return scenarios, optionally scoped to a sub-location or tag."""
    stmt: Select[tuple[PricingScenario]] = select(PricingScenario)
    if sub_location_id is not None:
        stmt = stmt.where(PricingScenario.sub_location_id == sub_location_id)
    if not include_inactive:
        stmt = stmt.where(PricingScenario.is_active.is_(True))
    stmt = stmt.order_by(PricingScenario.created_at.desc())
    result = await session.execute(stmt)
    scenarios = list(result.scalars().all())
    if tag is not None:
        # JSON containment differs between backends; filter tags in Python.
        scenarios = [scenario for scenario in scenarios if tag in (scenario.tags or [])]
    return scenarios[skip : skip + min(limit, 100)]


async def get_scenario(
    session: AsyncSession, *, scenario_id: uuid.UUID
) -> PricingScenario | None:
    return await session.get(PricingScenario, scenario_id)


async def create_scenario(session: AsyncSession, payload: ScenarioCreate) -> PricingScenario:
    """Persist the simulator state as a new scenario."""
    if await session.get(SubLocation, payload.sub_location_id) is None:
        raise ValueError("Sub-location not found")
    scenario = PricingScenario(
        sub_location_id=payload.sub_location_id,
        name=payload.name,
        description=payload.description,
        config=config_blob(payload.config),
        is_active=payload.is_active,
        tags=list(payload.tags),
    )
    session.add(scenario)
    await session.commit()
    await session.refresh(scenario)
    logger.info("Saved scenario %s for sub-location %s", scenario.id, scenario.sub_location_id)
    return scenario


async def update_scenario(
    session: AsyncSession,
    scenario: PricingScenario,
    payload: ScenarioUpdate,
) -> PricingScenario:
    """Update mutable fields on a scenario."""
    changes = payload.model_dump(exclude_unset=True, exclude={"config"})
    for field, value in changes.items():
        if value is None and field in {"name", "is_active", "tags"}:
            continue
        setattr(scenario, field, value)
    if payload.config is not None:
        scenario.config = config_blob(payload.config)
    await session.commit()
    await session.refresh(scenario)
    return scenario


async def delete_scenario(session: AsyncSession, scenario: PricingScenario) -> None:
    await session.delete(scenario)
    await session.commit()


def _replay_range(parameters: ScenarioParameters) -> tuple[datetime, datetime]:
    window = parameters.range_window or parameters.view_window
    if window is not None:
        return window.start, window.end
    start = datetime.now(UTC).replace(minute=0, second=0, microsecond=0)
    return start, start + timedelta(hours=parameters.selected_duration_hours)


async def load_scenario(
    session: AsyncSession,
    scenario: PricingScenario,
    *,
    mode: PricingMode = PricingMode.SIMULATION,
    event_id: uuid.UUID | None = None,
) -> ScenarioLoadResult:
    """Replay a scenario: restore parameters, discover layers, then reconcile ids."""
    pending = restore(scenario.config)
    parameters = pending.parameters
    range_start, range_end = _replay_range(parameters)

    layer_set = await pricing_service.load_layers(
        session,
        sub_location_id=scenario.sub_location_id,
        range_start=range_start,
        range_end=range_end,
        mode=mode,
        event_id=event_id,
        surge_enabled=parameters.surge_enabled,
    )
    enabled = pending.complete(layer_set.layers)
    dropped = sorted(pending.saved_layer_ids - enabled)
    if dropped:
        logger.info("Scenario %s dropped stale layer ids: %s", scenario.id, ", ".join(dropped))

    timeline = pricing_service.build_timeline(
        layer_set,
        range_start=range_start,
        range_end=range_end,
        enabled_layer_ids=enabled,
        is_event_booking=parameters.is_event_booking,
        surge_enabled=parameters.surge_enabled,
    )
    return ScenarioLoadResult(
        scenario_id=scenario.id,
        config=config_from_parameters(parameters, sorted(enabled)),
        enabled_layer_ids=sorted(enabled),
        dropped_layer_ids=dropped,
        timeline=timeline,
    )


def scenario_has_unsaved_changes(scenario: PricingScenario, current: ScenarioConfig) -> bool:
    """Compare the simulator's current state with the saved blob."""
    saved = restore(scenario.config)
    return has_unsaved_changes(
        current.enabled_layer_ids,
        parameters_from_config(current),
        saved.saved_layer_ids,
        saved.parameters,
    )
