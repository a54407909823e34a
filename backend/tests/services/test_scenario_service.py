from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from venue_pricing.db.session import get_sessionmaker
from venue_pricing.models import SurgeConfig as SurgeConfigModel
from venue_pricing.pricing.types import HierarchyLevel
from venue_pricing.schemas.scenario import (
    PricingCoefficientsSchema,
    ScenarioConfig,
    ScenarioCreate,
    ScenarioUpdate,
    ScenarioWindow,
)
from venue_pricing.services import scenario_service

pytestmark = pytest.mark.asyncio

DAY = datetime(2026, 10, 17, tzinfo=UTC)


async def _seed_surge_config(db_url: str, *, sub_location_id: uuid.UUID) -> uuid.UUID:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        config = SurgeConfigModel(
            name="Rush",
            applies_to_level=HierarchyLevel.SUBLOCATION,
            entity_id=sub_location_id,
            effective_from=DAY,
            current_demand=20.0,
            current_supply=10.0,
            historical_avg_pressure=1.0,
            alpha=0.5,
            min_multiplier=0.5,
            max_multiplier=3.0,
        )
        session.add(config)
        await session.commit()
        return config.id


def _config(enabled_layer_ids: list[str], **overrides) -> ScenarioConfig:
    values = {
        "enabled_layer_ids": enabled_layer_ids,
        "selected_duration_hours": 3,
        "surge_enabled": True,
        "range_window": ScenarioWindow(start=DAY, end=DAY + timedelta(hours=3)),
        "pricing_coefficients": PricingCoefficientsSchema(up=1.1, down=0.9),
    }
    values.update(overrides)
    return ScenarioConfig(**values)


async def test_scenario_round_trip_reconciles_surge_layers(
    venue: dict[str, uuid.UUID], db_url: str
) -> None:
    sub_location_id = venue["sub_location_id"]
    config_id = await _seed_surge_config(db_url, sub_location_id=sub_location_id)
    surge_layer = f"surge-{config_id}"

    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        scenario = await scenario_service.create_scenario(
            session,
            ScenarioCreate(
                sub_location_id=sub_location_id,
                name="Rush hour preview",
                config=_config(["sublocation-default", surge_layer, "retired-rule"]),
                tags=["weekend"],
            ),
        )

        assert scenario.config["enabledLayerIds"] == sorted(
            ["sublocation-default", surge_layer, "retired-rule"]
        )
        assert scenario.config["surgeEnabled"] is True
        assert scenario.config["rangeWindow"]["start"] == DAY.isoformat()

        result = await scenario_service.load_scenario(session, scenario)

    assert result.enabled_layer_ids == sorted(["sublocation-default", surge_layer])
    assert result.dropped_layer_ids == ["retired-rule"]
    assert result.config.selected_duration_hours == 3
    assert result.config.pricing_coefficients.up == pytest.approx(1.1)
    assert len(result.timeline.slots) == 3
    assert "customer-default" not in result.timeline.enabled_layer_ids
    assert result.timeline.slots[0].winning_price == Decimal("13.47")


async def test_scenario_without_surge_drops_surge_layer(
    venue: dict[str, uuid.UUID], db_url: str
) -> None:
    sub_location_id = venue["sub_location_id"]
    config_id = await _seed_surge_config(db_url, sub_location_id=sub_location_id)

    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        scenario = await scenario_service.create_scenario(
            session,
            ScenarioCreate(
                sub_location_id=sub_location_id,
                name="No surge",
                config=_config(
                    ["sublocation-default", f"surge-{config_id}"], surge_enabled=False
                ),
            ),
        )
        result = await scenario_service.load_scenario(session, scenario)

    assert result.enabled_layer_ids == ["sublocation-default"]
    assert result.dropped_layer_ids == [f"surge-{config_id}"]
    assert result.timeline.slots[0].winning_price == Decimal("10.00")


async def test_list_update_and_delete_scenarios(
    venue: dict[str, uuid.UUID], db_url: str
) -> None:
    sub_location_id = venue["sub_location_id"]
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        weekend = await scenario_service.create_scenario(
            session,
            ScenarioCreate(
                sub_location_id=sub_location_id,
                name="Weekend",
                config=_config(["sublocation-default"]),
                tags=["weekend"],
            ),
        )
        await scenario_service.create_scenario(
            session,
            ScenarioCreate(
                sub_location_id=sub_location_id,
                name="Archived",
                config=_config(["sublocation-default"]),
                is_active=False,
            ),
        )

        active = await scenario_service.list_scenarios(session, sub_location_id=sub_location_id)
        everything = await scenario_service.list_scenarios(
            session, sub_location_id=sub_location_id, include_inactive=True
        )
        tagged = await scenario_service.list_scenarios(session, tag="weekend")

        assert [scenario.name for scenario in active] == ["Weekend"]
        assert len(everything) == 2
        assert [scenario.id for scenario in tagged] == [weekend.id]

        updated = await scenario_service.update_scenario(
            session,
            weekend,
            ScenarioUpdate(name="Weekend v2", config=_config(["customer-default"])),
        )
        assert updated.name == "Weekend v2"
        assert updated.config["enabledLayerIds"] == ["customer-default"]
        assert updated.tags == ["weekend"]

        await scenario_service.delete_scenario(session, updated)
        assert await scenario_service.get_scenario(session, scenario_id=weekend.id) is None


async def test_create_scenario_requires_sub_location(reset_database: None, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        with pytest.raises(ValueError, match="Sub-location not found"):
            await scenario_service.create_scenario(
                session,
                ScenarioCreate(
                    sub_location_id=uuid.uuid4(),
                    name="Orphan",
                    config=_config([]),
                ),
            )


async def test_unsaved_changes_against_saved_scenario(
    venue: dict[str, uuid.UUID], db_url: str
) -> None:
    saved_config = _config(["sublocation-default"])
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        scenario = await scenario_service.create_scenario(
            session,
            ScenarioCreate(
                sub_location_id=venue["sub_location_id"],
                name="Baseline",
                config=saved_config,
            ),
        )

    assert not scenario_service.scenario_has_unsaved_changes(scenario, saved_config)
    assert scenario_service.scenario_has_unsaved_changes(
        scenario, _config(["sublocation-default", "customer-default"])
    )
    assert scenario_service.scenario_has_unsaved_changes(
        scenario, _config(["sublocation-default"], selected_duration_hours=6)
    )
    assert not scenario_service.scenario_has_unsaved_changes(
        scenario,
        _config(
            ["sublocation-default"],
            view_window=ScenarioWindow(start=DAY, end=DAY + timedelta(hours=1)),
        ),
    )
