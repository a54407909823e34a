from __future__ import annotations

import uuid

import pytest

pytestmark = pytest.mark.asyncio

CONFIG = {
    "enabled_layer_ids": ["sublocation-default", "customer-default", "retired-rule"],
    "selected_duration_hours": 4,
    "surge_enabled": False,
    "range_window": {"start": "2026-10-17T08:00:00Z", "end": "2026-10-17T12:00:00Z"},
    "pricing_coefficients": {"up": 1.2, "down": 0.8},
}


async def test_scenario_crud_flow(app_context) -> None:
    client = app_context["client"]
    sub_location_id = str(app_context["sub_location_id"])

    created = await client.post(
        "/api/v1/scenarios",
        json={
            "sub_location_id": sub_location_id,
            "name": "Morning preview",
            "config": CONFIG,
            "tags": ["morning"],
        },
    )
    assert created.status_code == 201, created.text
    scenario = created.json()
    assert scenario["config"]["enabledLayerIds"] == [
        "customer-default",
        "retired-rule",
        "sublocation-default",
    ]
    assert scenario["config"]["selectedDuration"] == 4
    assert scenario["config"]["pricingCoefficients"] == {"up": 1.2, "down": 0.8, "bias": None}

    listing = await client.get(
        "/api/v1/scenarios", params={"sub_location_id": sub_location_id, "tag": "morning"}
    )
    assert [item["id"] for item in listing.json()] == [scenario["id"]]

    fetched = await client.get(f"/api/v1/scenarios/{scenario['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Morning preview"

    patched = await client.patch(
        f"/api/v1/scenarios/{scenario['id']}", json={"description": "Weekday mornings"}
    )
    assert patched.status_code == 200
    assert patched.json()["description"] == "Weekday mornings"
    assert patched.json()["config"] == scenario["config"]

    deleted = await client.delete(f"/api/v1/scenarios/{scenario['id']}")
    assert deleted.status_code == 204
    missing = await client.get(f"/api/v1/scenarios/{scenario['id']}")
    assert missing.status_code == 404


async def test_create_scenario_for_unknown_sub_location(app_context) -> None:
    client = app_context["client"]
    response = await client.post(
        "/api/v1/scenarios",
        json={"sub_location_id": str(uuid.uuid4()), "name": "Orphan", "config": CONFIG},
    )
    assert response.status_code == 404


async def test_load_scenario_replays_timeline(app_context) -> None:
    client = app_context["client"]
    created = await client.post(
        "/api/v1/scenarios",
        json={
            "sub_location_id": str(app_context["sub_location_id"]),
            "name": "Replay",
            "config": {**CONFIG, "enabled_layer_ids": ["customer-default", "retired-rule"]},
        },
    )
    scenario_id = created.json()["id"]

    response = await client.post(f"/api/v1/scenarios/{scenario_id}/load")
    assert response.status_code == 200, response.text
    payload = response.json()

    assert payload["enabled_layer_ids"] == ["customer-default"]
    assert payload["dropped_layer_ids"] == ["retired-rule"]
    assert payload["config"]["selected_duration_hours"] == 4
    timeline = payload["timeline"]
    assert timeline["mode"] == "SIMULATION"
    assert len(timeline["slots"]) == 4
    assert {slot["winning_price"] for slot in timeline["slots"]} == {"8.00"}
    assert timeline["summary"]["total_cost"] == "32.00"


async def test_diff_reports_unsaved_changes(app_context) -> None:
    client = app_context["client"]
    created = await client.post(
        "/api/v1/scenarios",
        json={
            "sub_location_id": str(app_context["sub_location_id"]),
            "name": "Baseline",
            "config": CONFIG,
        },
    )
    scenario_id = created.json()["id"]

    unchanged = await client.post(
        f"/api/v1/scenarios/{scenario_id}/diff", json={"config": CONFIG}
    )
    assert unchanged.status_code == 200
    assert unchanged.json() == {"scenario_id": scenario_id, "has_unsaved_changes": False}

    changed = await client.post(
        f"/api/v1/scenarios/{scenario_id}/diff",
        json={"config": {**CONFIG, "surge_enabled": True}},
    )
    assert changed.json()["has_unsaved_changes"] is True
