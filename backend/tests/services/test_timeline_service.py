from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from venue_pricing.db.session import get_sessionmaker
from venue_pricing.models import Event, Location
from venue_pricing.models import PricingRule as PricingRuleModel
from venue_pricing.pricing.types import ApprovalStatus, HierarchyLevel, PricingMode
from venue_pricing.services import pricing_service

pytestmark = pytest.mark.asyncio

DAY = datetime(2026, 10, 17, tzinfo=UTC)


async def _seed_rule(
    db_url: str,
    *,
    entity_id: uuid.UUID,
    priority: int,
    price: str,
    start: str = "00:00",
    end: str = "24:00",
    level: HierarchyLevel = HierarchyLevel.SUBLOCATION,
    status: ApprovalStatus = ApprovalStatus.APPROVED,
) -> uuid.UUID:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        rule = PricingRuleModel(
            name=f"{level.value.title()} {start}-{end}",
            applies_to_level=level,
            entity_id=entity_id,
            priority=priority,
            effective_from=DAY,
            approval_status=status,
            time_windows=[
                {"start_time": start, "end_time": end, "price_per_hour": price}
            ],
        )
        session.add(rule)
        await session.commit()
        return rule.id


def _prices(result: pricing_service.TimelineResult) -> list[Decimal | None]:
    return [slot.winning_price for slot in result.slots]


async def test_live_timeline_only_prices_approved_rules(
    venue: dict[str, uuid.UUID], db_url: str
) -> None:
    sub_location_id = venue["sub_location_id"]
    evening_id = await _seed_rule(
        db_url, entity_id=sub_location_id, priority=3700, price="20.00",
        start="18:00", end="22:00",
    )
    draft_id = await _seed_rule(
        db_url, entity_id=sub_location_id, priority=3800, price="30.00",
        status=ApprovalStatus.DRAFT,
    )

    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        live = await pricing_service.simulate_timeline(
            session,
            sub_location_id=sub_location_id,
            range_start=DAY.replace(hour=17),
            range_end=DAY.replace(hour=19),
            mode=PricingMode.LIVE,
        )
        simulated = await pricing_service.simulate_timeline(
            session,
            sub_location_id=sub_location_id,
            range_start=DAY.replace(hour=17),
            range_end=DAY.replace(hour=19),
            mode=PricingMode.SIMULATION,
        )

    assert live.mode is PricingMode.LIVE
    assert _prices(live) == [Decimal("10.00"), Decimal("20.00")]
    assert set(live.enabled_layer_ids) == {
        str(evening_id),
        "customer-default",
        "sublocation-default",
    }
    assert [layer.priority for layer in live.layers] == [3700, 3499, 1499]

    assert _prices(simulated) == [Decimal("30.00"), Decimal("30.00")]
    assert str(draft_id) in simulated.enabled_layer_ids
    assert simulated.summary.total_cost == Decimal("60.00")


async def test_simulation_honours_enabled_layer_ids(
    venue: dict[str, uuid.UUID], db_url: str
) -> None:
    sub_location_id = venue["sub_location_id"]
    draft_id = await _seed_rule(
        db_url, entity_id=sub_location_id, priority=3800, price="30.00",
        status=ApprovalStatus.DRAFT,
    )

    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        result = await pricing_service.simulate_timeline(
            session,
            sub_location_id=sub_location_id,
            range_start=DAY.replace(hour=9),
            range_end=DAY.replace(hour=11),
            mode=PricingMode.SIMULATION,
            enabled_layer_ids=["sublocation-default", "retired-rule"],
        )

    assert result.enabled_layer_ids == ["sublocation-default"]
    assert _prices(result) == [Decimal("10.00"), Decimal("10.00")]
    draft_layer = next(layer for layer in result.layers if layer.id == str(draft_id))
    assert not draft_layer.is_enabled
    assert result.slots[0].layers[0].price == Decimal("30.00")


async def test_timeline_uses_inherited_timezone(
    venue: dict[str, uuid.UUID], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        location = await session.get(Location, venue["location_id"])
        assert location is not None
        location.timezone = "America/New_York"
        await session.commit()

    await _seed_rule(
        db_url, entity_id=venue["sub_location_id"], priority=3700, price="25.00",
        start="18:00", end="23:00",
    )

    async with sessionmaker() as session:
        result = await pricing_service.simulate_timeline(
            session,
            sub_location_id=venue["sub_location_id"],
            range_start=DAY.replace(hour=21),
            range_end=DAY.replace(hour=23),
        )

    assert result.timezone == "America/New_York"
    assert _prices(result) == [Decimal("10.00"), Decimal("25.00")]


async def test_unknown_timezone_falls_back_to_default(
    venue: dict[str, uuid.UUID], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        location = await session.get(Location, venue["location_id"])
        assert location is not None
        location.timezone = "Mars/Olympus"
        await session.commit()

    await _seed_rule(
        db_url, entity_id=venue["sub_location_id"], priority=3700, price="25.00",
        start="18:00", end="23:00",
    )

    async with sessionmaker() as session:
        result = await pricing_service.simulate_timeline(
            session,
            sub_location_id=venue["sub_location_id"],
            range_start=DAY.replace(hour=17),
            range_end=DAY.replace(hour=19),
        )

    assert result.timezone == "UTC"
    assert _prices(result) == [Decimal("10.00"), Decimal("25.00")]


async def test_event_rules_apply_only_to_overlapping_events(
    venue: dict[str, uuid.UUID], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        event = Event(
            sub_location_id=venue["sub_location_id"],
            name="Trade show",
            start_date=DAY.replace(hour=10),
            end_date=DAY.replace(hour=14),
        )
        session.add(event)
        await session.commit()
        event_id = event.id

    await _seed_rule(
        db_url, entity_id=event_id, priority=4500, price="40.00",
        level=HierarchyLevel.EVENT,
    )

    async with sessionmaker() as session:
        during = await pricing_service.simulate_timeline(
            session,
            sub_location_id=venue["sub_location_id"],
            range_start=DAY.replace(hour=9),
            range_end=DAY.replace(hour=11),
        )
        next_day = await pricing_service.simulate_timeline(
            session,
            sub_location_id=venue["sub_location_id"],
            range_start=DAY + timedelta(days=1, hours=9),
            range_end=DAY + timedelta(days=1, hours=11),
        )
        with pytest.raises(ValueError, match="Event not found"):
            await pricing_service.simulate_timeline(
                session,
                sub_location_id=venue["sub_location_id"],
                range_start=DAY,
                range_end=DAY + timedelta(hours=1),
                event_id=uuid.uuid4(),
            )

    assert _prices(during) == [Decimal("40.00"), Decimal("40.00")]
    assert _prices(next_day) == [Decimal("10.00"), Decimal("10.00")]


async def test_toggle_keeps_one_default_enabled(
    venue: dict[str, uuid.UUID], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    window = {
        "sub_location_id": venue["sub_location_id"],
        "range_start": DAY,
        "range_end": DAY + timedelta(hours=4),
    }
    async with sessionmaker() as session:
        first = await pricing_service.toggle_layer(
            session, **window, layer_id="sublocation-default", enabled=False
        )
        second = await pricing_service.toggle_layer(
            session,
            **window,
            layer_id="customer-default",
            enabled_layer_ids=sorted(first.enabled_layer_ids),
        )
        with pytest.raises(ValueError, match="Unknown layer"):
            await pricing_service.toggle_layer(session, **window, layer_id="nope")

    assert first.accepted
    assert first.enabled_layer_ids == {"customer-default"}
    assert not second.accepted
    assert second.enabled_layer_ids == {"customer-default"}
    assert second.reason


async def test_timeline_rejects_unknown_sub_location_and_long_ranges(
    venue: dict[str, uuid.UUID], db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        with pytest.raises(ValueError, match="Sub-location not found"):
            await pricing_service.simulate_timeline(
                session,
                sub_location_id=uuid.uuid4(),
                range_start=DAY,
                range_end=DAY + timedelta(hours=2),
            )
        with pytest.raises(ValueError, match="at most"):
            await pricing_service.simulate_timeline(
                session,
                sub_location_id=venue["sub_location_id"],
                range_start=DAY,
                range_end=DAY + timedelta(days=40),
            )
