"""Test fixtures for the venue pricing backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from venue_pricing.core.config import get_settings
from venue_pricing.db.session import create_schema, dispose_engine, get_sessionmaker
from venue_pricing.main import app
from venue_pricing.models import Customer, Location, SubLocation


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    await create_schema(db_url, drop_first=True)
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def venue(reset_database: None, db_url: str) -> dict[str, object]:
    """Seed a customer, location and sub-location with default rates."""
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        customer = Customer(name="Acme Events", default_hourly_rate=Decimal("8.00"))
        session.add(customer)
        await session.flush()

        location = Location(
            customer_id=customer.id,
            name="Riverside Hall",
            city="Cedar Rapids",
            timezone="UTC",
        )
        session.add(location)
        await session.flush()

        sub_location = SubLocation(
            location_id=location.id,
            label="Main Floor",
            default_hourly_rate=Decimal("10.00"),
        )
        session.add(sub_location)
        await session.commit()

        return {
            "customer_id": customer.id,
            "location_id": location.id,
            "sub_location_id": sub_location.id,
        }


@pytest_asyncio.fixture()
async def app_context(venue: dict[str, object]) -> AsyncIterator[dict[str, object]]:
    """Yield an async client alongside the seeded venue."""
    context = dict(venue)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context
