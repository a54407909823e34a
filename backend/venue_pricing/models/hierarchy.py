"""Organizational hierarchy: customer, location, sub-location and event."""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from venue_pricing.db.base import Base
from venue_pricing.models.mixins import TimestampMixin


class Customer(TimestampMixin, Base):
    """Top of the hierarchy; owns locations."""

    __tablename__ = "customers"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    timezone: Mapped[str | None] = mapped_column(String(64))
    default_hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))

    locations: Mapped[list["Location"]] = relationship(
        "Location", back_populates="customer", cascade="all, delete-orphan"
    )


class Location(TimestampMixin, Base):
    """Physical venue under a customer."""

    __tablename__ = "locations"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str | None] = mapped_column(String(120))
    timezone: Mapped[str | None] = mapped_column(String(64))
    default_hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))

    customer: Mapped[Customer] = relationship("Customer", back_populates="locations")
    sublocations: Mapped[list["SubLocation"]] = relationship(
        "SubLocation", back_populates="location", cascade="all, delete-orphan"
    )


class SubLocation(TimestampMixin, Base):
    """Bookable space inside a location."""

    __tablename__ = "sublocations"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    location_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("locations.id", ondelete="CASCADE"), nullable=False
    )
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    timezone: Mapped[str | None] = mapped_column(String(64))
    default_hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))

    location: Mapped[Location] = relationship("Location", back_populates="sublocations")
    events: Mapped[list["Event"]] = relationship(
        "Event", back_populates="sub_location", cascade="all, delete-orphan"
    )

    def resolve_timezone(self, fallback: str) -> str:
        """Nearest configured timezone walking up the hierarchy."""
        return (
            self.timezone
            or self.location.timezone
            or self.location.customer.timezone
            or fallback
        )


class Event(TimestampMixin, Base):
    """Time-boxed happening at a sub-location; carries no default rate."""

    __tablename__ = "events"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    sub_location_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sublocations.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    end_date: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    sub_location: Mapped[SubLocation] = relationship(
        "SubLocation", back_populates="events"
    )
