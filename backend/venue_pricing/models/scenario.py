"""Saved simulation scenarios."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from venue_pricing.db.base import Base
from venue_pricing.models.mixins import JSONB_TYPE, TimestampMixin


class PricingScenario(TimestampMixin, Base):
    """Named snapshot of simulator state bound to one sub-location."""

    __tablename__ = "pricing_scenarios"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    sub_location_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sublocations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1024))
    config: Mapped[dict[str, Any]] = mapped_column(JSONB_TYPE, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSONB_TYPE, default=list, nullable=False)
