"""Hierarchy, pricing rules, surge configs and scenarios.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

JSONB_TYPE = postgresql.JSONB().with_variant(sa.JSON(), "sqlite")

HIERARCHY_LEVEL = sa.Enum(
    "CUSTOMER", "LOCATION", "SUBLOCATION", "EVENT", name="hierarchylevel"
)
RULE_KIND = sa.Enum("TIMING_BASED", "DURATION_BASED", name="rulekind")
CONFLICT_RESOLUTION = sa.Enum(
    "PRIORITY", "HIGHEST_PRICE", "LOWEST_PRICE", name="conflictresolution"
)
APPROVAL_STATUS = sa.Enum(
    "DRAFT",
    "PENDING_APPROVAL",
    "APPROVED",
    "REJECTED",
    "ARCHIVED",
    name="approvalstatus",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "customers",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("timezone", sa.String(length=64)),
        sa.Column("default_hourly_rate", sa.Numeric(12, 2)),
        *_timestamps(),
    )
    op.create_table(
        "locations",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "customer_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("customers.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("city", sa.String(length=120)),
        sa.Column("timezone", sa.String(length=64)),
        sa.Column("default_hourly_rate", sa.Numeric(12, 2)),
        *_timestamps(),
    )
    op.create_table(
        "sublocations",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "location_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("locations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("label", sa.String(length=255), nullable=False),
        sa.Column("timezone", sa.String(length=64)),
        sa.Column("default_hourly_rate", sa.Numeric(12, 2)),
        *_timestamps(),
    )
    op.create_table(
        "events",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "sub_location_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("sublocations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "surge_configs",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=1024)),
        sa.Column("applies_to_level", HIERARCHY_LEVEL, nullable=False),
        sa.Column("entity_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("effective_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("effective_to", sa.DateTime(timezone=True)),
        sa.Column("current_demand", sa.Float(), nullable=False),
        sa.Column("current_supply", sa.Float(), nullable=False),
        sa.Column("historical_avg_pressure", sa.Float(), nullable=False),
        sa.Column("alpha", sa.Float(), nullable=False),
        sa.Column("min_multiplier", sa.Float(), nullable=False),
        sa.Column("max_multiplier", sa.Float(), nullable=False),
        sa.Column("surge_duration_hours", sa.Integer(), nullable=False),
        sa.Column("time_windows", JSONB_TYPE, nullable=False),
        sa.Column("materialized_rule_id", sa.Uuid(as_uuid=True)),
        sa.Column("last_materialized_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index(
        "ix_surge_configs_level_entity",
        "surge_configs",
        ["applies_to_level", "entity_id"],
    )

    op.create_table(
        "pricing_rules",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=1024)),
        sa.Column("applies_to_level", HIERARCHY_LEVEL, nullable=False),
        sa.Column("entity_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("kind", RULE_KIND, nullable=False),
        sa.Column("conflict_resolution", CONFLICT_RESOLUTION, nullable=False),
        sa.Column("effective_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("effective_to", sa.DateTime(timezone=True)),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("approval_status", APPROVAL_STATUS, nullable=False),
        sa.Column("time_windows", JSONB_TYPE, nullable=False),
        sa.Column(
            "surge_config_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("surge_configs.id", ondelete="SET NULL"),
        ),
        sa.Column("surge_multiplier_snapshot", sa.Float()),
        sa.Column("demand_supply_snapshot", JSONB_TYPE),
        *_timestamps(),
    )
    op.create_index(
        "ix_pricing_rules_level_entity",
        "pricing_rules",
        ["applies_to_level", "entity_id"],
    )

    op.create_table(
        "pricing_scenarios",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "sub_location_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("sublocations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=1024)),
        sa.Column("config", JSONB_TYPE, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("tags", JSONB_TYPE, nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_pricing_scenarios_sub_location_id",
        "pricing_scenarios",
        ["sub_location_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_pricing_scenarios_sub_location_id", table_name="pricing_scenarios")
    op.drop_table("pricing_scenarios")
    op.drop_index("ix_pricing_rules_level_entity", table_name="pricing_rules")
    op.drop_table("pricing_rules")
    op.drop_index("ix_surge_configs_level_entity", table_name="surge_configs")
    op.drop_table("surge_configs")
    op.drop_table("events")
    op.drop_table("sublocations")
    op.drop_table("locations")
    op.drop_table("customers")

    bind = op.get_bind()
    for enum_type in (APPROVAL_STATUS, CONFLICT_RESOLUTION, RULE_KIND, HIERARCHY_LEVEL):
        enum_type.drop(bind, checkfirst=True)
