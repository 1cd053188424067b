"""Create sync cursor, canonical entity and property tables.

Revision ID: 0001_initial
Revises:
Create Date: 2025-12-03 00:00:00
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "canonical_entity",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("name_key", sa.String(), nullable=False),
        sa.Column("contact_name", sa.String(), nullable=True),
        sa.Column("contact_email", sa.String(), nullable=True),
        sa.Column("phone_number", sa.String(), nullable=True),
        sa.Column("jurisdictions", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_canonical_entity"),
        sa.UniqueConstraint("name_key", name="uq_canonical_entity_name_key"),
    )
    op.create_table(
        "sync_cursor",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("source_id", sa.String(), nullable=False),
        sa.Column("last_synced_date", sa.Date(), nullable=True),
        sa.Column("total_records_synced", sa.Integer(), nullable=False),
        sa.Column("last_sync_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_sync_cursor"),
        sa.UniqueConstraint("source_id", name="uq_sync_cursor_source_id"),
    )
    op.create_table(
        "property",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("city", sa.String(), nullable=False),
        sa.Column("state", sa.String(length=2), nullable=False),
        sa.Column("zip_code", sa.String(length=10), nullable=True),
        sa.Column("county", sa.String(), nullable=True),
        sa.Column("address_key", sa.String(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("property_type", sa.String(), nullable=True),
        sa.Column("bedrooms", sa.Integer(), nullable=True),
        sa.Column("bathrooms", sa.Float(), nullable=True),
        sa.Column("square_feet", sa.Integer(), nullable=True),
        sa.Column("year_built", sa.Integer(), nullable=True),
        sa.Column("sale_price", sa.Float(), nullable=True),
        sa.Column("sale_date", sa.Date(), nullable=True),
        sa.Column("recording_date", sa.Date(), nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "on-market",
                "in-renovation",
                "sold",
                name="propertystatus",
                native_enum=False,
                length=32,
            ),
            nullable=False,
        ),
        sa.Column("entity_id", sa.Uuid(), nullable=True),
        sa.Column("provider_property_id", sa.String(), nullable=True),
        sa.Column("provider_record_id", sa.String(), nullable=True),
        sa.Column("source_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["entity_id"],
            ["canonical_entity.id"],
            name="fk_property_entity_id_canonical_entity",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_property"),
        sa.UniqueConstraint("provider_property_id", name="uq_property_provider_property_id"),
        sa.UniqueConstraint("provider_record_id", name="uq_property_provider_record_id"),
    )
    op.create_index("ix_property_address_key", "property", ["address_key"])
    op.create_index("ix_property_entity_id", "property", ["entity_id"])


def downgrade() -> None:
    op.drop_index("ix_property_entity_id", table_name="property")
    op.drop_index("ix_property_address_key", table_name="property")
    op.drop_table("property")
    op.drop_table("sync_cursor")
    op.drop_table("canonical_entity")
