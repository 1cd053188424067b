"""Track the corporate seller of each property's latest transaction.

Revision ID: 0002_seller_entity
Revises: 0001_initial
Create Date: 2026-10-18 00:00:00
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0002_seller_entity"
down_revision: str | Sequence[str] | None = "0001_initial"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    with op.batch_alter_table("property") as batch_op:
        batch_op.add_column(sa.Column("seller_entity_id", sa.Uuid(), nullable=True))
        batch_op.create_foreign_key(
            "fk_property_seller_entity_id_canonical_entity",
            "canonical_entity",
            ["seller_entity_id"],
            ["id"],
            ondelete="SET NULL",
        )
        batch_op.create_index("ix_property_seller_entity_id", ["seller_entity_id"])


def downgrade() -> None:
    with op.batch_alter_table("property") as batch_op:
        batch_op.drop_index("ix_property_seller_entity_id")
        batch_op.drop_constraint(
            "fk_property_seller_entity_id_canonical_entity", type_="foreignkey"
        )
        batch_op.drop_column("seller_entity_id")
