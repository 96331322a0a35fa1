"""Baseline schema — the points_of_sale and store_settings tables.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-19

Databases created by ``init_database`` already contain this table; the
upgrade service stamps them at head instead of re-running this revision.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    op.create_table(
        "points_of_sale",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("name_key", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("type", sa.Text, nullable=False),
        sa.Column("campus", sa.Text, nullable=False),
        sa.Column("street", sa.Text, nullable=False),
        sa.Column("house_number", sa.Text, nullable=False),
        sa.Column("postal_code", sa.Integer, nullable=False),
        sa.Column("city", sa.Text, nullable=False),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("updated_at", sa.Text, nullable=False),
        sa.UniqueConstraint("name_key", name="uq_points_of_sale_name_key"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_points_of_sale_campus", "points_of_sale", ["campus"])
    op.create_index("ix_points_of_sale_type", "points_of_sale", ["type"])
    op.create_table(
        "store_settings",
        sa.Column("key", sa.Text, primary_key=True),
        sa.Column("value", sa.Text, nullable=False),
    )


def downgrade() -> None:
    op.drop_table("store_settings")
    op.drop_index("ix_points_of_sale_type", table_name="points_of_sale")
    op.drop_index("ix_points_of_sale_campus", table_name="points_of_sale")
    op.drop_table("points_of_sale")
