"""SQLAlchemy Core table definitions for the campuscoffee database.

``name_key`` holds the name under the configured case policy (the name
itself, or its casefold).  Its UNIQUE constraint is the storage-level
backstop for name uniqueness; the repository checks first so the usual
path yields a clean conflict instead of an IntegrityError.

``store_settings`` records the policy the stored keys were computed under,
so a database opened under a different policy can be re-keyed.
"""

from __future__ import annotations

from sqlalchemy import (
    Column,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

points_of_sale = Table(
    "points_of_sale",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("name_key", Text, nullable=False),
    Column("description", Text, nullable=False, default="", server_default=""),
    Column("type", Text, nullable=False),
    Column("campus", Text, nullable=False),
    Column("street", Text, nullable=False),
    Column("house_number", Text, nullable=False),
    Column("postal_code", Integer, nullable=False),
    Column("city", Text, nullable=False),
    Column("created_at", Text, nullable=False),  # ISO 8601, UTC
    Column("updated_at", Text, nullable=False),  # ISO 8601, UTC
    UniqueConstraint("name_key", name="uq_points_of_sale_name_key"),
    # AUTOINCREMENT keeps ids from being reused after rows are deleted
    sqlite_autoincrement=True,
)

Index("ix_points_of_sale_campus", points_of_sale.c.campus)
Index("ix_points_of_sale_type", points_of_sale.c.type)

store_settings = Table(
    "store_settings",
    metadata,
    Column("key", Text, primary_key=True),
    Column("value", Text, nullable=False),
)
