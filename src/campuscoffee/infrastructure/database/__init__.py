"""Database engine, schema, and migrations via SQLAlchemy Core and Alembic."""

from campuscoffee.infrastructure.database.engine import create_db_engine, init_database
from campuscoffee.infrastructure.database.schema import metadata, points_of_sale

__all__ = [
    "create_db_engine",
    "init_database",
    "metadata",
    "points_of_sale",
]
