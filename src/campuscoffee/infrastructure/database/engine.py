"""Database engine setup.

Any SQLAlchemy URL works; SQLite is the default.  For SQLite file
databases the engine enables WAL mode (concurrent readers alongside one
writer) and foreign keys on every new connection.  In-memory SQLite uses a
single shared connection so every session sees the same database.

SQLAlchemy Core (not ORM) is used: the repository issues explicit
statements and owns its transaction boundaries.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from campuscoffee.infrastructure.database.schema import metadata


def _is_memory(database: str | None) -> bool:
    return not database or database == ":memory:"


def create_db_engine(url: str) -> Engine:
    """Create an engine for *url*, applying SQLite pragmas where relevant."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_engine(url, pool_pre_ping=True)

    memory = _is_memory(parsed.database)
    kwargs: dict[str, Any] = {}
    if memory:
        kwargs = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    engine = create_engine(url, **kwargs)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        if not memory:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def init_database(url: str) -> Engine:
    """Create the engine and all tables from :data:`schema.metadata`.

    For SQLite files the parent directory is created first.
    Idempotent — safe to call on an existing database.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and not _is_memory(parsed.database):
        assert parsed.database is not None
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_db_engine(url)
    metadata.create_all(engine)
    return engine
