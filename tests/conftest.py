"""Shared pytest fixtures and test helpers for campuscoffee tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from campuscoffee.config.settings import CoffeeSettings
from campuscoffee.infrastructure.database.engine import init_database
from campuscoffee.infrastructure.repositories.pos import PosRepository
from campuscoffee.infrastructure.store import Database
from campuscoffee.services.admin import AdminService
from campuscoffee.services.pos import PosService
from campuscoffee.services.telemetry import disable_telemetry


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's CAMPUSCOFFEE_* environment out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("CAMPUSCOFFEE_"):
            monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def _reset_cli_state() -> Iterator[None]:
    """Undo process-wide state a CLI invocation leaves behind.

    ``-v`` enables telemetry for the rest of the thread, and
    ``configure_logging`` points the root handler at CliRunner's stderr.
    """
    yield
    disable_telemetry()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Iterator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(f"sqlite:///{tmp_path / 'test.db'}")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def settings(tmp_path: Path) -> CoffeeSettings:
    """Default settings rooted at a temp directory (database in tmp_path)."""
    return CoffeeSettings.from_cli(root=tmp_path)


@pytest.fixture
def database(settings: CoffeeSettings) -> Iterator[Database]:
    """Database handle on a temp SQLite file."""
    db = Database(settings)
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def repository(database: Database) -> PosRepository:
    return database.pos_repository()


@pytest.fixture
def pos_service(repository: PosRepository) -> PosService:
    return PosService(repository)


@pytest.fixture
def admin_service(repository: PosRepository) -> AdminService:
    return AdminService(repository)


@pytest.fixture
def _isolated_workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI creates an isolated database.

    Use via ``@pytest.mark.usefixtures("_isolated_workdir")`` on command test
    classes. Tests that need the path can also request ``tmp_path`` directly
    (the same directory pytest hands out).
    """
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers (used across test modules)
# ---------------------------------------------------------------------------


def make_draft(name: str = "Central Café", **overrides: Any) -> dict[str, Any]:
    """A valid draft mapping; keyword arguments replace individual fields."""
    draft: dict[str, Any] = {
        "name": name,
        "description": "",
        "type": "CAFE",
        "campus": "NORTH",
        "street": "Main",
        "house_number": "1",
        "postal_code": 12345,
        "city": "Town",
    }
    draft.update(overrides)
    return draft


def create_pos(service: PosService, name: str = "Central Café", **overrides: Any) -> dict[str, Any]:
    """Create a POS via PosService, asserting success."""
    result = service.create(make_draft(name, **overrides))
    assert result.ok, result.error
    return result.data
