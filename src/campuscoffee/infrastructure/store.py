"""Database — owner of the engine and the repositories built on it.

Constructed once at CLI startup from :class:`CoffeeSettings` and stored on
the click context.  Services never reach for it implicitly: callers build a
repository from it and pass that into the service constructor::

    db = Database(settings)
    service = PosService(db.pos_repository(), settings.pos)

Opening re-keys stored names when the configured case policy changed since
the last open, and fails with :class:`ConflictError` if that would merge two
names.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from campuscoffee.infrastructure.database.engine import init_database
from campuscoffee.infrastructure.repositories.pos import PosRepository

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from campuscoffee.config.settings import CoffeeSettings

logger = logging.getLogger(__name__)


class Database:
    """Connection handle for one campuscoffee database."""

    def __init__(self, settings: CoffeeSettings) -> None:
        self._settings = settings
        self._url = settings.database_url
        self._engine: Engine = init_database(self._url)
        try:
            self.pos_repository().apply_name_policy()
        except Exception:
            self._engine.dispose()
            raise
        logger.debug("Database ready at %s", self._engine.url)

    @property
    def url(self) -> str:
        """The resolved SQLAlchemy URL (relative SQLite paths anchored)."""
        return self._url

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine."""
        return self._engine

    @property
    def settings(self) -> CoffeeSettings:
        return self._settings

    def pos_repository(self) -> PosRepository:
        """A repository honoring the configured name case policy."""
        return PosRepository(
            self._engine,
            case_sensitive_names=self._settings.pos.case_sensitive_names,
        )

    def close(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()
