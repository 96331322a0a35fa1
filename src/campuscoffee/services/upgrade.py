"""UpgradeService — database migration with Alembic.

Pipeline: CHECK → BACKUP → MIGRATE → REPORT

Databases created by ``init_database`` already hold the current tables
but carry no Alembic version; those are stamped at head instead of
re-running the baseline.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from alembic import command
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import inspect
from sqlalchemy.engine import make_url

from campuscoffee.infrastructure.database.migrations import build_config
from campuscoffee.infrastructure.database.schema import points_of_sale
from campuscoffee.services._helpers import now_compact
from campuscoffee.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from campuscoffee.infrastructure.store import Database

log = structlog.get_logger(__name__)


class UpgradeService:
    """Handles database schema migrations via Alembic."""

    def __init__(self, database: Database) -> None:
        self._database = database

    def _tables_exist(self) -> bool:
        """Check whether the POS table predates Alembic version tracking."""
        return points_of_sale.name in inspect(self._database.engine).get_table_names()

    def check_pending(self) -> ServiceResult:
        """List pending migrations without applying."""
        op = "upgrade"

        try:
            cfg = build_config(self._database.url)
            script = ScriptDirectory.from_config(cfg)
            head = script.get_current_head()

            with self._database.engine.connect() as conn:
                current = MigrationContext.configure(conn).get_current_revision()

            pending: list[dict[str, Any]] = []
            if current != head and head is not None:
                # Walk down from head until the applied revision (or base).
                rev = script.get_revision(head)
                while rev is not None and rev.revision != current:
                    pending.append({"revision": rev.revision, "description": rev.doc or ""})
                    down = rev.down_revision
                    if down is None:
                        break
                    rev = script.get_revision(str(down))
        except Exception as exc:
            log.error("upgrade.check_failed", error=str(exc), exc_info=exc)
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="CHECK_FAILED",
                    message=f"Failed to check migrations: {exc}",
                ),
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "pending_count": len(pending),
                "pending": pending,
                "current": current,
                "head": head,
            },
        )

    def apply(self) -> ServiceResult:
        """CHECK → BACKUP → MIGRATE → REPORT pipeline."""
        op = "upgrade"

        check = self.check_pending()
        if not check.ok:
            return check

        pending_count = check.data["pending_count"]
        if pending_count == 0:
            return ServiceResult(
                ok=True,
                op=op,
                data={
                    "applied_count": 0,
                    "current": check.data["head"],
                    "message": "Database is already up to date",
                },
            )

        try:
            backup_path = self._backup()
        except OSError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="BACKUP_FAILED", message=f"Backup failed: {exc}"),
            )

        stamped = check.data["current"] is None and self._tables_exist()
        try:
            cfg = build_config(self._database.url)
            if stamped:
                command.stamp(cfg, "head")
            else:
                command.upgrade(cfg, "head")
        except Exception as exc:
            log.error("upgrade.failed", error=str(exc), exc_info=exc)
            detail = {"backup_path": str(backup_path)} if backup_path else {}
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="MIGRATION_FAILED",
                    message=f"Migration failed: {exc}",
                    detail=detail,
                ),
            )

        log.info("upgrade.applied", head=check.data["head"], stamped=stamped)
        data: dict[str, Any] = {
            "applied_count": 0 if stamped else pending_count,
            "stamped": stamped,
            "current": check.data["head"],
        }
        if backup_path is not None:
            data["backup_path"] = str(backup_path)
        return ServiceResult(ok=True, op=op, data=data)

    def _backup(self) -> Path | None:
        """Copy a SQLite database file aside. Other backends are not backed up."""
        url = make_url(self._database.url)
        if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
            return None
        source = Path(url.database)
        if not source.exists():
            return None
        target = source.with_name(f"{source.name}.{now_compact()}.bak")
        shutil.copy2(source, target)
        return target
