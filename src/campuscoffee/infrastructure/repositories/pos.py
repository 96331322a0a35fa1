"""PosRepository — durable storage of PointOfSale rows.

Each public method runs in its own ``engine.begin()`` transaction.  Name
collisions are checked inside the same transaction as the write, and the
UNIQUE constraint on ``name_key`` catches whatever slips past a concurrent
writer; both surface as :class:`DuplicateNameError`.  Any other driver
failure is wrapped in :class:`StorageError`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from campuscoffee.domain.errors import (
    ConflictError,
    DuplicateNameError,
    NotFoundError,
    StorageError,
)
from campuscoffee.domain.pos import PointOfSale, name_key
from campuscoffee.infrastructure.database.schema import points_of_sale, store_settings

if TYPE_CHECKING:
    from sqlalchemy import Connection, RowMapping
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

_POLICY_KEY = "case_sensitive_names"

_WRITABLE = (
    "name",
    "description",
    "type",
    "campus",
    "street",
    "house_number",
    "postal_code",
    "city",
    "created_at",
    "updated_at",
)


class PosRepository:
    """Encapsulates SQL for POS persistence, ordered by creation sequence."""

    def __init__(self, engine: Engine, *, case_sensitive_names: bool = True) -> None:
        self._engine = engine
        self._case_sensitive = case_sensitive_names

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, entity: dict[str, Any]) -> PointOfSale:
        """Append a new row built from *entity* (id is assigned by the store).

        Raises:
            DuplicateNameError: a live record already holds the name.
        """
        values = self._row_values(entity)
        with self._transaction(name=values["name"]) as conn:
            if self._id_for_key(conn, values["name_key"]) is not None:
                raise DuplicateNameError(values["name"])
            new_id = conn.execute(insert(points_of_sale).values(**values)).inserted_primary_key[0]
            return self._fetch(conn, int(new_id))

    def update(self, pos_id: int, fields: dict[str, Any]) -> PointOfSale:
        """Replace the stored fields of record *pos_id*.

        Raises:
            NotFoundError: no record with *pos_id*.
            DuplicateNameError: the new name belongs to a different record.
        """
        values = self._row_values(fields)
        with self._transaction(name=values.get("name")) as conn:
            exists = conn.execute(
                select(points_of_sale.c.id).where(points_of_sale.c.id == pos_id)
            ).first()
            if exists is None:
                raise NotFoundError.for_id(pos_id)
            if "name_key" in values:
                holder = self._id_for_key(conn, values["name_key"])
                if holder is not None and holder != pos_id:
                    raise DuplicateNameError(values["name"])
            conn.execute(
                update(points_of_sale).where(points_of_sale.c.id == pos_id).values(**values)
            )
            return self._fetch(conn, pos_id)

    def clear(self) -> int:
        """Delete every row. Returns the number removed; idempotent."""
        with self._transaction() as conn:
            removed = conn.execute(delete(points_of_sale)).rowcount
        return max(int(removed or 0), 0)

    def apply_name_policy(self) -> int:
        """Bring stored name keys in line with the configured case policy.

        The policy the keys were computed under is recorded in
        ``store_settings``.  When it differs from (or predates) the current
        one, every ``name_key`` is recomputed in a single transaction.
        Returns the number of rows re-keyed.

        Raises:
            ConflictError: two stored names collide under the new policy;
                nothing is changed.
        """
        wanted = "true" if self._case_sensitive else "false"
        with self._transaction() as conn:
            recorded = conn.execute(
                select(store_settings.c.value).where(store_settings.c.key == _POLICY_KEY)
            ).scalar_one_or_none()
            if recorded == wanted:
                return 0

            rows = conn.execute(
                select(points_of_sale.c.id, points_of_sale.c.name, points_of_sale.c.name_key)
            ).all()
            owners: dict[str, str] = {}
            changed: list[tuple[int, str]] = []
            for row in rows:
                key = name_key(row.name, case_sensitive=self._case_sensitive)
                if key in owners:
                    raise ConflictError(
                        f"Names {owners[key]!r} and {row.name!r} collide under "
                        f"case-insensitive matching",
                        detail={"names": [owners[key], row.name]},
                    )
                owners[key] = row.name
                if key != row.name_key:
                    changed.append((int(row.id), key))

            for pos_id, key in changed:
                conn.execute(
                    update(points_of_sale)
                    .where(points_of_sale.c.id == pos_id)
                    .values(name_key=key)
                )
            if recorded is None:
                conn.execute(insert(store_settings).values(key=_POLICY_KEY, value=wanted))
            else:
                conn.execute(
                    update(store_settings)
                    .where(store_settings.c.key == _POLICY_KEY)
                    .values(value=wanted)
                )
        if changed:
            logger.info("Re-keyed %d POS name(s) for case_sensitive_names=%s", len(changed), wanted)
        return len(changed)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_all(self) -> list[PointOfSale]:
        """All live records in creation order."""
        stmt = select(points_of_sale).order_by(points_of_sale.c.id.asc())
        with self._transaction() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [_to_entity(row) for row in rows]

    def find_by_name(self, name: str) -> PointOfSale:
        """Look up a record by name under the configured case policy."""
        key = name_key(name, case_sensitive=self._case_sensitive)
        stmt = select(points_of_sale).where(points_of_sale.c.name_key == key)
        with self._transaction() as conn:
            row = conn.execute(stmt).mappings().first()
        if row is None:
            raise NotFoundError.for_name(name)
        return _to_entity(row)

    def find_by_id(self, pos_id: int) -> PointOfSale:
        with self._transaction() as conn:
            return self._fetch(conn, pos_id)

    def count(self) -> int:
        with self._transaction() as conn:
            return int(conn.execute(select(func.count(points_of_sale.c.id))).scalar_one() or 0)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self, *, name: str | None = None) -> Iterator[Connection]:
        """``engine.begin()`` with driver errors mapped onto the domain taxonomy."""
        try:
            with self._engine.begin() as conn:
                yield conn
        except IntegrityError as exc:
            # Lost a race on the UNIQUE(name_key) constraint.
            if name is not None and "name_key" in str(exc.orig):
                raise DuplicateNameError(name) from exc
            raise StorageError(f"Constraint violation: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            raise StorageError(f"Storage failure: {exc}") from exc

    def _row_values(self, fields: dict[str, Any]) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for key in _WRITABLE:
            if key not in fields:
                continue
            value = fields[key]
            if isinstance(value, datetime):
                value = value.isoformat()
            elif key in ("type", "campus"):
                value = str(value)
            values[key] = value
        if "name" in values:
            values["name_key"] = name_key(values["name"], case_sensitive=self._case_sensitive)
        return values

    def _id_for_key(self, conn: Connection, key: str) -> int | None:
        row = conn.execute(
            select(points_of_sale.c.id).where(points_of_sale.c.name_key == key)
        ).first()
        return int(row.id) if row is not None else None

    def _fetch(self, conn: Connection, pos_id: int) -> PointOfSale:
        row = conn.execute(
            select(points_of_sale).where(points_of_sale.c.id == pos_id)
        ).mappings().first()
        if row is None:
            raise NotFoundError.for_id(pos_id)
        return _to_entity(row)


def _to_entity(row: RowMapping) -> PointOfSale:
    data = {key: row[key] for key in ("id", *_WRITABLE)}
    data["created_at"] = datetime.fromisoformat(row["created_at"])
    data["updated_at"] = datetime.fromisoformat(row["updated_at"])
    return PointOfSale.model_validate(data)
