"""Tests for PosRepository — SQL persistence of POS rows."""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from sqlalchemy import text
from sqlalchemy.engine import Engine

from campuscoffee.domain.errors import (
    ConflictError,
    DuplicateNameError,
    NotFoundError,
    StorageError,
)
from campuscoffee.domain.types import CampusType, PosType
from campuscoffee.infrastructure.repositories.pos import PosRepository
from tests.conftest import make_draft

T0 = datetime(2026, 1, 1, 8, 0, tzinfo=UTC)


def _entity(name: str, **overrides: Any) -> dict[str, Any]:
    data = {**make_draft(name), "created_at": T0, "updated_at": T0}
    data.update(overrides)
    return data


@pytest.fixture
def repo(db_engine: Engine) -> PosRepository:
    return PosRepository(db_engine)


# ---------------------------------------------------------------------------
# insert()
# ---------------------------------------------------------------------------


class TestInsert:
    def test_assigns_id(self, repo: PosRepository) -> None:
        pos = repo.insert(_entity("Central Café"))
        assert pos.id >= 1
        assert pos.name == "Central Café"
        assert pos.type is PosType.CAFE
        assert pos.campus is CampusType.NORTH

    def test_timestamps_round_trip(self, repo: PosRepository) -> None:
        pos = repo.insert(_entity("A"))
        assert pos.created_at == T0
        assert pos.updated_at == T0

    def test_ids_increase(self, repo: PosRepository) -> None:
        a = repo.insert(_entity("A"))
        b = repo.insert(_entity("B"))
        assert b.id > a.id

    def test_duplicate_name_rejected(self, repo: PosRepository) -> None:
        repo.insert(_entity("A"))
        with pytest.raises(DuplicateNameError) as exc_info:
            repo.insert(_entity("A", city="Elsewhere"))
        assert exc_info.value.name == "A"
        assert repo.count() == 1

    def test_names_differing_in_case_are_distinct_by_default(self, repo: PosRepository) -> None:
        repo.insert(_entity("Lib Kiosk"))
        repo.insert(_entity("lib kiosk"))
        assert repo.count() == 2

    def test_case_insensitive_policy(self, db_engine: Engine) -> None:
        repo = PosRepository(db_engine, case_sensitive_names=False)
        repo.insert(_entity("Lib Kiosk"))
        with pytest.raises(DuplicateNameError):
            repo.insert(_entity("LIB KIOSK"))

    def test_concurrent_inserts_one_winner(self, repo: PosRepository) -> None:
        outcomes: list[str] = []
        lock = threading.Lock()

        def worker() -> None:
            try:
                repo.insert(_entity("Race"))
                outcome = "ok"
            except DuplicateNameError:
                outcome = "duplicate"
            except StorageError:
                # SQLite may report "database is locked" under contention
                outcome = "storage"
            with lock:
                outcomes.append(outcome)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("ok") == 1
        assert repo.count() == 1


# ---------------------------------------------------------------------------
# update()
# ---------------------------------------------------------------------------


class TestUpdate:
    def test_replaces_fields(self, repo: PosRepository) -> None:
        pos = repo.insert(_entity("A"))
        later = T0 + timedelta(hours=1)
        updated = repo.update(
            pos.id, {**make_draft("A", description="Now open till 9pm"), "updated_at": later}
        )
        assert updated.id == pos.id
        assert updated.description == "Now open till 9pm"
        assert updated.created_at == T0
        assert updated.updated_at == later

    def test_keep_own_name(self, repo: PosRepository) -> None:
        pos = repo.insert(_entity("A"))
        assert repo.update(pos.id, make_draft("A", city="City")).city == "City"

    def test_rename_to_taken_name(self, repo: PosRepository) -> None:
        repo.insert(_entity("A"))
        b = repo.insert(_entity("B"))
        with pytest.raises(DuplicateNameError):
            repo.update(b.id, make_draft("A"))
        assert repo.find_by_id(b.id).name == "B"

    def test_rename_frees_old_name(self, repo: PosRepository) -> None:
        a = repo.insert(_entity("A"))
        repo.update(a.id, make_draft("A2"))
        repo.insert(_entity("A"))
        assert [p.name for p in repo.find_all()] == ["A2", "A"]

    def test_unknown_id(self, repo: PosRepository) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            repo.update(999, make_draft("A"))
        assert exc_info.value.detail == {"id": 999}


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


class TestReads:
    def test_find_all_empty(self, repo: PosRepository) -> None:
        assert repo.find_all() == []

    def test_find_all_creation_order(self, repo: PosRepository) -> None:
        for name in ("C", "A", "B"):
            repo.insert(_entity(name))
        assert [p.name for p in repo.find_all()] == ["C", "A", "B"]

    def test_order_stable_under_update(self, repo: PosRepository) -> None:
        a = repo.insert(_entity("A"))
        repo.insert(_entity("B"))
        repo.update(a.id, {**make_draft("A"), "updated_at": T0 + timedelta(days=1)})
        assert [p.name for p in repo.find_all()] == ["A", "B"]

    def test_find_by_name(self, repo: PosRepository) -> None:
        pos = repo.insert(_entity("Lib Kiosk"))
        assert repo.find_by_name("Lib Kiosk").id == pos.id

    def test_find_by_name_missing(self, repo: PosRepository) -> None:
        with pytest.raises(NotFoundError):
            repo.find_by_name("Nowhere")

    def test_find_by_name_respects_case_policy(self, db_engine: Engine) -> None:
        exact = PosRepository(db_engine)
        loose = PosRepository(db_engine, case_sensitive_names=False)
        loose.insert(_entity("Lib Kiosk"))
        assert loose.find_by_name("LIB KIOSK").name == "Lib Kiosk"
        with pytest.raises(NotFoundError):
            exact.find_by_name("LIB KIOSK")

    def test_find_by_id_missing(self, repo: PosRepository) -> None:
        with pytest.raises(NotFoundError):
            repo.find_by_id(1)


# ---------------------------------------------------------------------------
# clear() / failures
# ---------------------------------------------------------------------------


class TestClear:
    def test_clear_returns_removed(self, repo: PosRepository) -> None:
        repo.insert(_entity("A"))
        repo.insert(_entity("B"))
        assert repo.clear() == 2
        assert repo.find_all() == []

    def test_clear_idempotent(self, repo: PosRepository) -> None:
        repo.insert(_entity("A"))
        repo.clear()
        assert repo.clear() == 0

    def test_names_free_after_clear(self, repo: PosRepository) -> None:
        repo.insert(_entity("A"))
        repo.clear()
        assert repo.insert(_entity("A")).name == "A"

    def test_ids_not_reused_after_clear(self, repo: PosRepository) -> None:
        first = repo.insert(_entity("A"))
        repo.clear()
        assert repo.insert(_entity("A")).id > first.id


class TestStorageFailure:
    def test_missing_table_is_storage_error(self, db_engine: Engine) -> None:
        with db_engine.begin() as conn:
            conn.execute(text("DROP TABLE points_of_sale"))
        repo = PosRepository(db_engine)
        with pytest.raises(StorageError) as exc_info:
            repo.find_all()
        assert exc_info.value.code == "STORAGE_ERROR"
        assert exc_info.value.__cause__ is not None


# ---------------------------------------------------------------------------
# apply_name_policy()
# ---------------------------------------------------------------------------


class TestNamePolicy:
    def test_first_apply_records_policy(self, db_engine: Engine) -> None:
        repo = PosRepository(db_engine)
        assert repo.apply_name_policy() == 0
        assert repo.apply_name_policy() == 0

    def test_flip_to_case_sensitive(self, db_engine: Engine) -> None:
        loose = PosRepository(db_engine, case_sensitive_names=False)
        loose.apply_name_policy()
        loose.insert(_entity("Central Café"))

        strict = PosRepository(db_engine, case_sensitive_names=True)
        assert strict.apply_name_policy() == 1
        assert strict.find_by_name("Central Café").name == "Central Café"
        with pytest.raises(NotFoundError):
            strict.find_by_name("central café")
        assert strict.insert(_entity("central café")).name == "central café"

    def test_flip_to_case_insensitive(self, db_engine: Engine) -> None:
        strict = PosRepository(db_engine, case_sensitive_names=True)
        strict.apply_name_policy()
        strict.insert(_entity("Lib Kiosk"))

        loose = PosRepository(db_engine, case_sensitive_names=False)
        assert loose.apply_name_policy() == 1
        assert loose.find_by_name("LIB KIOSK").name == "Lib Kiosk"
        with pytest.raises(DuplicateNameError):
            loose.insert(_entity("lib kiosk"))

    def test_colliding_names_block_flip(self, db_engine: Engine) -> None:
        strict = PosRepository(db_engine, case_sensitive_names=True)
        strict.apply_name_policy()
        strict.insert(_entity("Lib Kiosk"))
        strict.insert(_entity("LIB KIOSK"))

        loose = PosRepository(db_engine, case_sensitive_names=False)
        with pytest.raises(ConflictError) as exc_info:
            loose.apply_name_policy()
        assert exc_info.value.code == "CONFLICT"
        assert sorted(exc_info.value.detail["names"]) == ["LIB KIOSK", "Lib Kiosk"]
        # Nothing changed: the strict policy still resolves both names.
        assert strict.apply_name_policy() == 0
        assert strict.find_by_name("LIB KIOSK").name == "LIB KIOSK"
        assert strict.find_by_name("Lib Kiosk").name == "Lib Kiosk"

    def test_unrecorded_policy_rekeys_existing_rows(self, db_engine: Engine) -> None:
        PosRepository(db_engine, case_sensitive_names=False).insert(_entity("Central Café"))
        strict = PosRepository(db_engine, case_sensitive_names=True)
        assert strict.apply_name_policy() == 1
        assert strict.find_by_name("Central Café").id >= 1
