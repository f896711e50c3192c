"""Tests for StateDatabase — schema creation, versioning, lifecycle."""

from __future__ import annotations

import pytest

from modiva.core.storage.database import SCHEMA_VERSION, DatabaseError, StateDatabase


class TestInitialization:
    def test_in_memory_initialize(self):
        db = StateDatabase(":memory:")
        db.initialize()
        assert db.connection is not None
        db.close()

    def test_double_initialize_is_idempotent(self):
        db = StateDatabase(":memory:")
        db.initialize()
        conn1 = db.connection
        db.initialize()
        assert db.connection is conn1
        db.close()

    def test_connection_before_init_raises(self):
        db = StateDatabase(":memory:")
        with pytest.raises(DatabaseError, match="not initialized"):
            _ = db.connection

    def test_context_manager(self):
        with StateDatabase(":memory:") as db:
            assert db.connection is not None
        with pytest.raises(DatabaseError):
            _ = db.connection


class TestSchema:
    def test_schema_version_recorded(self):
        with StateDatabase(":memory:") as db:
            assert db.get_schema_version() == SCHEMA_VERSION

    def test_tables_created(self):
        with StateDatabase(":memory:") as db:
            cursor = db.connection.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            tables = {row[0] for row in cursor.fetchall()}
        assert {"kv_store", "schema_version", "action_audit"} <= tables

    def test_indexes_created(self):
        with StateDatabase(":memory:") as db:
            cursor = db.connection.execute("SELECT name FROM sqlite_master WHERE type='index'")
            indexes = {row[0] for row in cursor.fetchall()}
        assert {"idx_audit_recorded", "idx_audit_type"} <= indexes

    def test_reopening_file_does_not_duplicate_version_rows(self, tmp_path):
        path = str(tmp_path / "state.db")
        with StateDatabase(path):
            pass
        with StateDatabase(path) as db:
            rows = db.connection.execute("SELECT COUNT(*) FROM schema_version").fetchone()
            assert rows[0] == 1
            assert db.get_schema_version() == SCHEMA_VERSION


class TestFileDatabase:
    def test_creates_parent_directories(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "state.db"
        db = StateDatabase(str(db_path))
        db.initialize()
        assert db_path.exists()
        db.close()


class TestClose:
    def test_close_makes_connection_unavailable(self):
        db = StateDatabase(":memory:")
        db.initialize()
        db.close()
        with pytest.raises(DatabaseError, match="not initialized"):
            _ = db.connection

    def test_double_close_is_safe(self):
        db = StateDatabase(":memory:")
        db.initialize()
        db.close()
        db.close()
