"""
Tests for the SQLite task store.

Tests cover:
- Database creation and WAL configuration
- Migration bookkeeping and idempotency
- Row operations and their return values
"""

import sqlite3

import pytest

from task_api.database import MIGRATIONS, TaskDatabase


class TestTaskDatabaseInitialization:
    """Test database creation and schema migrations."""

    def test_creates_missing_database_file(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "tasks.db"
        db = TaskDatabase(str(db_path))
        try:
            assert db_path.exists()
        finally:
            db.close()

    def test_wal_mode_enabled(self, database):
        cursor = database._connection.cursor()
        cursor.execute("PRAGMA journal_mode")
        assert cursor.fetchone()[0].upper() == "WAL"
        cursor.execute("PRAGMA busy_timeout")
        assert cursor.fetchone()[0] == 5000

    def test_migrations_create_task_table(self, database):
        cursor = database._connection.cursor()
        cursor.execute("PRAGMA table_info(task)")
        columns = {row[1]: row for row in cursor.fetchall()}
        assert set(columns) == {"id", "task"}
        # notnull flag
        assert columns["task"][3] == 1

    def test_migrations_are_idempotent(self, db_path):
        db = TaskDatabase(db_path)
        try:
            assert db.run_migrations() == [version for version, _, _ in MIGRATIONS]
            assert db.run_migrations() == []
        finally:
            db.close()

        reopened = TaskDatabase(db_path)
        try:
            assert reopened.run_migrations() == []
        finally:
            reopened.close()

    def test_in_memory_database(self):
        with TaskDatabase(":memory:") as db:
            db.run_migrations()
            task_id = db.insert_task("in memory")
            assert db.fetch_task(task_id) == {"id": task_id, "task": "in memory"}
        assert db._connection is None


class TestTaskRows:
    """Test row-level store operations."""

    def test_insert_assigns_increasing_ids(self, database):
        first = database.insert_task("first")
        second = database.insert_task("second")
        assert second > first

    def test_fetch_all_in_insertion_order(self, database):
        database.insert_task("a")
        database.insert_task("b")
        database.insert_task("c")
        assert [row["task"] for row in database.fetch_all_tasks()] == ["a", "b", "c"]

    def test_fetch_missing_task(self, database):
        assert database.fetch_task(42) is None

    def test_update_reports_rowcount(self, database):
        task_id = database.insert_task("old")
        assert database.update_task(task_id, "new") == 1
        assert database.fetch_task(task_id)["task"] == "new"
        assert database.update_task(task_id + 100, "nothing") == 0

    def test_delete_reports_rowcount(self, database):
        task_id = database.insert_task("doomed")
        assert database.delete_task(task_id) == 1
        assert database.fetch_task(task_id) is None
        assert database.delete_task(task_id) == 0

    def test_ids_not_reused_after_delete(self, database):
        first = database.insert_task("one")
        database.delete_task(first)
        assert database.insert_task("two") != first

    def test_null_task_rejected_by_schema(self, database):
        with pytest.raises(sqlite3.IntegrityError):
            database.insert_task(None)

    def test_rows_persist_across_connections(self, db_path):
        with TaskDatabase(db_path) as db:
            db.run_migrations()
            task_id = db.insert_task("durable")

        with TaskDatabase(db_path) as db:
            assert db.fetch_task(task_id) == {"id": task_id, "task": "durable"}
