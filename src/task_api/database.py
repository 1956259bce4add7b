"""
Task Store backed by SQLite

Provides the persistent `task` table with WAL mode for concurrent access,
versioned schema migrations applied at startup, and parameterized row
operations. Errors from sqlite3 are propagated unchanged; translating them
into API errors is the repository's job.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .config import MEMORY_DATABASE

logger = logging.getLogger(__name__)

# Ordered (version, description, statements). Applied versions are recorded
# in _migrations; never edit an entry once released, append a new one.
MIGRATIONS: List[Tuple[int, str, Tuple[str, ...]]] = [
    (
        1,
        "create task table",
        (
            """
            CREATE TABLE IF NOT EXISTS task (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                task TEXT NOT NULL
            )
            """,
        ),
    ),
]


class TaskDatabase:
    """
    SQLite store holding Task rows.

    Features:
    - WAL mode for concurrent read/write access
    - Single shared connection guarded by a re-entrant lock, so it can be
      used from the worker threads that serve async requests
    - Idempotent schema migrations
    """

    def __init__(self, db_path: str):
        """
        Open (creating if missing) the SQLite database at ``db_path``.

        Args:
            db_path: Path to SQLite database file, or ':memory:'
        """
        self.db_path = db_path
        self._connection_lock = threading.RLock()
        self._connection: Optional[sqlite3.Connection] = None

        self._create_database_if_missing()
        self._initialize_database()

    def _create_database_if_missing(self) -> None:
        if self.db_path == MEMORY_DATABASE:
            logger.debug("Using in-memory database")
            return

        path = Path(self.db_path)
        if path.exists():
            logger.debug(f"Database already exists: {path}")
            return

        logger.info(f"Creating database {path}")
        path.parent.mkdir(parents=True, exist_ok=True)

    def _initialize_database(self) -> None:
        try:
            self._connection = sqlite3.connect(
                self.db_path,
                isolation_level=None,  # Autocommit mode
                check_same_thread=False  # Shared with worker threads
            )
            cursor = self._connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA busy_timeout=5000")
        except sqlite3.Error as e:
            raise RuntimeError(f"Failed to initialize database at {self.db_path}: {e}")

    @contextmanager
    def _transaction(self):
        """Context manager for explicit transaction control."""
        cursor = self._connection.cursor()
        try:
            cursor.execute("BEGIN")
            yield cursor
            cursor.execute("COMMIT")
        except Exception:
            cursor.execute("ROLLBACK")
            raise

    def run_migrations(self) -> List[int]:
        """
        Apply every migration not yet recorded in the _migrations table.

        Each migration runs in its own transaction together with its
        bookkeeping row, so a failed migration leaves no trace.

        Returns:
            Versions applied by this call (empty when already up to date)
        """
        applied_now = []
        with self._connection_lock:
            cursor = self._connection.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS _migrations (
                    version INTEGER PRIMARY KEY,
                    description TEXT NOT NULL,
                    applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            """)
            cursor.execute("SELECT version FROM _migrations")
            already_applied = {row[0] for row in cursor.fetchall()}

            for version, description, statements in MIGRATIONS:
                if version in already_applied:
                    continue
                with self._transaction() as tx:
                    for statement in statements:
                        tx.execute(statement)
                    tx.execute(
                        "INSERT INTO _migrations (version, description) VALUES (?, ?)",
                        (version, description)
                    )
                logger.info(f"Applied migration {version}: {description}")
                applied_now.append(version)

        if not applied_now:
            logger.debug("Database schema is up to date")
        return applied_now

    @staticmethod
    def _row_to_dict(row: Tuple[Any, ...]) -> Dict[str, Any]:
        return {"id": row[0], "task": row[1]}

    def fetch_all_tasks(self) -> List[Dict[str, Any]]:
        """Return every task row in natural row order."""
        with self._connection_lock:
            cursor = self._connection.cursor()
            cursor.execute("SELECT id, task FROM task")
            return [self._row_to_dict(row) for row in cursor.fetchall()]

    def fetch_task(self, task_id: int) -> Optional[Dict[str, Any]]:
        """Return the task row with ``task_id``, or None if there is none."""
        with self._connection_lock:
            cursor = self._connection.cursor()
            cursor.execute("SELECT id, task FROM task WHERE id = ?", (task_id,))
            row = cursor.fetchone()
            return self._row_to_dict(row) if row else None

    def insert_task(self, text: str) -> int:
        """Insert a task row and return the id the store assigned to it."""
        with self._connection_lock:
            cursor = self._connection.cursor()
            cursor.execute("INSERT INTO task (task) VALUES (?)", (text,))
            return cursor.lastrowid

    def update_task(self, task_id: int, text: str) -> int:
        """Replace the text of a task row. Returns the number of rows changed."""
        with self._connection_lock:
            cursor = self._connection.cursor()
            cursor.execute("UPDATE task SET task = ? WHERE id = ?", (text, task_id))
            return cursor.rowcount

    def delete_task(self, task_id: int) -> int:
        """Delete a task row. Returns the number of rows removed."""
        with self._connection_lock:
            cursor = self._connection.cursor()
            cursor.execute("DELETE FROM task WHERE id = ?", (task_id,))
            return cursor.rowcount

    def close(self):
        """Close database connection."""
        with self._connection_lock:
            if self._connection:
                self._connection.close()
                self._connection = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
