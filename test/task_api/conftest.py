"""
Shared fixtures for Task API tests.

Every test gets its own temporary SQLite file, so tests never share rows.
"""

import os
import sys

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from task_api.api import app
from task_api.database import TaskDatabase


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "tasks.db")


@pytest.fixture
def database(db_path):
    """Migrated TaskDatabase on a temporary file."""
    db = TaskDatabase(db_path)
    db.run_migrations()
    yield db
    db.close()


@pytest.fixture
def client(db_path, monkeypatch):
    """TestClient running the full lifespan against a temporary database."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite://{db_path}")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    with TestClient(app) as test_client:
        yield test_client
