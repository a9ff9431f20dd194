"""
Pytest fixtures for automigrate tests
"""
import os
import sqlite3
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from automigrate import Schema, TableModel
from automigrate.config.env_config import ENV_VARS, Config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Run every test without AUTOMIGRATE_* variables and with a fresh config cache."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    Config.clear_cache()
    yield
    Config.clear_cache()


@pytest.fixture
def db_path(tmp_path):
    """Path to a database file that does not exist yet."""
    return str(tmp_path / "test.db")


@pytest.fixture
def schema(db_path):
    """An opened schema manager on a temporary database."""
    manager = Schema(db_path)
    manager.open()
    yield manager
    manager.close()


@pytest.fixture
def raw_conn(db_path):
    """A plain sqlite3 connection to the same database, for setup and checks."""
    conn = sqlite3.connect(db_path)
    yield conn
    conn.close()


@pytest.fixture
def notes_model():
    return TableModel("notes", {"title": "string", "views": "integer", "score": "number"})


@pytest.fixture
def columns_of(raw_conn):
    """Column names of a table as seen by an independent connection."""

    def _columns(table):
        return [row[1] for row in raw_conn.execute(f'PRAGMA table_info("{table}")').fetchall()]

    return _columns
