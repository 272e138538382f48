"""Shared test fixtures and configuration.

Sets up fake environment variables before any src import, and provides
common fixtures like an empty planner state and a temp snapshot DB.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("LLM_API_KEY", "fake-llm-key-for-tests")
os.environ.setdefault("LLM_PROVIDER", "gemini")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("HOLIDAY_COUNTRY_CODE", "US")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "")

from datetime import date

import pytest


@pytest.fixture
def empty_state():
    from src.data.models import AppState
    return AppState()


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_planner.db")


@pytest.fixture
def snapshot_db(tmp_db_path):
    """Return a SnapshotDB instance backed by a temp file."""
    from src.data.db import SnapshotDB
    return SnapshotDB(db_path=tmp_db_path)


@pytest.fixture
def wednesday():
    """2024-01-10, a Wednesday."""
    return date(2024, 1, 10)
