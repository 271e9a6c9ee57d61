"""Shared test fixtures and configuration.

Sets up fake environment variables so src.config doesn't sys.exit(),
and provides common fixtures like a temp DB and a deterministic normalizer.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("LLM_API_KEY", "fake-llm-key-for-tests")
os.environ.setdefault("LLM_PROVIDER", "gemini")
os.environ.setdefault("ALLOWED_USER_IDS", "12345")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("OPENAI_API_KEY", "fake-openai-key-for-tests")
os.environ.setdefault("TIMEZONE", "UTC")

import itertools
from datetime import datetime

import pytest

FIXED_NOW = datetime(2026, 3, 2, 9, 30, 15)  # a Monday


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_planner.db")


@pytest.fixture
def state_db(tmp_db_path):
    """Return a StateDB instance backed by a temp file."""
    from src.data.db import StateDB
    return StateDB(db_path=tmp_db_path)


@pytest.fixture
def normalizer():
    """Normalizer pinned to FIXED_NOW with predictable ids: id-1, id-2, ..."""
    from src.core.normalizer import Normalizer

    counter = itertools.count(1)
    return Normalizer(clock=lambda: FIXED_NOW, id_factory=lambda: f"id-{next(counter)}")
