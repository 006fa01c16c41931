"""Pytest configuration shared across the test suite."""

from __future__ import annotations

import os
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Settings are read at import time: point them at throwaway backends before
# any application module is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["REDIS_ENABLED"] = "false"
os.environ["INGESTION_ENABLED"] = "false"
os.environ["CREATE_SCHEMA_ON_STARTUP"] = "false"
os.environ["SEED_DEFAULT_NODES"] = "false"

# Ensure backend/app is on sys.path so ``import services`` works when running
# the test suite without installing the package.
APP_DIR = Path(__file__).resolve().parents[1] / "backend" / "app"
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

from fakes import InMemoryRepository, make_node  # noqa: E402
from models import NodeStatus  # noqa: E402


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def two_online_nodes(repo):
    """GRID-NODE-001/002 online plus one offline node that must be skipped."""
    repo.add_node(make_node("GRID-NODE-001", capacity=120.0))
    repo.add_node(make_node("GRID-NODE-002", capacity=80.0))
    repo.add_node(make_node("GRID-NODE-003", status=NodeStatus.Offline))
    return repo


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 10, 1, 12, 0, 0)
