"""
Shared test fixtures for TimeCraft.

This module provides common fixtures used across all test modules:
- Environment setup (dev mode, no model API key)
- Database session (in-memory SQLite)
- PlanStore bound to that session
- Schedule item factory and sample schedules

Usage:
    All fixtures are automatically available to any test in the tests/ directory.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# ---------------------------------------------------------------------------
# 1. Environment setup -- must run before any application imports
# ---------------------------------------------------------------------------

os.environ.setdefault("TIMECRAFT_DEV_MODE", "1")
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("API_KEY", None)

# ---------------------------------------------------------------------------
# Application imports (after env vars are set)
# ---------------------------------------------------------------------------

from src.config.settings import get_settings  # noqa: E402
from src.lib.circuit_breaker import clear_circuit_breakers  # noqa: E402
from src.models.base import Base  # noqa: E402
from src.models.plan import PlanRecord  # noqa: E402, F401
from src.models.schedule import ScheduleItem  # noqa: E402
from src.services.plan_store import PlanStore  # noqa: E402

# ---------------------------------------------------------------------------
# 2. Global state reset between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Fresh settings cache and circuit breaker registry for every test."""
    get_settings.cache_clear()
    clear_circuit_breakers()
    yield
    get_settings.cache_clear()
    clear_circuit_breakers()


# ---------------------------------------------------------------------------
# 3. db_session -- in-memory SQLite session for unit tests
# ---------------------------------------------------------------------------


@pytest.fixture()
def db_engine():
    """
    In-memory SQLite engine shared across threads.

    StaticPool keeps a single connection so the FastAPI test client (which
    runs sync endpoints in a worker thread) sees the same database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(db_engine):
    """
    Provide a SQLAlchemy session backed by an in-memory SQLite database.

    A fresh database is created for every test that requests this fixture.
    """
    TestingSession = sessionmaker(bind=db_engine, expire_on_commit=False)
    session = TestingSession()

    yield session

    session.close()


@pytest.fixture()
def plan_store(db_session):
    return PlanStore(db_session)


# ---------------------------------------------------------------------------
# 4. Schedule items
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_item():
    """
    Factory for ScheduleItem with sensible defaults.

    Example usage in a test::

        def test_something(make_item):
            item = make_item("a", "9:00 AM", "10:00 AM", cost=12.5)
    """

    def _make(
        item_id: str,
        start_time: str = "9:00 AM",
        end_time: str = "10:00 AM",
        date: str = "2024-05-01",
        **overrides,
    ) -> ScheduleItem:
        fields = {
            "id": item_id,
            "task": f"Task {item_id}",
            "date": date,
            "start_time": start_time,
            "end_time": end_time,
            "duration": "1 hour",
            "priority": "Medium",
        }
        fields.update(overrides)
        return ScheduleItem(**fields)

    return _make


@pytest.fixture()
def sample_schedule(make_item):
    """
    Two days of tasks.

    2024-05-01: A 9-10, B 9:30-10:30 (overlaps A), C 10-11 (reuses A's lane)
    2024-05-02: D 1-2 PM, E with an unparseable start time
    """
    return [
        make_item("A", "9:00 AM", "10:00 AM", cost=20.0),
        make_item("B", "9:30 AM", "10:30 AM"),
        make_item("C", "10:00 AM", "11:00 AM", cost=5.5),
        make_item("D", "1:00 PM", "2:00 PM", date="2024-05-02", cost=100.0),
        make_item("E", "sometime", "2:00 PM", date="2024-05-02"),
    ]
