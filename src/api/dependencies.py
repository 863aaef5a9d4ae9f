"""
FastAPI Dependencies for database sessions and services.

Tests swap these out through `app.dependency_overrides`.
"""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends
from sqlalchemy.orm import Session

from src.lib.database import session_scope
from src.services.plan_store import PlanStore
from src.services.schedule_generator import ScheduleGenerator, get_schedule_generator


def get_db_session() -> Iterator[Session]:
    """One session per request, closed when the response is sent."""
    with session_scope() as session:
        yield session


def get_plan_store(session: Session = Depends(get_db_session)) -> PlanStore:
    return PlanStore(session)


def get_generator() -> ScheduleGenerator:
    return get_schedule_generator()


__all__ = ["get_db_session", "get_plan_store", "get_generator"]
