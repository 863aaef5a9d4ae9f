"""
Database engine and session factory for TimeCraft.

The engine is created lazily from `Settings.database_url` and shared by the
process. Tables are created on first use; there is no migration layer.

Usage:
    from src.lib.database import session_scope

    with session_scope() as session:
        store = PlanStore(session)
        store.list_plans()
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from src.config.settings import get_settings
from src.models.base import Base

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_engine(database_url: str | None = None) -> Engine:
    """Create the engine, register all tables, and build the session factory."""
    global _engine, _session_factory

    url = database_url or get_settings().database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    engine = create_engine(url, connect_args=connect_args)
    if url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    # Import for table registration on Base.metadata
    import src.models.plan  # noqa: F401

    Base.metadata.create_all(engine)
    _engine = engine
    _session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    logger.info("Database initialised (%s)", engine.url.render_as_string(hide_password=True))
    return engine


def get_session_factory() -> sessionmaker[Session]:
    if _session_factory is None:
        init_engine()
    assert _session_factory is not None
    return _session_factory


@contextmanager
def session_scope() -> Iterator[Session]:
    """Yield a session that is always closed afterwards."""
    session = get_session_factory()()
    try:
        yield session
    finally:
        session.close()


def dispose_engine() -> None:
    """Drop the shared engine (tests, shutdown)."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


__all__ = ["init_engine", "get_session_factory", "session_scope", "dispose_engine"]
