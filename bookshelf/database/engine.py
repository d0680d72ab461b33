"""SQLAlchemy engine singleton and session helpers."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bookshelf import logging_manager

from .base import Base

logger = logging_manager.get_logger().getChild("database")

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker[Session]] = None


def get_database_url() -> str:
    from bookshelf.config import get_settings

    return get_settings().database_url


def _engine_options(url: str) -> Dict[str, Any]:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return {
            "pool_size": 10,
            "max_overflow": 5,
            "pool_pre_ping": True,
            "pool_recycle": 3600,
        }
    options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if parsed.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    return options


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, _record) -> None:  # pragma: no cover - driver hook
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def configure_engine(url: Optional[str] = None, *, echo: bool = False) -> Engine:
    """Create (or replace) the global engine for ``url``."""
    global _engine, _session_factory

    dispose_engine()
    target = url or get_database_url()
    engine = create_engine(target, echo=echo, **_engine_options(target))
    if engine.dialect.name == "sqlite":
        _enable_sqlite_foreign_keys(engine)
    _engine = engine
    _session_factory = None
    logger.debug(
        "Database engine configured",
        extra={"event": "database.engine.configured", "dialect": engine.dialect.name},
    )
    return engine


def get_engine() -> Engine:
    if _engine is None:
        return configure_engine()
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


@contextmanager
def get_db_session() -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""
    factory = get_session_factory()
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_schema() -> None:
    """Create every catalog table that does not exist yet."""
    from . import models  # noqa: F401  registers tables on Base.metadata

    Base.metadata.create_all(get_engine())


def dispose_engine() -> None:
    """Dispose the global engine and clear the factory."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
