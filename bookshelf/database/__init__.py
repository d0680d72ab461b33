"""SQLAlchemy database layer for bookshelf.

Provides the shared engine, session factory, and declarative base
used by the catalog repositories.
"""

from .base import AuditMixin, Base
from .engine import (
    configure_engine,
    dispose_engine,
    get_db_session,
    get_engine,
    init_schema,
)

__all__ = [
    "AuditMixin",
    "Base",
    "configure_engine",
    "dispose_engine",
    "get_db_session",
    "get_engine",
    "init_schema",
]
