"""Declarative base and common mixins for SQLAlchemy models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Shared declarative base for all catalog models."""


class AuditMixin:
    """Mixin that adds ``created_date`` / ``last_modified_date`` columns.

    Both values are naive UTC and are assigned by the application, never by
    the database, so a row that is not touched keeps its last modified date.
    """

    created_date: Mapped[datetime] = mapped_column(nullable=False)
    last_modified_date: Mapped[datetime] = mapped_column(nullable=False)

    def mark_created(self, now: datetime) -> None:
        self.created_date = now
        self.last_modified_date = now

    def touch(self, now: datetime) -> None:
        self.last_modified_date = now
