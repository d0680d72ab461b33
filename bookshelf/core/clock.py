"""Timestamp helpers; the catalog stores every datetime as naive UTC."""

from __future__ import annotations

from datetime import datetime, timezone


def current_datetime() -> datetime:
    """Return the current time as a naive UTC datetime."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_timestamp(value: datetime) -> datetime:
    """Convert ``value`` to naive UTC; naive inputs are assumed to be UTC already."""

    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


__all__ = ["current_datetime", "normalize_timestamp"]
