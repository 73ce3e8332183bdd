"""Helpers for working with timezone-aware datetimes.

Timestamps are stored as naive UTC values; the API always speaks UTC with an
explicit offset.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utcnow_naive() -> datetime:
    """Return the current UTC time without tzinfo, as stored in the database."""

    return utcnow().replace(tzinfo=None)


def coerce_utc(value: datetime | None) -> datetime | None:
    """Return a UTC-normalized datetime, assuming naive values are already UTC."""

    if value is None:
        return None

    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)

    return value.astimezone(timezone.utc)


def to_storage(value: datetime | None) -> datetime | None:
    """Convert an incoming datetime into a naive UTC value for persistence."""

    normalized = coerce_utc(value)
    if normalized is None:
        return None
    return normalized.replace(tzinfo=None)


def suspension_end(days: int, *, now: datetime | None = None) -> datetime:
    """Return the naive UTC instant a suspension of ``days`` days expires."""

    start = coerce_utc(now) if now is not None else utcnow()
    return (start + timedelta(days=days)).replace(tzinfo=None)


def is_suspended(suspended_until: datetime | None, *, now: datetime | None = None) -> bool:
    if suspended_until is None:
        return False
    current = coerce_utc(now) if now is not None else utcnow()
    return coerce_utc(suspended_until) > current
