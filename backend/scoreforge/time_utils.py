"""Helpers for working with timezone-aware datetimes."""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_utc(value: datetime | None) -> datetime | None:
    """Return a UTC-normalized datetime, assuming naive values are already UTC."""

    if value is None:
        return None

    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)

    return value.astimezone(timezone.utc)


def to_iso(value: datetime | None) -> str | None:
    """Serialize ``value`` as an ISO 8601 string in UTC."""

    value = coerce_utc(value)
    return value.isoformat() if value is not None else None


def parse_iso(value: str | datetime | None, *, field_name: str = "timestamp") -> datetime | None:
    """Parse an ISO 8601 string produced by :func:`to_iso`.

    Raises:
        ValueError: If ``value`` is not a valid ISO timestamp.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return coerce_utc(value)
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be an ISO 8601 timestamp")
    return coerce_utc(parsed)
