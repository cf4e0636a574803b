"""UTC time helpers shared by room expiration and webhook ordering."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    MySQL and SQLite hand back naive datetimes even for ``timezone=True``
    columns; every value we persist is UTC so a naive value is tagged as such.
    """

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def from_epoch_millis(value: int) -> datetime:
    """Convert epoch milliseconds to a UTC datetime without float rounding."""

    seconds, millis = divmod(int(value), 1000)
    return datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(milliseconds=millis)


def add_days(days: int, start: datetime | None = None) -> datetime:
    return (start or utcnow()) + timedelta(days=days)


def is_past(value: datetime | None, now: datetime | None = None) -> bool:
    if value is None:
        return False
    return as_utc(value) < (now or utcnow())
