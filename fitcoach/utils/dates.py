# fitcoach/utils/dates.py

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """UTC naive (SQLite no guarda zona horaria)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def same_iso_week(a: date, b: date) -> bool:
    return a.isocalendar()[:2] == b.isocalendar()[:2]


def isoformat_or_none(value):
    return value.isoformat() if value is not None else None
