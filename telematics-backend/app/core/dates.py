"""Lenient datetime parsing for query strings and request bodies."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any, Optional


def coerce_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a date-ish value.

    Accepts datetimes, dates, epoch milliseconds (as numbers or digit
    strings) and ISO 8601 strings. Naive values are taken as UTC; anything
    unparseable yields ``None``.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    raw = str(value).strip()
    if raw.lstrip("-").isdigit():
        return coerce_datetime(int(raw))
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999000)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
