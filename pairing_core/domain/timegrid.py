# pairing_core/domain/timegrid.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Tuple


def time_to_minutes(value: str) -> int:
    """'HH:MM' -> minutes since midnight. Malformed input raises ValueError."""
    parts = str(value).strip().split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid time format: {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    # no day overflow handling; expected range is 0..1439
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> Optional[Tuple[int, int]]:
    start = max(a_start, b_start)
    end = min(a_end, b_end)
    if end - start > 0:
        return start, end
    return None


def duration(start: str, end: str) -> int:
    return time_to_minutes(end) - time_to_minutes(start)


def as_date(value) -> date:
    """Normalise to day granularity (datetime/ISO string -> date)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def day_of_week(value) -> int:
    """0=Sunday .. 6=Saturday, the convention used by availability windows"""
    return (as_date(value).weekday() + 1) % 7
