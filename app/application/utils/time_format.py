from __future__ import annotations

from datetime import date, time

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def from_minutes(minutes: int) -> time:
    return time(hour=minutes // 60, minute=minutes % 60)


def add_minutes(value: time, minutes: int) -> time:
    """Add minutes to a time-of-day, clamped to 23:59."""
    total = min(to_minutes(value) + minutes, 23 * 60 + 59)
    return from_minutes(max(total, 0))


def format_hhmm(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def format_long_date(value: date) -> str:
    # Locale independent, e.g. "20 October 2024"
    return f"{value.day} {_MONTHS[value.month - 1]} {value.year}"
