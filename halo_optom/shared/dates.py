"""Date and time helpers shared across domains"""

from datetime import date, datetime, time, timezone
from typing import Optional

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def utcnow() -> datetime:
    """Naive UTC now, matching the naive timestamp columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def day_of_week(value: date) -> str:
    """Lowercase English weekday name for a date"""
    return WEEKDAYS[value.weekday()]


def format_hhmm(value: Optional[time]) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value[:5]
    return value.strftime("%H:%M")


def format_time_range(start: Optional[time], end: Optional[time]) -> str:
    return f"{format_hhmm(start)} - {format_hhmm(end)}"


def start_of_month(now: Optional[datetime] = None) -> datetime:
    now = now or utcnow()
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
