"""
Shared time and text helpers.
"""
import math
from datetime import datetime, timezone
from typing import Tuple


def day_of_week(ts: datetime) -> int:
    """Day index with Sunday = 0 ... Saturday = 6."""
    return (ts.weekday() + 1) % 7


def is_weekend(ts: datetime) -> bool:
    return ts.weekday() >= 5


def cyclical(value: float, period: float) -> Tuple[float, float]:
    """Encode a periodic value as a (sin, cos) pair so period boundaries stay adjacent."""
    angle = 2 * math.pi * value / period
    return math.sin(angle), math.cos(angle)


def format_hour(hour: int, clock: bool = False) -> str:
    """Human-readable hour.

    ``clock=False`` gives "midnight", "noon", "9 AM", "3 PM";
    ``clock=True`` gives "Midnight", "Noon", "9:00 AM", "3:00 PM".
    """
    if hour == 0:
        return "Midnight" if clock else "midnight"
    if hour == 12:
        return "Noon" if clock else "noon"
    suffix = ":00" if clock else ""
    if hour < 12:
        return f"{hour}{suffix} AM"
    return f"{hour - 12}{suffix} PM"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def naive_utc(ts: datetime) -> datetime:
    """Convert an offset-aware timestamp to naive UTC; naive ones are returned as is."""
    if ts.tzinfo is None:
        return ts
    return ts.astimezone(timezone.utc).replace(tzinfo=None)
