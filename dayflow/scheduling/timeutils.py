"""
DAYFLOW Planner API - Clock-time helpers

Schedules work in same-day "HH:MM" strings. Internally everything is
minutes since midnight; 24:00 is accepted as an end-of-day bound.
"""

import re
from typing import Iterable, Optional, Tuple


MINUTES_PER_DAY = 24 * 60

_HHMM = re.compile(r"^(\d{2}):(\d{2})$")


def to_minutes(value: str) -> int:
    """Parse "HH:MM" into minutes since midnight."""
    match = _HHMM.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    total = hours * 60 + minutes
    if minutes > 59 or total > MINUTES_PER_DAY:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return total


def from_minutes(total: int) -> str:
    if total < 0 or total > MINUTES_PER_DAY:
        raise ValueError(f"{total} minutes is outside a single day")
    return f"{total // 60:02d}:{total % 60:02d}"


def parse_window(window: str) -> Tuple[int, int]:
    """Parse "HH:MM-HH:MM" into a (start, end) minute pair."""
    try:
        start, end = window.split("-")
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid window '{window}', expected HH:MM-HH:MM")
    return to_minutes(start), to_minutes(end)


def format_window(start: int, end: int) -> str:
    return f"{from_minutes(start)}-{from_minutes(end)}"


def in_window(time_value: str, window: str) -> bool:
    """True when time_value falls inside window, both bounds inclusive."""
    start, end = parse_window(window)
    return start <= to_minutes(time_value) <= end


def first_overlap(intervals: Iterable[Tuple[int, int]]) -> Optional[Tuple[Tuple[int, int], Tuple[int, int]]]:
    """
    Return the first pair of overlapping [start, end) intervals, or None.

    Touching intervals (one ends when the next starts) do not overlap.
    """
    ordered = sorted(intervals)
    for previous, current in zip(ordered, ordered[1:]):
        if current[0] < previous[1]:
            return previous, current
    return None
