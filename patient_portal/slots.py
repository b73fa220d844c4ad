"""Bookable slot generation.

A doctor's availability window ("10:00" - "13:00") is split into start
times at a fixed interval. The window is half-open: a slot starting
exactly at the end time is never offered.
"""
from datetime import datetime, time
from typing import List, Optional

from patient_portal import config

TIME_FORMAT = "%H:%M"


def parse_time(value: Optional[str]) -> Optional[time]:
    """Parse an "HH:MM" wall-clock time; None when malformed."""
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), TIME_FORMAT).time()
    except ValueError:
        return None


def generate_slots(
    start: Optional[str],
    end: Optional[str],
    interval_minutes: int = config.SLOT_INTERVAL_MINUTES
) -> List[str]:
    """
    Split [start, end) into bookable start times.

    Args:
        start: Window start, "HH:MM" 24-hour
        end: Window end, "HH:MM" 24-hour (exclusive)
        interval_minutes: Minutes between consecutive slots

    Returns:
        Strictly increasing "HH:MM" strings. Empty when start >= end,
        interval_minutes <= 0, or either bound is missing or malformed.

    Example:
        >>> generate_slots("10:00", "11:30")
        ['10:00', '10:30', '11:00']
    """
    start_time = parse_time(start)
    end_time = parse_time(end)
    if start_time is None or end_time is None:
        return []
    if interval_minutes <= 0 or start_time >= end_time:
        return []

    # Work in minutes since midnight; same calendar day assumed
    current = start_time.hour * 60 + start_time.minute
    stop = end_time.hour * 60 + end_time.minute

    slots = []
    while current < stop:
        slots.append(f"{current // 60:02d}:{current % 60:02d}")
        current += interval_minutes
    return slots
