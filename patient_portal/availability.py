"""Availability resolution: weekly windows to concrete bookable dates.

A doctor publishes recurring windows per weekday. The resolver offers
only the weekdays present in that map, expands each weekday into slots,
and maps a weekday onto the next calendar date that falls on it.
"""
from datetime import date, timedelta
from typing import Dict, List, Mapping, Optional, Sequence

from patient_portal import config
from patient_portal.clock import Clock, SystemClock
from patient_portal.models import TimeWindow, Weekday
from patient_portal.slots import generate_slots


class AvailabilityResolver:
    """Derive selectable weekdays, dates and slots from an availability map."""

    def __init__(
        self,
        availability: Mapping[Weekday, Sequence[TimeWindow]],
        clock: Optional[Clock] = None,
        interval_minutes: int = config.SLOT_INTERVAL_MINUTES
    ):
        """
        Initialize resolver.

        Args:
            availability: Windows per weekday, in display order
            clock: Source of "today" (defaults to the system clock)
            interval_minutes: Slot interval passed to generate_slots
        """
        self._availability: Dict[Weekday, List[TimeWindow]] = {
            day: list(windows) for day, windows in availability.items()
        }
        self.clock = clock or SystemClock()
        self.interval_minutes = interval_minutes

    def available_weekdays(self) -> List[Weekday]:
        """Weekdays present in the availability map, in map order."""
        return list(self._availability)

    def slots_for(self, weekday: Weekday) -> List[str]:
        """
        Slots for one weekday.

        Windows are expanded in the order they are listed; a weekday
        that is absent, or whose windows are all empty or inverted,
        yields an empty list.
        """
        slots: List[str] = []
        for window in self._availability.get(weekday, []):
            slots.extend(
                generate_slots(window.start_time, window.end_time, self.interval_minutes)
            )
        return slots

    def is_bookable(self, weekday: Weekday) -> bool:
        """An empty slot list disables booking; it is not an error."""
        return bool(self.slots_for(weekday))

    def next_calendar_date_for(self, weekday: Weekday) -> date:
        """
        Next date on or after today that falls on weekday.

        Evaluated against the clock on every call. When today already
        matches, today is returned even if its windows have elapsed.
        """
        return next_date_for(weekday, self.clock.today())


def next_date_for(weekday: Weekday, today: date) -> date:
    """Date in [today, today + 6 days] whose weekday matches."""
    days_ahead = (weekday.day_number - today.weekday()) % 7
    return today + timedelta(days=days_ahead)
