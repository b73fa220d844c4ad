"""Calendar providers for date resolution."""
from datetime import date
from typing import Protocol


class Clock(Protocol):
    """Supplies "today" to date logic."""

    def today(self) -> date:
        ...


class SystemClock:
    """Local calendar date from the system clock."""

    def today(self) -> date:
        return date.today()


class FixedClock:
    """Clock pinned to a given date; set() moves it."""

    def __init__(self, current: date):
        self.current = current

    def today(self) -> date:
        return self.current

    def set(self, current: date) -> None:
        self.current = current
