"""Booking screen session.

Wires the pieces one booking screen needs: doctor detail loading,
availability resolution, weekday/time selection and the booking state
machine. One session per screen; close() when the screen goes away.
"""
import inspect
from datetime import date
from typing import Any, Callable, List, Optional

from patient_portal import config
from patient_portal.availability import AvailabilityResolver
from patient_portal.booking import BookingStateMachine
from patient_portal.clock import Clock, SystemClock
from patient_portal.doctor_detail import DoctorDetailLoader
from patient_portal.logging_config import get_logger
from patient_portal.models import DoctorDetail, Weekday
from patient_portal.state import BookingState, BookingSuccess, UiState, UiSuccess

logger = get_logger(__name__)


class BookingSession:
    """Selection and booking flow for a single doctor."""

    def __init__(
        self,
        repository,
        doctor_id: str,
        clock: Optional[Clock] = None,
        interval_minutes: int = config.SLOT_INTERVAL_MINUTES,
        on_booked: Optional[Callable[[BookingSuccess], Any]] = None
    ):
        """
        Initialize session (nothing is fetched until open()).

        Args:
            repository: PortalRepository or compatible async facade
            doctor_id: Doctor shown on this screen
            clock: Source of "today" for date resolution
            interval_minutes: Slot interval
            on_booked: Called (or awaited) after a booking succeeds,
                       e.g. to reload the appointment list
        """
        self.doctor_id = doctor_id
        self.clock = clock or SystemClock()
        self.interval_minutes = interval_minutes
        self.on_booked = on_booked
        self.detail_loader = DoctorDetailLoader(repository, doctor_id)
        self.booking = BookingStateMachine(repository)
        self.resolver: Optional[AvailabilityResolver] = None
        self.selected_weekday: Optional[Weekday] = None
        self.selected_time: Optional[str] = None

    @property
    def detail(self) -> Optional[DoctorDetail]:
        return self.detail_loader.detail

    @property
    def detail_state(self) -> UiState:
        return self.detail_loader.state

    async def open(self) -> UiState:
        """
        Load the doctor and preselect the first weekday and slot.

        Reloading replaces the previous detail and selection wholesale.
        """
        state = await self.detail_loader.load(self.doctor_id)
        if isinstance(state, UiSuccess):
            self.resolver = AvailabilityResolver(
                state.data.availability,
                clock=self.clock,
                interval_minutes=self.interval_minutes,
            )
            weekdays = self.resolver.available_weekdays()
            self.selected_weekday = None
            self.selected_time = None
            if weekdays:
                self.select_weekday(weekdays[0])
        return state

    def available_weekdays(self) -> List[Weekday]:
        if self.resolver is None:
            return []
        return self.resolver.available_weekdays()

    @property
    def time_slots(self) -> List[str]:
        if self.resolver is None or self.selected_weekday is None:
            return []
        return self.resolver.slots_for(self.selected_weekday)

    @property
    def selected_date(self) -> Optional[date]:
        """Calendar date for the selected weekday, resolved against today."""
        if self.resolver is None or self.selected_weekday is None:
            return None
        return self.resolver.next_calendar_date_for(self.selected_weekday)

    def select_weekday(self, weekday: Weekday) -> List[str]:
        """
        Select a weekday and preselect its first slot.

        Returns:
            Slots for the weekday (empty means booking is disabled)

        Raises:
            ValueError: If the doctor has no availability on weekday
        """
        if weekday not in self.available_weekdays():
            raise ValueError(f"{weekday.value} is not an available day")
        self.selected_weekday = weekday
        slots = self.time_slots
        self.selected_time = slots[0] if slots else None
        return slots

    def select_time(self, slot: str) -> None:
        """
        Raises:
            ValueError: If slot is not offered for the selected weekday
        """
        if slot not in self.time_slots:
            raise ValueError(f"{slot} is not an available time")
        self.selected_time = slot

    @property
    def can_book(self) -> bool:
        return (
            self.detail is not None
            and self.selected_date is not None
            and self.selected_time is not None
            and self.selected_time in self.time_slots
            and self.booking.is_idle
            and not self.booking.closed
        )

    async def book(self) -> BookingState:
        """
        Submit the current selection.

        No-op (returns the booking state) while booking is disabled.
        """
        if not self.can_book:
            return self.booking.state

        state = await self.booking.submit(
            self.doctor_id, self.selected_date, self.selected_time
        )
        if isinstance(state, BookingSuccess) and self.on_booked is not None:
            result = self.on_booked(state)
            if inspect.isawaitable(result):
                await result
        return state

    def acknowledge(self) -> BookingState:
        """Mark the shown booking result as consumed (back to Idle)."""
        return self.booking.clear()

    def close(self) -> None:
        self.detail_loader.close()
        self.booking.close()
        logger.debug("booking_session_closed", doctor_id=self.doctor_id)
