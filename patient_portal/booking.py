"""Booking request state machine.

Idle → Loading → Success(message) | Error(message) → Idle

Pattern: a single state register guarded before the first await, so a
second submit() while a request is in flight (or while a result is still
waiting to be shown) does nothing. The consumer calls clear() once it has
displayed the terminal result.
"""
from datetime import date
from typing import Callable, List, Union

from pydantic import ValidationError

from patient_portal import config
from patient_portal.errors import describe_failure
from patient_portal.logging_config import get_logger
from patient_portal.models import AppointmentRequest
from patient_portal.state import (
    IDLE,
    LOADING,
    BookingError,
    BookingIdle,
    BookingState,
    BookingSuccess,
    notify_listeners,
    validate_transition,
)

logger = get_logger(__name__)

Listener = Callable[[BookingState], None]


class InvalidTransitionError(RuntimeError):
    """Raised when code attempts a transition the booking lifecycle forbids."""
    pass


class BookingStateMachine:
    """Lifecycle of one booking attempt with a single-flight guard."""

    def __init__(
        self,
        repository,
        success_message: str = config.BOOKING_SUCCESS_MESSAGE,
        failure_message: str = config.BOOKING_FAILED_MESSAGE
    ):
        """
        Initialize state machine in Idle.

        Args:
            repository: Object with async book_appointment(AppointmentRequest)
            success_message: Used when the backend sends no confirmation text
            failure_message: Used when a failure carries no usable message
        """
        self.repository = repository
        self.success_message = success_message
        self.failure_message = failure_message
        self._state: BookingState = IDLE
        self._listeners: List[Listener] = []
        self._closed = False

    @property
    def state(self) -> BookingState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return isinstance(self._state, BookingIdle)

    @property
    def closed(self) -> bool:
        return self._closed

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Subscribe to state changes; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def submit(
        self,
        doctor_id: str,
        appointment_date: Union[date, str],
        appointment_time: str
    ) -> BookingState:
        """
        Book an appointment unless an attempt is already under way.

        Only Idle accepts a submit; Loading, Success and Error ignore it.
        Backend and transport failures become Error(message): the
        structured payload's error field, then its message field, then
        the failure message. A request that does not validate (e.g. an
        unparseable date string) becomes Error(failure message) without
        reaching the backend.

        Args:
            doctor_id: Doctor to book with
            appointment_date: Resolved calendar date (date or ISO string)
            appointment_time: Selected slot, "HH:MM"

        Returns:
            State after the attempt (the unchanged state when ignored or
            when the result was discarded)
        """
        if self._closed or not self.is_idle:
            logger.debug(
                "booking_submit_ignored",
                doctor_id=doctor_id,
                phase=self._state.phase.value,
                closed=self._closed,
            )
            return self._state

        self._transition(LOADING)
        try:
            request = AppointmentRequest(
                doctor_id=doctor_id,
                appointment_date=appointment_date,
                appointment_time=appointment_time,
            )
        except ValidationError as e:
            logger.warning(
                "booking_request_invalid",
                doctor_id=doctor_id,
                date=str(appointment_date),
                errors=e.error_count(),
            )
            self._transition(BookingError(self.failure_message))
            return self._state

        logger.info(
            "booking_submitted",
            doctor_id=doctor_id,
            date=request.appointment_date.isoformat(),
            time=appointment_time,
        )

        try:
            response = await self.repository.book_appointment(request)
        except Exception as e:
            if self._discard(doctor_id):
                return self._state
            message = describe_failure(e, self.failure_message)
            logger.warning(
                "booking_failed",
                doctor_id=doctor_id,
                error_type=type(e).__name__,
                status_code=getattr(e, "status_code", None),
                message=message,
            )
            self._transition(BookingError(message))
            return self._state
        except BaseException:
            # Cancelled task: the hosting session is gone
            self.close()
            raise

        if self._discard(doctor_id):
            return self._state
        message = (response.message or "").strip() or self.success_message
        logger.info("booking_succeeded", doctor_id=doctor_id)
        self._transition(BookingSuccess(message))
        return self._state

    def clear(self) -> BookingState:
        """
        Return to Idle after the terminal result has been shown.

        No-op on Idle, and on Loading (an in-flight attempt cannot be
        cleared).
        """
        if self._closed:
            return self._state
        if isinstance(self._state, (BookingSuccess, BookingError)):
            self._transition(IDLE)
        return self._state

    def close(self) -> None:
        """Tear down: any in-flight result is discarded on arrival."""
        self._closed = True
        self._listeners.clear()

    def _discard(self, doctor_id: str) -> bool:
        if self._closed:
            logger.info("booking_result_discarded", doctor_id=doctor_id)
            return True
        return False

    def _transition(self, new_state: BookingState) -> None:
        if not validate_transition(self._state.phase, new_state.phase):
            raise InvalidTransitionError(
                f"{self._state.phase.value} -> {new_state.phase.value}"
            )
        self._state = new_state
        notify_listeners(self._listeners, new_state, "booking")
