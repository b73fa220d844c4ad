"""Test booking transitions and paged list state helpers."""
import pytest

from patient_portal.state import (
    VALID_TRANSITIONS,
    BookingError,
    BookingIdle,
    BookingPhase,
    BookingSuccess,
    PagedListState,
    validate_transition,
)
from conftest import make_doctors


class TestBookingTransitions:

    def test_every_phase_has_transitions(self):
        assert set(VALID_TRANSITIONS) == set(BookingPhase)

    @pytest.mark.parametrize("current,intended", [
        (BookingPhase.IDLE, BookingPhase.LOADING),
        (BookingPhase.LOADING, BookingPhase.SUCCESS),
        (BookingPhase.LOADING, BookingPhase.ERROR),
        (BookingPhase.SUCCESS, BookingPhase.IDLE),
        (BookingPhase.ERROR, BookingPhase.IDLE),
    ])
    def test_allowed(self, current, intended):
        assert validate_transition(current, intended)

    @pytest.mark.parametrize("current,intended", [
        (BookingPhase.SUCCESS, BookingPhase.LOADING),
        (BookingPhase.ERROR, BookingPhase.LOADING),
        (BookingPhase.IDLE, BookingPhase.SUCCESS),
        (BookingPhase.LOADING, BookingPhase.IDLE),
        (BookingPhase.LOADING, BookingPhase.LOADING),
    ])
    def test_forbidden(self, current, intended):
        assert not validate_transition(current, intended)

    def test_states_compare_by_value(self):
        assert BookingSuccess("ok") == BookingSuccess("ok")
        assert BookingError("x") != BookingError("y")
        assert BookingIdle().phase is BookingPhase.IDLE


class TestPagedListState:

    def test_initial(self):
        state = PagedListState()

        assert state.items == ()
        assert state.page_cursor == 0
        assert not state.is_loading
        assert not state.is_blocking_error
        assert not state.is_inline_error

    def test_error_without_items_blocks_screen(self):
        state = PagedListState(last_error="Unable to load doctors")

        assert state.is_blocking_error
        assert not state.is_inline_error

    def test_error_with_items_is_inline(self):
        state = PagedListState(items=tuple(make_doctors(1, 3)), last_error="timeout")

        assert state.is_inline_error
        assert not state.is_blocking_error
