"""State schema for the booking screen and list loaders.

- Closed sum types (frozen dataclasses) instead of independent booleans,
  so combinations like "loading and failed" cannot be represented
- Enums for discrete phases
- Explicit transition map for the booking lifecycle
- Listener delivery isolated from listener failures
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Generic, List, Optional, Tuple, TypeVar, Union

from patient_portal.logging_config import get_logger
from patient_portal.models import DoctorSummary

logger = get_logger(__name__)

T = TypeVar("T")


class BookingPhase(str, Enum):
    """Discrete phases of a single booking attempt."""
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class BookingIdle:
    phase: ClassVar[BookingPhase] = BookingPhase.IDLE


@dataclass(frozen=True)
class BookingLoading:
    phase: ClassVar[BookingPhase] = BookingPhase.LOADING


@dataclass(frozen=True)
class BookingSuccess:
    message: str
    phase: ClassVar[BookingPhase] = BookingPhase.SUCCESS


@dataclass(frozen=True)
class BookingError:
    message: str
    phase: ClassVar[BookingPhase] = BookingPhase.ERROR


BookingState = Union[BookingIdle, BookingLoading, BookingSuccess, BookingError]

IDLE = BookingIdle()
LOADING = BookingLoading()


# Pattern: Current phase → [allowed next phases]
VALID_TRANSITIONS: Dict[BookingPhase, list[BookingPhase]] = {
    BookingPhase.IDLE: [
        BookingPhase.LOADING,
    ],
    BookingPhase.LOADING: [
        BookingPhase.SUCCESS,
        BookingPhase.ERROR,
    ],
    # Terminal results must be cleared before another submit
    BookingPhase.SUCCESS: [
        BookingPhase.IDLE,
    ],
    BookingPhase.ERROR: [
        BookingPhase.IDLE,
    ],
}


def validate_transition(current: BookingPhase, intended: BookingPhase) -> bool:
    """
    Validate a booking state transition.

    Example:
        >>> validate_transition(BookingPhase.IDLE, BookingPhase.LOADING)
        True
        >>> validate_transition(BookingPhase.SUCCESS, BookingPhase.LOADING)
        False
    """
    return intended in VALID_TRANSITIONS.get(current, [])


@dataclass(frozen=True)
class UiLoading:
    pass


@dataclass(frozen=True)
class UiSuccess(Generic[T]):
    data: T


@dataclass(frozen=True)
class UiError:
    message: str


UiState = Union[UiLoading, UiSuccess, UiError]


@dataclass(frozen=True)
class PagedListState:
    """
    Snapshot of an incrementally loaded list.

    Replaced wholesale by the coordinator; page_cursor counts successful
    page fetches.
    """
    items: Tuple[DoctorSummary, ...] = field(default_factory=tuple)
    page_cursor: int = 0
    end_reached: bool = False
    is_loading_first_page: bool = False
    is_loading_more: bool = False
    last_error: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.is_loading_first_page or self.is_loading_more

    @property
    def is_blocking_error(self) -> bool:
        """First-page failure with nothing to show: full-screen error."""
        return self.last_error is not None and not self.items

    @property
    def is_inline_error(self) -> bool:
        """Later-page failure: keep the loaded items, show a non-blocking error."""
        return self.last_error is not None and bool(self.items)


def notify_listeners(listeners: List[Callable[[Any], None]], state: Any, source: str) -> None:
    """
    Deliver a state to every listener.

    A listener that raises is logged and skipped; the state has already
    been committed and the remaining listeners still run.
    """
    for listener in list(listeners):
        try:
            listener(state)
        except Exception:
            logger.exception("state_listener_failed", source=source, state=type(state).__name__)
