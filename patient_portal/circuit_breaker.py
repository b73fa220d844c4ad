"""Circuit breaker for backend calls.

Purpose: Fail fast while the backend is down instead of stacking up
timeouts behind every screen action.

States:
- CLOSED: Normal operation, requests pass through
- OPEN: Backend failing, requests fail immediately with CircuitOpenError
- HALF_OPEN: Timeout elapsed, one trial request is allowed

Only transport failures and 5xx rejections count toward opening; a 4xx
rejection (e.g. slot already taken) says the backend is healthy.
"""
import threading
import time
from enum import Enum
from typing import Any, Callable, Optional

from patient_portal.errors import ApiError, TransportError
from patient_portal.logging_config import get_logger

logger = get_logger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(TransportError):
    """Raised instead of calling the backend while the circuit is open."""
    pass


def _counts_as_outage(exc: BaseException) -> bool:
    if isinstance(exc, ApiError):
        return exc.status_code >= 500
    return isinstance(exc, TransportError)


class BackendCircuitBreaker:
    """Consecutive-failure circuit breaker with an injectable time source."""

    def __init__(
        self,
        failure_threshold: int = 5,
        timeout: float = 60,
        time_source: Callable[[], float] = time.monotonic
    ):
        """
        Initialize circuit breaker.

        Args:
            failure_threshold: Consecutive outages before opening
            timeout: Seconds to stay open before allowing a trial call
            time_source: Monotonic seconds (overridable in tests)
        """
        self.failure_threshold = failure_threshold
        self.timeout = timeout
        self.failure_count = 0
        self.last_failure_time: Optional[float] = None
        self._time = time_source
        self._state = CircuitState.CLOSED
        self._trial_in_flight = False
        self._lock = threading.Lock()

    @property
    def state(self) -> str:
        return self._state.value

    def call(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Execute func unless the circuit is open.

        Thread-safe: state changes happen under a lock, func runs outside
        it. While HALF_OPEN only the single trial call goes through;
        concurrent callers fail fast until it settles.

        Raises:
            CircuitOpenError: If circuit is open (fail fast)
            Exception: Whatever func raises
        """
        with self._lock:
            if self._state == CircuitState.OPEN:
                retry_in = self._retry_in()
                if retry_in > 0:
                    raise CircuitOpenError(
                        f"Service temporarily unavailable. Retry after {retry_in:.0f}s"
                    )
                self._state = CircuitState.HALF_OPEN
                self._trial_in_flight = False
                logger.info("circuit_half_open")
            if self._state == CircuitState.HALF_OPEN:
                if self._trial_in_flight:
                    raise CircuitOpenError("Service temporarily unavailable. Trial call in progress")
                self._trial_in_flight = True

        try:
            result = func(*args, **kwargs)
        except Exception as exc:
            with self._lock:
                if _counts_as_outage(exc):
                    self._on_failure()
                else:
                    self._on_success()
            raise
        except BaseException:
            with self._lock:
                self._trial_in_flight = False
            raise

        with self._lock:
            self._on_success()
        return result

    def _retry_in(self) -> float:
        if self.last_failure_time is None:
            return 0
        elapsed = self._time() - self.last_failure_time
        return max(0.0, self.timeout - elapsed)

    def _on_success(self):
        self.failure_count = 0
        self._trial_in_flight = False
        if self._state == CircuitState.HALF_OPEN:
            self._state = CircuitState.CLOSED
            logger.info("circuit_closed")

    def _on_failure(self):
        self.failure_count += 1
        self.last_failure_time = self._time()
        self._trial_in_flight = False

        if self._state == CircuitState.HALF_OPEN:
            self._state = CircuitState.OPEN
            logger.warning("circuit_reopened")
        elif self.failure_count >= self.failure_threshold:
            self._state = CircuitState.OPEN
            logger.error(
                "circuit_opened",
                failure_count=self.failure_count,
                timeout=self.timeout,
            )
