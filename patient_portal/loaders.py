"""Loading/Success/Error loaders for single backend resources.

Each load publishes UiLoading, then UiSuccess(data) or UiError(message).
Failures never escape load(); they become UiError. A result that arrives
after close(), or after a newer load() started, is discarded.
"""
from typing import Any, Callable, List, Optional

from patient_portal.errors import describe_failure
from patient_portal.logging_config import get_logger
from patient_portal.state import UiError, UiLoading, UiState, UiSuccess, notify_listeners

logger = get_logger(__name__)

Listener = Callable[[UiState], None]


class UiStateLoader:
    """Base class: subclasses supply fetch() and failure_message."""

    failure_message = "Unknown error"

    def __init__(self):
        self._state: UiState = UiLoading()
        self._listeners: List[Listener] = []
        self._generation = 0
        self._closed = False

    @property
    def state(self) -> UiState:
        return self._state

    @property
    def data(self) -> Optional[Any]:
        """Loaded value, or None unless the last load succeeded."""
        if isinstance(self._state, UiSuccess):
            return self._state.data
        return None

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

    def close(self) -> None:
        """Tear down: in-flight results are dropped on arrival."""
        self._closed = True
        self._listeners.clear()

    async def fetch(self) -> Any:
        raise NotImplementedError

    async def load(self) -> UiState:
        """
        Fetch the resource and publish the outcome.

        Returns:
            The state after this load (unchanged if discarded)
        """
        if self._closed:
            return self._state

        self._generation += 1
        generation = self._generation
        self._publish(UiLoading())

        try:
            data = await self.fetch()
        except Exception as e:
            if self._is_stale(generation):
                return self._state
            message = describe_failure(e, self.failure_message)
            logger.warning(
                "resource_load_failed",
                loader=type(self).__name__,
                error_type=type(e).__name__,
                message=message,
            )
            self._publish(UiError(message))
            return self._state

        if self._is_stale(generation):
            return self._state
        self._publish(UiSuccess(data))
        return self._state

    def _is_stale(self, generation: int) -> bool:
        if self._closed or generation != self._generation:
            logger.debug("resource_result_discarded", loader=type(self).__name__)
            return True
        return False

    def _publish(self, state: UiState) -> None:
        self._state = state
        notify_listeners(self._listeners, state, type(self).__name__)
