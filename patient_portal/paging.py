"""Incremental doctor list loading.

The list grows one page per successful fetch. load_next() is a no-op
while a fetch is in flight or after the backend reported the last page,
so scroll-triggered re-entrant calls cannot issue overlapping requests.
A failed page leaves cursor and items untouched; the next load_next()
retries the same page.
"""
from dataclasses import replace
from typing import Awaitable, Callable, List, Optional

from patient_portal import config
from patient_portal.errors import describe_failure
from patient_portal.logging_config import get_logger
from patient_portal.models import DoctorPage
from patient_portal.state import PagedListState, notify_listeners

logger = get_logger(__name__)

FetchPage = Callable[[int, int], Awaitable[DoctorPage]]
Listener = Callable[[PagedListState], None]


class PagedListCoordinator:
    """Owns the accumulated doctor list and its paging flags."""

    def __init__(
        self,
        fetch_page: FetchPage,
        page_size: int = config.DOCTORS_PAGE_SIZE,
        failure_message: str = config.DOCTORS_LOAD_FAILED_MESSAGE
    ):
        """
        Initialize coordinator with an empty list.

        Args:
            fetch_page: Coroutine function (page, size) -> DoctorPage,
                        e.g. PortalRepository.get_doctors
            page_size: Items requested per page
            failure_message: lastError when a failure has no message
        """
        self.fetch_page = fetch_page
        self.page_size = page_size
        self.failure_message = failure_message
        self._state = PagedListState()
        self._listeners: List[Listener] = []
        self._closed = False

    @property
    def state(self) -> PagedListState:
        return self._state

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

    def can_load(self) -> bool:
        state = self._state
        return not (self._closed or state.is_loading or state.end_reached)

    def should_load_more(self, last_visible_index: Optional[int]) -> bool:
        """
        Scroll trigger: the last loaded item is visible and a fetch may start.

        Args:
            last_visible_index: Index of the last item on screen, or None
        """
        if last_visible_index is None or not self.can_load():
            return False
        return last_visible_index >= len(self._state.items) - 1

    async def load_next(self) -> PagedListState:
        """
        Fetch the page at the cursor and append it.

        Returns:
            State after the fetch, or the unchanged state when the guard
            suppressed the call or the result was discarded
        """
        if not self.can_load():
            logger.debug(
                "page_load_suppressed",
                page=self._state.page_cursor,
                is_loading=self._state.is_loading,
                end_reached=self._state.end_reached,
                closed=self._closed,
            )
            return self._state

        page = self._state.page_cursor
        if page == 0:
            self._publish(replace(self._state, is_loading_first_page=True, last_error=None))
        else:
            self._publish(replace(self._state, is_loading_more=True, last_error=None))

        try:
            result = await self.fetch_page(page, self.page_size)
        except Exception as e:
            if self._discard(page):
                return self._state
            message = describe_failure(e, self.failure_message)
            logger.warning(
                "page_load_failed",
                page=page,
                error_type=type(e).__name__,
                message=message,
            )
            self._publish(replace(
                self._state,
                is_loading_first_page=False,
                is_loading_more=False,
                last_error=message,
            ))
            return self._state
        except BaseException:
            # Cancelled task: the hosting screen is gone
            self.close()
            raise

        if self._discard(page):
            return self._state

        seen = {item.id for item in self._state.items}
        appended = []
        for item in result.content:
            if item.id in seen:
                continue
            seen.add(item.id)
            appended.append(item)

        logger.info(
            "page_loaded",
            page=page,
            received=len(result.content),
            appended=len(appended),
            last=result.last,
        )
        self._publish(PagedListState(
            items=self._state.items + tuple(appended),
            page_cursor=page + 1,
            end_reached=result.last,
        ))
        return self._state

    def close(self) -> None:
        """Tear down: an in-flight page is discarded on arrival."""
        self._closed = True
        self._listeners.clear()

    def _discard(self, page: int) -> bool:
        if self._closed:
            logger.info("page_result_discarded", page=page)
            return True
        return False

    def _publish(self, state: PagedListState) -> None:
        self._state = state
        notify_listeners(self._listeners, state, "doctor_list")
