"""Debounced search state machine.

A search session reacts to every query-text change synchronously: pending
work is cancelled, results are cleared and the page counter returns to 1.
The network search itself only starts after a quiet period, via a
:class:`DebounceTimer`. Each scheduled search carries a token; a search
whose token has been superseded applies nothing, even if it races past
cancellation. Last write wins.

Unlike list browsing, search has a single busy flag, ``is_searching``,
covering both the first page and "load more".
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Optional, Union

from anidex.exceptions import AnidexError, ErrorKind
from anidex.models import Anime, AnimeResponse
from anidex.state.channel import Listener, StateChannel

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5

SearchFetcher = Callable[[str, int], Awaitable[AnimeResponse]]
"""``async (query, page) -> AnimeResponse``."""


class DebounceTimer:
    """Runs at most one delayed action at a time; scheduling supersedes.

    Every :meth:`schedule` or :meth:`cancel` invalidates the previous token,
    so an action can check :meth:`is_current` before committing its result.
    Must be used from the event loop thread.
    """

    def __init__(self) -> None:
        self._token = 0
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def token(self) -> int:
        return self._token

    def schedule(
        self, delay: float, action: Callable[[int], Awaitable[None]]
    ) -> int:
        """Cancel any pending action and run ``action(token)`` after *delay*."""
        self.cancel()
        token = self._token

        async def _run() -> None:
            await asyncio.sleep(delay)
            await action(token)

        self._task = asyncio.get_running_loop().create_task(_run())
        return token

    def cancel(self) -> None:
        """Cancel the pending action, if any, and invalidate its token."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._token += 1

    def is_current(self, token: int) -> bool:
        return token == self._token

    async def wait(self) -> None:
        """Wait for the pending action to finish or be cancelled."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise


@dataclass(frozen=True)
class SearchState:
    """Snapshot of a search session."""

    query_text: str = ""
    results: tuple[Anime, ...] = ()
    current_page: int = 1
    is_searching: bool = False
    has_more_pages: bool = False
    last_error: Optional[ErrorKind] = None
    error_message: Optional[str] = None
    token: int = 0


# --- Events ---


@dataclass(frozen=True)
class QueryChanged:
    text: str
    token: int


@dataclass(frozen=True)
class SearchStarted:
    token: int
    append: bool


@dataclass(frozen=True)
class ResultsLoaded:
    items: tuple[Anime, ...]
    has_more: bool
    token: int
    append: bool


@dataclass(frozen=True)
class SearchFailed:
    kind: Optional[ErrorKind]
    message: str
    token: int
    append: bool


SearchEvent = Union[QueryChanged, SearchStarted, ResultsLoaded, SearchFailed]


def reduce_search(state: SearchState, event: SearchEvent) -> SearchState:
    """Return the state that follows *state* after *event*."""
    if isinstance(event, QueryChanged):
        return SearchState(query_text=event.text, token=event.token)

    if event.token != state.token:
        return state

    if isinstance(event, SearchStarted):
        page = state.current_page + 1 if event.append else 1
        return replace(state, current_page=page, is_searching=True)

    if not state.is_searching:
        return state

    if isinstance(event, ResultsLoaded):
        items = state.results + event.items if event.append else event.items
        return replace(
            state,
            results=items,
            has_more_pages=event.has_more,
            is_searching=False,
            last_error=None,
            error_message=None,
        )

    if isinstance(event, SearchFailed):
        page = state.current_page - 1 if event.append else state.current_page
        return replace(
            state,
            current_page=page,
            is_searching=False,
            last_error=event.kind,
            error_message=event.message,
        )

    raise TypeError(f"Unknown search event: {event!r}")


class SearchSession:
    """Debounced, paginated search driven by query-text changes.

    Args:
        search_page: ``async (query, page) -> AnimeResponse``.
        debounce_seconds: Quiet period between the last change and the search.

    Example::

        session = SearchSession(lambda q, p: jikan.search_anime(q, page=p))
        session.set_query("naruto")
        await session.wait_idle()
        print(len(session.state.results))
    """

    def __init__(
        self,
        search_page: SearchFetcher,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self._search_page = search_page
        self._debounce_seconds = debounce_seconds
        self._timer = DebounceTimer()
        self._state = SearchState()
        self._channel: StateChannel[SearchState] = StateChannel()

    @property
    def state(self) -> SearchState:
        return self._state

    def subscribe(self, listener: Listener[SearchState]) -> Callable[[], None]:
        return self._channel.subscribe(listener)

    def set_query(self, text: str) -> None:
        """Apply a query-text change.

        Results are cleared immediately. A non-blank query schedules a page-1
        search after the debounce period; a blank one schedules nothing.
        """
        if text.strip():
            token = self._timer.schedule(self._debounce_seconds, self._run_search)
        else:
            self._timer.cancel()
            token = self._timer.token
        self._dispatch(QueryChanged(text=text, token=token))

    async def load_more_results(self) -> None:
        """Append the next page. No-op while searching or when no pages remain."""
        state = self._state
        if state.is_searching or not state.has_more_pages:
            return
        await self._search(state.token, append=True)

    async def wait_idle(self) -> None:
        """Wait until the pending debounced search, if any, has completed."""
        await self._timer.wait()

    def cancel(self) -> None:
        """Drop any pending search without changing the query."""
        self._timer.cancel()
        self._dispatch(QueryChanged(text=self._state.query_text, token=self._timer.token))

    async def _run_search(self, token: int) -> None:
        if not self._timer.is_current(token):
            return
        await self._search(token, append=False)

    async def _search(self, token: int, append: bool) -> None:
        self._dispatch(SearchStarted(token=token, append=append))
        query = self._state.query_text.strip()
        page = self._state.current_page
        try:
            response = await self._search_page(query, page)
        except AnidexError as exc:
            self._dispatch(
                SearchFailed(
                    kind=getattr(exc, "kind", None),
                    message=getattr(exc, "user_message", str(exc)),
                    token=token,
                    append=append,
                )
            )
            return
        except BaseException as exc:
            # Clear the busy flag before propagating.
            self._dispatch(
                SearchFailed(
                    kind=None,
                    message=str(exc) or type(exc).__name__,
                    token=token,
                    append=append,
                )
            )
            raise
        self._dispatch(
            ResultsLoaded(
                items=tuple(response.data),
                has_more=response.has_more_pages,
                token=token,
                append=append,
            )
        )

    def _dispatch(self, event: SearchEvent) -> None:
        new_state = reduce_search(self._state, event)
        if new_state is self._state:
            logger.debug("Ignoring stale search event %s", type(event).__name__)
            return
        self._state = new_state
        self._channel.publish(new_state)
