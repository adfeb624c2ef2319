"""Paginated list-browsing state machine.

The state is an immutable :class:`ListState` snapshot; every change goes
through the pure transition function :func:`reduce`. :class:`PaginatedList`
drives the transitions around an ``async (page) -> AnimeResponse`` fetcher
and publishes each new snapshot on a :class:`~anidex.state.channel.StateChannel`.

Phases::

    IDLE -> LOADING_INITIAL -> LOADED <-> LOADING_MORE
    LOADED -> ERROR on a failed fetch, ERROR -> LOADING_INITIAL on refresh

Results are tagged with the ``generation`` that requested them. Starting a
new initial load bumps the generation, so a "load more" still in flight from
before the refresh is recognised as stale and applied as a no-op.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Optional, Union

from anidex.exceptions import AnidexError, ErrorKind
from anidex.models import Anime, AnimeResponse
from anidex.state.channel import Listener, StateChannel

logger = logging.getLogger(__name__)

PageFetcher = Callable[[int], Awaitable[AnimeResponse]]


class Phase(str, enum.Enum):
    IDLE = "idle"
    LOADING_INITIAL = "loading_initial"
    LOADED = "loaded"
    LOADING_MORE = "loading_more"
    ERROR = "error"


@dataclass(frozen=True)
class ListState:
    """Snapshot of one paginated list.

    Invariant: ``is_loading_initial`` and ``is_loading_more`` are never both
    true.
    """

    items: tuple[Anime, ...] = ()
    current_page: int = 1
    is_loading_initial: bool = False
    is_loading_more: bool = False
    has_more_pages: bool = False
    last_error: Optional[ErrorKind] = None
    error_message: Optional[str] = None
    generation: int = 0
    loaded: bool = False

    @property
    def phase(self) -> Phase:
        if self.is_loading_initial:
            return Phase.LOADING_INITIAL
        if self.is_loading_more:
            return Phase.LOADING_MORE
        if self.error_message is not None:
            return Phase.ERROR
        if self.loaded:
            return Phase.LOADED
        return Phase.IDLE

    @property
    def is_busy(self) -> bool:
        return self.is_loading_initial or self.is_loading_more


# --- Events ---


@dataclass(frozen=True)
class LoadInitialStarted:
    pass


@dataclass(frozen=True)
class LoadMoreStarted:
    pass


@dataclass(frozen=True)
class PageLoaded:
    items: tuple[Anime, ...]
    has_more: bool
    generation: int
    append: bool


@dataclass(frozen=True)
class PageFailed:
    kind: Optional[ErrorKind]
    message: str
    generation: int
    append: bool


ListEvent = Union[LoadInitialStarted, LoadMoreStarted, PageLoaded, PageFailed]


def reduce(state: ListState, event: ListEvent) -> ListState:
    """Return the state that follows *state* after *event*."""
    if isinstance(event, LoadInitialStarted):
        return replace(
            state,
            current_page=1,
            is_loading_initial=True,
            is_loading_more=False,
            last_error=None,
            error_message=None,
            generation=state.generation + 1,
        )

    if isinstance(event, LoadMoreStarted):
        return replace(state, current_page=state.current_page + 1, is_loading_more=True)

    if isinstance(event, PageLoaded):
        if not _is_current(state, event.generation, event.append):
            return state
        if event.append:
            return replace(
                state,
                items=state.items + event.items,
                has_more_pages=event.has_more,
                is_loading_more=False,
                last_error=None,
                error_message=None,
            )
        return replace(
            state,
            items=event.items,
            has_more_pages=event.has_more,
            is_loading_initial=False,
            loaded=True,
        )

    if isinstance(event, PageFailed):
        if not _is_current(state, event.generation, event.append):
            return state
        if event.append:
            return replace(
                state,
                current_page=state.current_page - 1,
                is_loading_more=False,
                last_error=event.kind,
                error_message=event.message,
            )
        return replace(
            state,
            is_loading_initial=False,
            last_error=event.kind,
            error_message=event.message,
        )

    raise TypeError(f"Unknown list event: {event!r}")


def _is_current(state: ListState, generation: int, append: bool) -> bool:
    if generation != state.generation:
        return False
    return state.is_loading_more if append else state.is_loading_initial


class PaginatedList:
    """Drives a :class:`ListState` through initial loads, refreshes and "load more".

    Args:
        fetch_page: ``async (page) -> AnimeResponse``; raises
            :class:`~anidex.exceptions.AnidexError` subclasses on failure.
        state: Optional starting snapshot.

    Example::

        top = PaginatedList(jikan.page_fetcher(ListType.TOP_RATED))
        top.subscribe(render)
        await top.load_initial()
        await top.load_more()
    """

    def __init__(self, fetch_page: PageFetcher, state: Optional[ListState] = None) -> None:
        self._fetch_page = fetch_page
        self._state = state or ListState()
        self._channel: StateChannel[ListState] = StateChannel()

    @property
    def state(self) -> ListState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    def subscribe(self, listener: Listener[ListState]) -> Callable[[], None]:
        return self._channel.subscribe(listener)

    async def load_initial(self) -> None:
        """Replace the items with page 1. No-op while an initial load runs."""
        if self._state.is_loading_initial:
            return
        self._dispatch(LoadInitialStarted())
        await self._fetch(1, self._state.generation, append=False)

    async def load_more(self) -> None:
        """Append the next page. No-op while busy or when no pages remain."""
        if self._state.is_busy or not self._state.has_more_pages:
            return
        self._dispatch(LoadMoreStarted())
        await self._fetch(self._state.current_page, self._state.generation, append=True)

    async def refresh(self) -> None:
        await self.load_initial()

    def _dispatch(self, event: ListEvent) -> None:
        new_state = reduce(self._state, event)
        if new_state is self._state:
            logger.debug("Ignoring stale list event %s", type(event).__name__)
            return
        self._state = new_state
        self._channel.publish(new_state)

    async def _fetch(self, page: int, generation: int, append: bool) -> None:
        try:
            response = await self._fetch_page(page)
        except AnidexError as exc:
            self._dispatch(
                PageFailed(
                    kind=getattr(exc, "kind", None),
                    message=getattr(exc, "user_message", str(exc)),
                    generation=generation,
                    append=append,
                )
            )
            return
        except BaseException as exc:
            # Clear the busy flag before propagating.
            self._dispatch(
                PageFailed(
                    kind=None,
                    message=str(exc) or type(exc).__name__,
                    generation=generation,
                    append=append,
                )
            )
            raise
        self._dispatch(
            PageLoaded(
                items=tuple(response.data),
                has_more=response.has_more_pages,
                generation=generation,
                append=append,
            )
        )
