"""Tests for the paginated list state machine."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional

import pytest

from anidex.exceptions import ErrorKind, NetworkError, RateLimitedError
from anidex.models import AnimeResponse
from anidex.state.paginated import (
    ListState,
    LoadInitialStarted,
    PageLoaded,
    PaginatedList,
    Phase,
    reduce,
)


class FakePages:
    """Page fetcher serving 20 items per page, with scripted failures and gates."""

    def __init__(self, page_payload: Callable[..., dict[str, Any]], last_page: int = 5) -> None:
        self._page_payload = page_payload
        self.last_page = last_page
        self.requested: list[int] = []
        self.failures: dict[int, Exception] = {}
        self.gates: dict[int, asyncio.Event] = {}

    async def __call__(self, page: int) -> AnimeResponse:
        self.requested.append(page)
        gate = self.gates.get(page)
        if gate is not None:
            await gate.wait()
        error = self.failures.pop(page, None)
        if error is not None:
            raise error
        start = (page - 1) * 20 + 1
        payload = self._page_payload(
            range(start, start + 20), has_next_page=page < self.last_page, page=page
        )
        return AnimeResponse.model_validate(payload)


@pytest.fixture()
def pages(page_payload) -> FakePages:
    return FakePages(page_payload)


class TestInitialLoad:
    @pytest.mark.asyncio
    async def test_loads_first_page(self, pages: FakePages) -> None:
        browser = PaginatedList(pages)
        assert browser.phase is Phase.IDLE

        await browser.load_initial()

        state = browser.state
        assert len(state.items) == 20
        assert state.current_page == 1
        assert state.has_more_pages is True
        assert browser.phase is Phase.LOADED
        assert pages.requested == [1]

    @pytest.mark.asyncio
    async def test_failure_sets_error(self, pages: FakePages) -> None:
        pages.failures[1] = RateLimitedError("429")
        browser = PaginatedList(pages)

        await browser.load_initial()

        assert browser.phase is Phase.ERROR
        assert browser.state.last_error is ErrorKind.RATE_LIMITED
        assert browser.state.error_message == "Rate limit exceeded. Please wait a moment."
        assert not browser.state.is_loading_initial

    @pytest.mark.asyncio
    async def test_missing_pagination_means_no_more_pages(self, page_payload) -> None:
        async def fetch(page: int) -> AnimeResponse:
            return AnimeResponse.model_validate(page_payload([1, 2], has_next_page=None))

        browser = PaginatedList(fetch)
        await browser.load_initial()
        assert browser.state.has_more_pages is False

    @pytest.mark.asyncio
    async def test_refresh_replaces_items_and_clears_error(self, pages: FakePages) -> None:
        browser = PaginatedList(pages)
        await browser.load_initial()
        await browser.load_more()
        pages.failures[3] = NetworkError("down")
        await browser.load_more()
        assert browser.phase is Phase.ERROR

        await browser.refresh()

        assert len(browser.state.items) == 20
        assert browser.state.current_page == 1
        assert browser.state.error_message is None
        assert browser.phase is Phase.LOADED


class TestLoadMore:
    @pytest.mark.asyncio
    async def test_appends_next_page(self, pages: FakePages) -> None:
        browser = PaginatedList(pages)
        await browser.load_initial()
        await browser.load_more()

        assert len(browser.state.items) == 40
        assert browser.state.current_page == 2
        assert browser.state.items[20].malId == 21
        assert pages.requested == [1, 2]

    @pytest.mark.asyncio
    async def test_failure_keeps_items_and_restores_page(self, pages: FakePages) -> None:
        browser = PaginatedList(pages)
        await browser.load_initial()
        pages.failures[2] = NetworkError("connection reset")

        await browser.load_more()

        assert len(browser.state.items) == 20
        assert browser.state.current_page == 1
        assert browser.state.last_error is ErrorKind.NETWORK
        assert not browser.state.is_loading_more

    @pytest.mark.asyncio
    async def test_retry_requests_same_page(self, pages: FakePages) -> None:
        browser = PaginatedList(pages)
        await browser.load_initial()
        pages.failures[2] = NetworkError("connection reset")
        await browser.load_more()

        await browser.load_more()

        assert pages.requested == [1, 2, 2]
        assert len(browser.state.items) == 40
        assert browser.state.error_message is None

    @pytest.mark.asyncio
    async def test_noop_when_no_more_pages(self, page_payload) -> None:
        pages = FakePages(page_payload, last_page=1)
        browser = PaginatedList(pages)
        await browser.load_initial()

        await browser.load_more()

        assert pages.requested == [1]
        assert browser.state.current_page == 1

    @pytest.mark.asyncio
    async def test_noop_before_initial_load(self, pages: FakePages) -> None:
        browser = PaginatedList(pages)
        await browser.load_more()
        assert pages.requested == []
        assert browser.state == ListState()

    @pytest.mark.asyncio
    async def test_noop_while_already_loading_more(self, pages: FakePages) -> None:
        browser = PaginatedList(pages)
        await browser.load_initial()
        pages.gates[2] = asyncio.Event()

        first = asyncio.create_task(browser.load_more())
        await asyncio.sleep(0)
        await browser.load_more()
        pages.gates[2].set()
        await first

        assert pages.requested == [1, 2]
        assert browser.state.current_page == 2

    @pytest.mark.asyncio
    async def test_stale_result_after_refresh_is_ignored(self, pages: FakePages) -> None:
        browser = PaginatedList(pages)
        await browser.load_initial()
        pages.gates[2] = asyncio.Event()

        more = asyncio.create_task(browser.load_more())
        await asyncio.sleep(0)
        await browser.refresh()
        pages.gates[2].set()
        await more

        assert len(browser.state.items) == 20
        assert browser.state.current_page == 1
        assert not browser.state.is_busy

    @pytest.mark.asyncio
    async def test_unexpected_exception_clears_busy_flag(self, pages: FakePages) -> None:
        browser = PaginatedList(pages)
        await browser.load_initial()
        pages.failures[2] = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await browser.load_more()

        assert not browser.state.is_busy
        assert browser.state.current_page == 1


class TestSubscription:
    @pytest.mark.asyncio
    async def test_snapshots_are_published(self, pages: FakePages) -> None:
        browser = PaginatedList(pages)
        seen: list[ListState] = []
        unsubscribe = browser.subscribe(seen.append)

        await browser.load_initial()
        await browser.load_more()
        unsubscribe()
        await browser.load_more()

        assert [s.phase for s in seen] == [
            Phase.LOADING_INITIAL,
            Phase.LOADED,
            Phase.LOADING_MORE,
            Phase.LOADED,
        ]
        assert all(not (s.is_loading_initial and s.is_loading_more) for s in seen)


class TestReduce:
    def test_is_pure(self) -> None:
        before = ListState()
        after = reduce(before, LoadInitialStarted())
        assert before == ListState()
        assert after.is_loading_initial
        assert after.generation == 1

    def test_result_for_old_generation_is_ignored(self) -> None:
        state = reduce(ListState(), LoadInitialStarted())
        stale = PageLoaded(items=(), has_more=False, generation=state.generation - 1, append=False)
        assert reduce(state, stale) is state

    def test_unknown_event(self) -> None:
        event: Optional[object] = object()
        with pytest.raises(TypeError):
            reduce(ListState(), event)  # type: ignore[arg-type]
