"""Tests for session service wiring."""

from __future__ import annotations

import httpx
import pytest

from anidex.client.jikan import ListType
from anidex.context import AppContext
from anidex.models import GlobalConfig


def _config() -> GlobalConfig:
    config = GlobalConfig()
    config.rate_limit.minimum_interval = 0
    config.request.base_url = "https://api.example.com/v4"
    return config


class TestAppContext:
    def test_cache_dir_override(self, tmp_path) -> None:
        ctx = AppContext(_config(), cache_dir=tmp_path / "assets")
        assert ctx.assets.directory == tmp_path / "assets"
        assert (tmp_path / "assets").is_dir()

    def test_default_cache_directory(self, isolated_config) -> None:
        ctx = AppContext(GlobalConfig())
        assert ctx.assets.directory == isolated_config / "cache" / "anidex" / "ImageCache"

    @pytest.mark.asyncio
    async def test_list_browser_uses_the_pipeline(self, tmp_path, page_payload) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=page_payload([1, 2], has_next_page=False))

        async with AppContext(
            _config(), cache_dir=tmp_path, transport=httpx.MockTransport(handler)
        ) as ctx:
            browser = ctx.list_browser(ListType.TOP_RATED)
            await browser.load_initial()

        assert [a.malId for a in browser.state.items] == [1, 2]
        assert seen[0].url.path == "/v4/top/anime"
        assert ctx.rate_limiter.last_request_time is not None

    @pytest.mark.asyncio
    async def test_search_session_uses_configured_page_size(
        self, tmp_path, page_payload
    ) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=page_payload([3], has_next_page=False))

        config = _config()
        config.search.page_size = 5
        async with AppContext(
            config, cache_dir=tmp_path, transport=httpx.MockTransport(handler)
        ) as ctx:
            session = ctx.search_session(debounce_seconds=0)
            session.set_query("trigun")
            await session.wait_idle()

        assert [a.malId for a in session.state.results] == [3]
        assert seen[0].url.params["limit"] == "5"
