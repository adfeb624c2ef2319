"""Service wiring for one anidex session.

:class:`AppContext` builds the rate limiter, request pipeline, catalog client
and asset cache from a :class:`~anidex.models.GlobalConfig` and owns their
lifetime. Every service in a context shares the same limiter, so all API
traffic from one session is spaced by ``rate_limit.minimum_interval``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import httpx

from anidex.cache.asset_cache import AssetCache
from anidex.client.jikan import JikanClient, ListType
from anidex.client.pipeline import RequestPipeline
from anidex.client.rate_limiter import RateLimiter
from anidex.config import get_cache_dir
from anidex.models import AnimeResponse, GlobalConfig
from anidex.state.detail import AnimeDetailLoader
from anidex.state.paginated import PaginatedList
from anidex.state.search import SearchSession

logger = logging.getLogger(__name__)


class AppContext:
    """Async context manager holding the session's services.

    Args:
        config: Resolved configuration.
        cache_dir: Override for the asset cache directory.
        transport: Optional httpx transport shared by the pipeline and the
            asset cache (``httpx.MockTransport`` in tests).

    Example::

        async with AppContext(resolve_config()) as ctx:
            response = await ctx.jikan.get_top_anime()
    """

    def __init__(
        self,
        config: GlobalConfig,
        cache_dir: Optional[Path] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.rate_limiter = RateLimiter(config.rate_limit.minimum_interval)
        self.pipeline = RequestPipeline(self.rate_limiter, config.request, transport=transport)
        self.jikan = JikanClient(self.pipeline)
        directory = cache_dir or get_cache_dir() / config.cache.directory_name
        self.assets = AssetCache(
            directory,
            config.cache,
            transport=transport,
            timeout=config.request.timeout,
        )

    async def __aenter__(self) -> AppContext:
        await self.pipeline.__aenter__()
        logger.debug("Session started against %s", self.pipeline.base_url)
        return self

    async def __aexit__(self, *args: object) -> None:
        try:
            await self.pipeline.__aexit__(*args)
        finally:
            await self.assets.close()

    # ------------------------------------------------------------------ #
    # State machine factories
    # ------------------------------------------------------------------ #

    def list_browser(self, list_type: ListType) -> PaginatedList:
        return PaginatedList(self.jikan.page_fetcher(list_type))

    def search_session(self, debounce_seconds: Optional[float] = None) -> SearchSession:
        """A search session using the configured page size and quiet period."""
        page_size = self.config.search.page_size
        jikan = self.jikan

        async def _search_page(query: str, page: int) -> AnimeResponse:
            return await jikan.search_anime(query, page=page, limit=page_size)

        if debounce_seconds is None:
            debounce_seconds = self.config.search.debounce_seconds
        return SearchSession(_search_page, debounce_seconds=debounce_seconds)

    def detail_loader(self, anime_id: int) -> AnimeDetailLoader:
        return AnimeDetailLoader(self.jikan, anime_id)
