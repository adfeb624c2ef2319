"""Endpoint wrappers for the Jikan v4 catalog.

Each method of :class:`JikanClient` encodes its parameters into a path and
query string, delegates to :meth:`RequestPipeline.fetch
<anidex.client.pipeline.RequestPipeline.fetch>`, and unwraps the outcome, so
classified failures surface as :class:`~anidex.exceptions.RequestError`
subclasses.
"""

from __future__ import annotations

import enum
from datetime import date
from typing import Awaitable, Callable, Optional

from anidex.client.pipeline import RequestPipeline
from anidex.models import (
    AnimeResponse,
    CharacterResponse,
    RecommendationResponse,
    SingleAnimeResponse,
)

DEFAULT_PAGE_SIZE = 20

PageFetcher = Callable[[int], Awaitable[AnimeResponse]]
"""``async (page) -> AnimeResponse``, the shape list state machines consume."""


class ListType(str, enum.Enum):
    """Browsable anime lists."""

    TOP_RATED = "top"
    POPULAR = "popular"
    UPCOMING = "upcoming"
    SEASONAL = "seasonal"


def current_season(month: int) -> str:
    """Map a calendar month (1-12) to its anime season."""
    if 1 <= month <= 3:
        return "winter"
    if 4 <= month <= 6:
        return "spring"
    if 7 <= month <= 9:
        return "summer"
    if 10 <= month <= 12:
        return "fall"
    raise ValueError(f"month must be between 1 and 12, got: {month}")


class JikanClient:
    """Typed access to the catalog endpoints used by anidex.

    Args:
        pipeline: The shared request pipeline.
        today: Returns the current date; used to default the seasonal list.
    """

    def __init__(
        self,
        pipeline: RequestPipeline,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._pipeline = pipeline
        self._today = today

    async def search_anime(
        self, query: str, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> AnimeResponse:
        """Search by title, most popular first."""
        outcome = await self._pipeline.fetch(
            "/anime",
            AnimeResponse,
            params={"q": query, "page": page, "limit": limit, "order_by": "popularity"},
        )
        return outcome.unwrap()

    async def get_top_anime(
        self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> AnimeResponse:
        outcome = await self._pipeline.fetch(
            "/top/anime", AnimeResponse, params={"page": page, "limit": limit}
        )
        return outcome.unwrap()

    async def get_seasonal_anime(
        self,
        year: Optional[int] = None,
        season: Optional[str] = None,
        page: int = 1,
    ) -> AnimeResponse:
        """Anime airing in *season* of *year*, defaulting to the current season."""
        today = self._today()
        year = year if year is not None else today.year
        season = season or current_season(today.month)
        outcome = await self._pipeline.fetch(
            f"/seasons/{year}/{season}", AnimeResponse, params={"page": page}
        )
        return outcome.unwrap()

    async def get_upcoming_anime(
        self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> AnimeResponse:
        outcome = await self._pipeline.fetch(
            "/seasons/upcoming", AnimeResponse, params={"page": page, "limit": limit}
        )
        return outcome.unwrap()

    async def get_anime_details(self, anime_id: int) -> SingleAnimeResponse:
        outcome = await self._pipeline.fetch(f"/anime/{anime_id}", SingleAnimeResponse)
        return outcome.unwrap()

    async def get_anime_characters(self, anime_id: int) -> CharacterResponse:
        outcome = await self._pipeline.fetch(
            f"/anime/{anime_id}/characters", CharacterResponse
        )
        return outcome.unwrap()

    async def get_anime_recommendations(self, anime_id: int) -> RecommendationResponse:
        outcome = await self._pipeline.fetch(
            f"/anime/{anime_id}/recommendations", RecommendationResponse
        )
        return outcome.unwrap()

    async def get_popular_anime(
        self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> AnimeResponse:
        """Currently airing anime ordered by popularity."""
        outcome = await self._pipeline.fetch(
            "/anime",
            AnimeResponse,
            params={
                "order_by": "popularity",
                "sort": "asc",
                "page": page,
                "limit": limit,
                "status": "airing",
            },
        )
        return outcome.unwrap()

    def page_fetcher(self, list_type: ListType) -> PageFetcher:
        """Return the ``async (page) -> AnimeResponse`` callable for *list_type*."""
        if list_type is ListType.TOP_RATED:
            return lambda page: self.get_top_anime(page=page)
        if list_type is ListType.POPULAR:
            return lambda page: self.get_popular_anime(page=page)
        if list_type is ListType.UPCOMING:
            return lambda page: self.get_upcoming_anime(page=page)
        return lambda page: self.get_seasonal_anime(page=page)
