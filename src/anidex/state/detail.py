"""Detail-view aggregation: one anime plus its characters and recommendations.

The three requests run concurrently. Only the primary detail request can put
the view into an error state; the related lists are decoration, so their
failures are logged and leave the list empty.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional

from anidex.client.jikan import JikanClient
from anidex.exceptions import AnidexError, ErrorKind
from anidex.models import Anime, Character, Recommendation, RecommendationEntry
from anidex.state.channel import Listener, StateChannel

logger = logging.getLogger(__name__)

MAX_CHARACTERS = 10
MAX_RECOMMENDATIONS = 6


@dataclass(frozen=True)
class DetailState:
    anime: Optional[Anime] = None
    characters: tuple[Character, ...] = ()
    recommendations: tuple[RecommendationEntry, ...] = ()
    is_loading: bool = False
    error_message: Optional[str] = None
    last_error: Optional[ErrorKind] = None


def unique_recommendations(
    recommendations: Iterable[Recommendation],
    anime_id: int,
    limit: int = MAX_RECOMMENDATIONS,
) -> tuple[RecommendationEntry, ...]:
    """Flatten recommendation entries into a short list of distinct titles.

    Entries pointing back at *anime_id* are dropped and repeats are removed,
    keeping the first occurrence. At most *limit* entries are returned.
    """
    seen: set[int] = set()
    entries: list[RecommendationEntry] = []
    for recommendation in recommendations:
        for entry in recommendation.entry:
            if entry.malId == anime_id or entry.malId in seen:
                continue
            seen.add(entry.malId)
            entries.append(entry)
            if len(entries) >= limit:
                return tuple(entries)
    return tuple(entries)


class AnimeDetailLoader:
    """Loads everything the detail view shows for one anime.

    Args:
        client: Catalog client used for the three requests.
        anime_id: The anime to load.
    """

    def __init__(self, client: JikanClient, anime_id: int) -> None:
        self._client = client
        self.anime_id = anime_id
        self._state = DetailState()
        self._channel: StateChannel[DetailState] = StateChannel()

    @property
    def state(self) -> DetailState:
        return self._state

    def subscribe(self, listener: Listener[DetailState]) -> Callable[[], None]:
        return self._channel.subscribe(listener)

    async def load_details(self) -> None:
        """Fetch details, characters and recommendations. No-op while loading."""
        if self._state.is_loading:
            return
        self._set(
            replace(self._state, is_loading=True, error_message=None, last_error=None)
        )

        try:
            anime, characters, recommendations = await asyncio.gather(
                self._load_anime(),
                self._load_characters(),
                self._load_recommendations(),
            )
        except BaseException as exc:
            self._set(
                replace(
                    self._state,
                    is_loading=False,
                    error_message=str(exc) or type(exc).__name__,
                )
            )
            raise
        if isinstance(anime, AnidexError):
            self._set(
                replace(
                    self._state,
                    is_loading=False,
                    error_message=getattr(anime, "user_message", str(anime)),
                    last_error=getattr(anime, "kind", None),
                    characters=characters,
                    recommendations=recommendations,
                )
            )
            return
        self._set(
            DetailState(
                anime=anime,
                characters=characters,
                recommendations=recommendations,
                is_loading=False,
            )
        )

    async def _load_anime(self) -> Anime | AnidexError:
        try:
            response = await self._client.get_anime_details(self.anime_id)
        except AnidexError as exc:
            logger.warning("Failed to load anime %d: %s", self.anime_id, exc)
            return exc
        return response.data

    async def _load_characters(self) -> tuple[Character, ...]:
        try:
            response = await self._client.get_anime_characters(self.anime_id)
        except AnidexError as exc:
            logger.warning("Failed to load characters for %d: %s", self.anime_id, exc)
            return ()
        return tuple(response.data[:MAX_CHARACTERS])

    async def _load_recommendations(self) -> tuple[RecommendationEntry, ...]:
        try:
            response = await self._client.get_anime_recommendations(self.anime_id)
        except AnidexError as exc:
            logger.warning(
                "Failed to load recommendations for %d: %s", self.anime_id, exc
            )
            return ()
        return unique_recommendations(response.data, self.anime_id)

    def _set(self, state: DetailState) -> None:
        self._state = state
        self._channel.publish(state)
