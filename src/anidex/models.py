"""Canonical Pydantic models shared across all anidex modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Wire models** -- decoded from Jikan v4 JSON bodies by
:class:`~anidex.client.pipeline.RequestPipeline`:
    :class:`Anime` and its nested parts, :class:`Pagination`,
    :class:`Character`, :class:`Recommendation`, and the response envelopes
    :class:`AnimeResponse`, :class:`SingleAnimeResponse`,
    :class:`CharacterResponse`, :class:`RecommendationResponse`.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`RateLimitConfig`, :class:`CacheConfig`,
    :class:`SearchConfig`, :class:`OutputConfig`, and :class:`GlobalConfig`.

The API guarantees very little, so every wire field is optional apart from
record identities. In-memory attribute names are camel-case; the snake-case
wire names are declared as aliases, and ``populate_by_name`` lets tests and
callers build models with either spelling.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class WireModel(BaseModel):
    """Base for models decoded from API responses. Unknown keys are dropped."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# --- Shared parts ---


class ImageFormat(WireModel):
    imageUrl: Optional[str] = Field(default=None, alias="image_url")
    smallImageUrl: Optional[str] = Field(default=None, alias="small_image_url")
    largeImageUrl: Optional[str] = Field(default=None, alias="large_image_url")


class AnimeImages(WireModel):
    jpg: Optional[ImageFormat] = None
    webp: Optional[ImageFormat] = None


class Trailer(WireModel):
    youtubeId: Optional[str] = Field(default=None, alias="youtube_id")
    url: Optional[str] = None
    embedUrl: Optional[str] = Field(default=None, alias="embed_url")


class Title(WireModel):
    type: Optional[str] = None
    title: Optional[str] = None


class DateProp(WireModel):
    day: Optional[int] = None
    month: Optional[int] = None
    year: Optional[int] = None


class AiredProp(WireModel):
    from_: Optional[DateProp] = Field(default=None, alias="from")
    to: Optional[DateProp] = None


class Aired(WireModel):
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    prop: Optional[AiredProp] = None


class Broadcast(WireModel):
    day: Optional[str] = None
    time: Optional[str] = None
    timezone: Optional[str] = None
    string: Optional[str] = None


class MALEntity(WireModel):
    """A studio, genre, producer or other named MyAnimeList entity."""

    malId: int = Field(alias="mal_id")
    type: Optional[str] = None
    name: str
    url: Optional[str] = None


# --- Anime ---


class Anime(WireModel):
    """A single anime record as returned by list and detail endpoints.

    The ``display_*`` properties produce the fallback strings shown by list
    and detail views when a field is missing.
    """

    malId: int = Field(alias="mal_id")
    url: Optional[str] = None
    images: Optional[AnimeImages] = None
    trailer: Optional[Trailer] = None
    approved: Optional[bool] = None
    titles: Optional[list[Title]] = None
    title: Optional[str] = None
    titleEnglish: Optional[str] = Field(default=None, alias="title_english")
    titleJapanese: Optional[str] = Field(default=None, alias="title_japanese")
    type: Optional[str] = None
    source: Optional[str] = None
    episodes: Optional[int] = None
    status: Optional[str] = None
    airing: Optional[bool] = None
    aired: Optional[Aired] = None
    duration: Optional[str] = None
    rating: Optional[str] = None
    score: Optional[float] = None
    scoredBy: Optional[int] = Field(default=None, alias="scored_by")
    rank: Optional[int] = None
    popularity: Optional[int] = None
    members: Optional[int] = None
    favorites: Optional[int] = None
    synopsis: Optional[str] = None
    background: Optional[str] = None
    season: Optional[str] = None
    year: Optional[int] = None
    broadcast: Optional[Broadcast] = None
    producers: Optional[list[MALEntity]] = None
    licensors: Optional[list[MALEntity]] = None
    studios: Optional[list[MALEntity]] = None
    genres: Optional[list[MALEntity]] = None
    themes: Optional[list[MALEntity]] = None
    demographics: Optional[list[MALEntity]] = None

    @property
    def display_title(self) -> str:
        return self.titleEnglish or self.title or "Unknown Title"

    @property
    def image_url(self) -> Optional[str]:
        """Large JPEG cover, falling back to the default-size JPEG."""
        jpg = self.images.jpg if self.images else None
        if jpg is None:
            return None
        return jpg.largeImageUrl or jpg.imageUrl

    @property
    def genres_list(self) -> str:
        if self.genres is None:
            return "N/A"
        return ", ".join(genre.name for genre in self.genres)

    @property
    def display_score(self) -> str:
        if self.score is None:
            return "N/A"
        return f"{self.score:.2f}"

    @property
    def display_episodes(self) -> str:
        if self.episodes is None:
            return "Unknown"
        return f"{self.episodes} episodes"


# --- Pagination ---


class PaginationItems(WireModel):
    count: Optional[int] = None
    total: Optional[int] = None
    perPage: Optional[int] = Field(default=None, alias="per_page")


class Pagination(WireModel):
    lastVisiblePage: Optional[int] = Field(default=None, alias="last_visible_page")
    hasNextPage: Optional[bool] = Field(default=None, alias="has_next_page")
    currentPage: Optional[int] = Field(default=None, alias="current_page")
    items: Optional[PaginationItems] = None


# --- Characters ---


class CharacterImages(WireModel):
    jpg: Optional[ImageFormat] = None
    webp: Optional[ImageFormat] = None


class Character(WireModel):
    """A character appearing in an anime.

    The characters endpoint nests the character under a ``character`` key
    next to its ``role``; both the nested and the flat shape are accepted.
    """

    malId: int = Field(alias="mal_id")
    url: Optional[str] = None
    images: Optional[CharacterImages] = None
    name: str
    nameKanji: Optional[str] = Field(default=None, alias="name_kanji")
    nicknames: Optional[list[str]] = None
    favorites: Optional[int] = None
    about: Optional[str] = None
    role: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_role_wrapper(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("character"), dict):
            flat = dict(data["character"])
            flat.setdefault("role", data.get("role"))
            return flat
        return data


# --- Recommendations ---


class RecommendationEntry(WireModel):
    malId: int = Field(alias="mal_id")
    url: Optional[str] = None
    images: Optional[AnimeImages] = None
    title: Optional[str] = None


class RecommendationUser(WireModel):
    url: Optional[str] = None
    username: Optional[str] = None


class Recommendation(WireModel):
    """A recommendation pairing; ``entry`` holds the recommended anime.

    Per-anime recommendations carry a single entry object while the global
    feed carries a list, so a lone object is wrapped into a list.
    """

    malId: Optional[str] = Field(default=None, alias="mal_id")
    entry: list[RecommendationEntry] = Field(default_factory=list)
    content: Optional[str] = None
    user: Optional[RecommendationUser] = None

    @field_validator("entry", mode="before")
    @classmethod
    def _wrap_single_entry(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return [value]
        return value


# --- Response envelopes ---


class AnimeResponse(WireModel):
    data: list[Anime]
    pagination: Optional[Pagination] = None

    @property
    def has_more_pages(self) -> bool:
        """The has-more signal; an absent signal counts as ``False``."""
        if self.pagination is None or self.pagination.hasNextPage is None:
            return False
        return self.pagination.hasNextPage


class SingleAnimeResponse(WireModel):
    data: Anime


class CharacterResponse(WireModel):
    data: list[Character]


class RecommendationResponse(WireModel):
    data: list[Recommendation]


# --- Favorites ---


class FavoriteRecord(BaseModel):
    """A locally saved favorite, keyed by ``malId`` and ordered by ``addedDate``."""

    model_config = ConfigDict(populate_by_name=True)

    malId: int
    title: str
    imageUrl: Optional[str] = None
    score: float = 0.0
    episodes: int = 0
    synopsis: Optional[str] = None
    genres: Optional[str] = None
    rating: Optional[str] = None
    status: Optional[str] = None
    type: Optional[str] = None
    addedDate: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_anime(cls, anime: Anime) -> FavoriteRecord:
        return cls(
            malId=anime.malId,
            title=anime.display_title,
            imageUrl=anime.image_url,
            score=anime.score or 0.0,
            episodes=anime.episodes or 0,
            synopsis=anime.synopsis,
            genres=anime.genres_list,
            rating=anime.rating,
            status=anime.status,
            type=anime.type,
        )


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP settings applied to every API call."""

    base_url: str = Field(
        default="https://api.jikan.moe/v4", description="API base address"
    )
    timeout: float = Field(default=30, description="Per-request timeout in seconds")
    resource_timeout: float = Field(
        default=60, description="Total time allowed for one request, in seconds"
    )
    wait_for_connectivity: bool = Field(
        default=True,
        description="Keep reconnecting until the resource timeout when offline",
    )
    connectivity_poll_interval: float = Field(
        default=1.0, description="Seconds between reconnect attempts while offline"
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class RateLimitConfig(BaseModel):
    """Spacing enforced between request starts."""

    minimum_interval: float = Field(
        default=0.5, description="Minimum seconds between request starts"
    )


class CacheConfig(BaseModel):
    """Asset cache settings."""

    enabled: bool = Field(default=True, description="Persist assets to disk")
    ttl_seconds: int = Field(default=86400, description="Memory-tier entry lifetime")
    max_entries: int = Field(default=100, description="Memory-tier entry limit")
    max_bytes: int = Field(
        default=50 * 1024 * 1024, description="Memory-tier total payload budget"
    )
    directory_name: str = Field(
        default="ImageCache", description="Sub-directory of the cache dir"
    )


class SearchConfig(BaseModel):
    """Search input behaviour."""

    debounce_seconds: float = Field(
        default=0.5, description="Quiet period before a query is sent"
    )
    page_size: int = Field(default=20, description="Results requested per page")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/anidex/config.json``.

    Loaded and saved by :func:`~anidex.config.load_global_config` and
    :func:`~anidex.config.save_global_config`. Environment variables and CLI
    flags override it; see :func:`~anidex.config.resolve_config`.
    """

    request: RequestConfig = Field(default_factory=RequestConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
