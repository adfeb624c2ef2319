"""HTTP client module for anidex.

Provides the rate-limited request pipeline and the Jikan endpoint wrappers
built on it.

Classes:
    :class:`RateLimiter` -- minimum spacing between request starts.
    :class:`RequestPipeline` -- rate-limited, classifying GET pipeline over
    :class:`httpx.AsyncClient`.
    :class:`RequestOutcome` -- success/failure result variant.
    :class:`JikanClient` -- parameter-encoding endpoint wrappers.

Example::

    from anidex.client import JikanClient, RateLimiter, RequestPipeline

    async with RequestPipeline(RateLimiter()) as pipeline:
        top = await JikanClient(pipeline).get_top_anime()
"""

from anidex.client.jikan import JikanClient, ListType, current_season
from anidex.client.outcome import RequestOutcome
from anidex.client.pipeline import RequestPipeline
from anidex.client.rate_limiter import RateLimiter

__all__ = [
    "JikanClient",
    "ListType",
    "RateLimiter",
    "RequestOutcome",
    "RequestPipeline",
    "current_season",
]
