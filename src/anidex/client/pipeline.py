"""Rate-limited asynchronous request pipeline with typed failures.

This module provides :class:`RequestPipeline`, the only path by which anidex
talks to the catalog API. It wraps :class:`httpx.AsyncClient` and layers on:

- **Rate limiting** -- every call first awaits a slot from the shared
  :class:`~anidex.client.rate_limiter.RateLimiter`.
- **Timeouts** -- a per-request timeout plus a total resource deadline.
- **Connectivity wait** -- while the host is unreachable the pipeline keeps
  reconnecting until the resource deadline instead of failing at once.
- **Classification** -- every failure becomes exactly one
  :class:`~anidex.exceptions.ErrorKind`.
- **Typed decoding** -- bodies are validated into Pydantic models.

The pipeline never retries a delivered request. Retry policy belongs to the
caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from anidex.client.outcome import RequestOutcome
from anidex.client.rate_limiter import RateLimiter
from anidex.exceptions import (
    DecodingError,
    InvalidEndpointError,
    NetworkError,
    RateLimitedError,
    RequestError,
    UnexpectedStatusError,
)
from anidex.models import RequestConfig

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

HTTP_TOO_MANY_REQUESTS = 429


class RequestPipeline:
    """Serialises GET requests through a rate limiter and decodes typed results.

    Must be used as an async context manager so the underlying transport is
    opened and closed exactly once per pipeline lifetime.

    Args:
        rate_limiter: Limiter shared with every other pipeline user.
        config: Base address and timeout settings.
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).

    Example::

        async with RequestPipeline(limiter, RequestConfig()) as pipeline:
            outcome = await pipeline.fetch("/anime/1", SingleAnimeResponse)
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._config = config or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self._config.base_url

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> RequestPipeline:
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._config.timeout),
            verify=self._config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def fetch(
        self,
        path: str,
        model: type[ModelT],
        params: Optional[dict[str, Any]] = None,
    ) -> RequestOutcome[ModelT]:
        """Fetch *path* and decode the body into *model*.

        Args:
            path: Endpoint path appended to the configured base address.
            model: Pydantic model describing the expected body.
            params: Query parameters; ``None`` values are dropped.

        Returns:
            A :class:`RequestOutcome` holding either the decoded model or the
            classified error. Classified failures are never raised from here.
        """
        assert self._client is not None, "Pipeline not initialised -- use as async context manager"

        await self._rate_limiter.await_slot()

        try:
            url = self._build_url(path)
            query = {k: v for k, v in (params or {}).items() if v is not None}
            response = await self._send(url, query)
            self._classify_status(response)
            value = self._decode(response, model)
        except RequestError as exc:
            logger.warning("GET %s failed (%s): %s", path, exc.kind.value, exc)
            return RequestOutcome.failure(exc)

        logger.debug("GET %s -> HTTP %s", path, response.status_code)
        return RequestOutcome.success(value)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _build_url(self, path: str) -> httpx.URL:
        """Compose base address and path, rejecting anything unparseable."""
        raw = f"{self._config.base_url.rstrip('/')}{path}"
        try:
            url = httpx.URL(raw)
        except httpx.InvalidURL as exc:
            raise InvalidEndpointError(f"Invalid URL: {raw}", cause=exc) from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidEndpointError(f"Invalid URL: {raw}")
        return url

    async def _send(self, url: httpx.URL, params: dict[str, Any]) -> httpx.Response:
        """Issue the GET within the resource deadline, mapping transport errors."""
        try:
            return await asyncio.wait_for(
                self._get_when_connected(url, params),
                timeout=self._config.resource_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise NetworkError(
                f"Request to {url} exceeded {self._config.resource_timeout}s",
                cause=exc,
            ) from exc
        except httpx.InvalidURL as exc:
            raise InvalidEndpointError(f"Invalid URL: {url}", cause=exc) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Request to {url} failed: {exc}", cause=exc) from exc

    async def _get_when_connected(
        self, url: httpx.URL, params: dict[str, Any]
    ) -> httpx.Response:
        """GET *url*, reconnecting while the host is unreachable.

        Only connection failures loop: the request never reached the server.
        The surrounding resource deadline bounds the wait.
        """
        assert self._client is not None
        while True:
            try:
                return await self._client.get(url, params=params)
            except httpx.ConnectError as exc:
                if not self._config.wait_for_connectivity:
                    raise
                logger.debug(
                    "No connectivity for %s (%s), waiting %.1fs",
                    url.host,
                    exc,
                    self._config.connectivity_poll_interval,
                )
                await asyncio.sleep(self._config.connectivity_poll_interval)

    @staticmethod
    def _classify_status(response: httpx.Response) -> None:
        status = response.status_code
        if status == HTTP_TOO_MANY_REQUESTS:
            raise RateLimitedError("HTTP 429: rate limit exceeded")
        if not 200 <= status <= 299:
            raise UnexpectedStatusError(status)

    @staticmethod
    def _decode(response: httpx.Response, model: type[ModelT]) -> ModelT:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as exc:
            raise DecodingError(
                f"Response is not a valid {model.__name__}", cause=exc
            ) from exc
