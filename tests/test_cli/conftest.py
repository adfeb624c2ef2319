"""Fixtures for driving the Typer app against a fake catalog API."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from anidex.context import AppContext
from anidex.models import GlobalConfig

Route = Callable[[httpx.Request], httpx.Response]


class FakeApi:
    """MockTransport handler serving canned responses by URL path.

    Unrouted paths answer 404. Every request is recorded in ``requests``.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Route] = {}
        self.requests: list[httpx.Request] = []

    def json(self, path: str, payload: Any, status_code: int = 200) -> None:
        self.routes[path] = lambda request: httpx.Response(status_code, json=payload)

    def status(self, path: str, status_code: int) -> None:
        self.routes[path] = lambda request: httpx.Response(status_code)

    def content(self, path: str, body: bytes) -> None:
        self.routes[path] = lambda request: httpx.Response(200, content=body)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404)
        return route(request)


@pytest.fixture
def api(isolated_config, monkeypatch: pytest.MonkeyPatch) -> FakeApi:
    """Route every command's HTTP traffic to a :class:`FakeApi`.

    Rate limiting and the search quiet period are switched off so commands
    finish immediately.
    """
    fake = FakeApi()

    def _create_context(config: GlobalConfig) -> AppContext:
        config.rate_limit.minimum_interval = 0
        config.search.debounce_seconds = 0
        config.request.wait_for_connectivity = False
        return AppContext(config, transport=httpx.MockTransport(fake))

    monkeypatch.setattr("anidex.commands.common.create_context", _create_context)
    return fake
