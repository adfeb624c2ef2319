"""Shared test fixtures for anidex.

Provides isolated config environments, output state management, a CLI
runner and builders for Jikan-shaped JSON payloads. Coroutine tests marked
``@pytest.mark.asyncio`` are run on a fresh event loop by the
:func:`pytest_pyfunc_call` hook below.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from anidex.output import OutputFormat, OutputManager, reset_output, set_output


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    marker = pyfuncitem.get_closest_marker("asyncio")
    if marker is None:
        return None
    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None
    fixtureinfo = getattr(pyfuncitem, "_fixtureinfo", None)
    if fixtureinfo is None:
        return None
    kwargs = {name: pyfuncitem.funcargs[name] for name in fixtureinfo.argnames}
    asyncio.run(test_func(**kwargs))
    return True


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams the
    cached references go stale once the test ends.
    """
    yield
    reset_output()
    logger = logging.getLogger("anidex")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------


def build_anime(mal_id: int, title: Optional[str] = None, **extra: Any) -> dict[str, Any]:
    """A minimal anime object in the API's snake_case wire shape."""
    data: dict[str, Any] = {
        "mal_id": mal_id,
        "title": title or f"Anime {mal_id}",
        "type": "TV",
        "episodes": 12,
        "status": "Finished Airing",
        "score": 8.5,
        "images": {
            "jpg": {
                "image_url": f"https://cdn.example.com/images/{mal_id}.jpg",
                "large_image_url": f"https://cdn.example.com/images/{mal_id}l.jpg",
            }
        },
        "genres": [{"mal_id": 1, "type": "anime", "name": "Action"}],
    }
    data.update(extra)
    return data


def build_page(
    ids: list[int] | range, has_next_page: Optional[bool] = True, page: int = 1
) -> dict[str, Any]:
    """A list response; ``has_next_page=None`` omits the pagination block."""
    payload: dict[str, Any] = {"data": [build_anime(i) for i in ids]}
    if has_next_page is not None:
        payload["pagination"] = {
            "last_visible_page": 10,
            "has_next_page": has_next_page,
            "current_page": page,
            "items": {"count": len(ids), "total": 200, "per_page": 20},
        }
    return payload


@pytest.fixture
def anime_payload() -> Callable[..., dict[str, Any]]:
    return build_anime


@pytest.fixture
def page_payload() -> Callable[..., dict[str, Any]]:
    return build_page


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME and XDG_DATA_HOME to
    subdirectories of tmp_path, clears the ANIDEX_* overrides and changes
    the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("anidex.config._is_xdg_platform", lambda: True)

    for var in ["ANIDEX_BASE_URL", "ANIDEX_MIN_INTERVAL"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, PLAIN-format OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager for the test."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
