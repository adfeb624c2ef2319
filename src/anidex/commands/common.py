"""Helpers shared by the CLI commands.

Commands are synchronous Typer callbacks. Each one resolves the
configuration, opens an :class:`~anidex.context.AppContext` and runs its
async work on a fresh event loop via :func:`run`.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, NoReturn, Optional, TypeVar

import typer

from anidex.context import AppContext
from anidex.exceptions import AnidexError, ErrorKind, exit_code_for
from anidex.favorites import FavoritesStore
from anidex.models import GlobalConfig
from anidex.output import error

T = TypeVar("T")


def context_option(ctx: typer.Context, name: str, default: Any = None) -> Any:
    """Read a root-callback option stored on ``ctx.obj``."""
    root = ctx.find_root()
    if not isinstance(root.obj, dict):
        return default
    return root.obj.get(name, default)


def load_config(ctx: typer.Context) -> GlobalConfig:
    from anidex.config import resolve_config

    return resolve_config(cli_base_url=context_option(ctx, "base_url"))


def create_context(config: GlobalConfig) -> AppContext:
    """Build the services for one command invocation."""
    return AppContext(config)


def run(ctx: typer.Context, work: Callable[[AppContext], Awaitable[T]]) -> T:
    """Run ``work(app_context)`` to completion on a new event loop.

    :class:`~anidex.exceptions.AnidexError` is reported on stderr and turned
    into ``typer.Exit`` with the error's exit code.
    """

    async def _main() -> T:
        async with create_context(config) as app_context:
            return await work(app_context)

    try:
        config = load_config(ctx)
        return asyncio.run(_main())
    except AnidexError as exc:
        report(exc)


def report(exc: AnidexError) -> NoReturn:
    error(getattr(exc, "user_message", None) or str(exc))
    raise typer.Exit(code=exc.exit_code) from None


def fail(message: str, kind: Optional[ErrorKind] = None) -> NoReturn:
    """Report a failure captured by a state machine and exit."""
    error(message)
    raise typer.Exit(code=exit_code_for(kind))


def open_favorites() -> FavoritesStore:
    try:
        return FavoritesStore()
    except AnidexError as exc:
        report(exc)
