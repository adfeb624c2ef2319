"""Cache commands -- inspect and empty the image cache."""

from __future__ import annotations

from typing import Any

import typer

from anidex.commands.common import context_option, run
from anidex.context import AppContext
from anidex.output import OutputFormat, format_response, get_output, info, success

cache_app = typer.Typer(no_args_is_help=True)


def _human_size(num_bytes: int) -> str:
    size = float(num_bytes)
    for unit in ("B", "KiB", "MiB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GiB"


@cache_app.command("info")
def cache_info(ctx: typer.Context) -> None:
    """Show where the image cache lives and how much it holds."""

    async def _stats(app_context: AppContext) -> dict[str, Any]:
        return app_context.assets.stats()

    stats = run(ctx, _stats)
    if get_output().format == OutputFormat.JSON:
        format_response(stats)
        return
    info(f"Cache directory: {stats['directory']}")
    format_response(
        {
            "files": stats["disk_files"],
            "size": _human_size(stats["disk_bytes"]),
        }
    )


@cache_app.command("clear")
def cache_clear(ctx: typer.Context) -> None:
    """Delete every cached image.

    Asks for confirmation unless ``--force`` is given.
    """
    if not context_option(ctx, "force", False):
        if not typer.confirm("Delete all cached images?"):
            info("Cancelled.")
            raise typer.Exit()

    async def _clear(app_context: AppContext) -> None:
        app_context.assets.clear_cache()

    run(ctx, _clear)
    success("Image cache cleared.")
