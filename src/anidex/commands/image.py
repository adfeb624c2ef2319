"""Image commands -- fetch cover art through the asset cache."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from anidex.commands.common import run
from anidex.context import AppContext
from anidex.output import success

image_app = typer.Typer(no_args_is_help=True)


@image_app.command("fetch")
def image_fetch(
    ctx: typer.Context,
    url: str = typer.Argument(help="Image URL (also the cache key)."),
    output_path: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write the image to this file instead of stdout."
    ),
) -> None:
    """Fetch an image, serving it from the cache when possible.

    Example::

        anidex image fetch https://cdn.myanimelist.net/images/anime/4/19644.jpg -o bebop.jpg
    """

    async def _fetch(app_context: AppContext) -> bytes:
        return await app_context.assets.get_asset(url)

    payload = run(ctx, _fetch)
    if output_path is None:
        stream = typer.get_binary_stream("stdout")
        stream.write(payload)
        stream.flush()
        return
    output_path.write_bytes(payload)
    success(f"Saved {len(payload)} bytes to {output_path}")
