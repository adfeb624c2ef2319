"""Show command -- one anime with its characters and recommendations."""

from __future__ import annotations

import typer

from anidex.client.response import format_anime_detail
from anidex.commands.common import fail, run
from anidex.context import AppContext
from anidex.state.detail import DetailState


def show_command(
    ctx: typer.Context,
    anime_id: int = typer.Argument(help="MyAnimeList id of the anime."),
) -> None:
    """Show the detail view for one anime.

    Example::

        anidex show 1
    """

    async def _show(app_context: AppContext) -> DetailState:
        loader = app_context.detail_loader(anime_id)
        await loader.load_details()
        return loader.state

    state = run(ctx, _show)
    if state.anime is None:
        fail(
            state.error_message or f"Anime {anime_id} could not be loaded.",
            state.last_error,
        )
    format_anime_detail(state.anime, state.characters, state.recommendations)
