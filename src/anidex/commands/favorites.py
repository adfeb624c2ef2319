"""Favorites commands -- keep a local list of anime.

The list is stored in the data directory by
:class:`~anidex.favorites.FavoritesStore`. ``add`` looks the anime up first
so the saved record carries its title, score and genres.
"""

from __future__ import annotations

import typer

from anidex.commands.common import context_option, open_favorites, run
from anidex.context import AppContext
from anidex.exit_codes import EXIT_NOT_FOUND
from anidex.models import Anime, FavoriteRecord
from anidex.output import OutputFormat, format_response, get_output, info, success, warning

favorites_app = typer.Typer(no_args_is_help=True)


@favorites_app.command("list")
def favorites_list() -> None:
    """List favorites, most recently added first."""
    records = open_favorites().list_favorites()
    output = get_output()
    if output.format == OutputFormat.JSON:
        format_response([r.model_dump(mode="json") for r in records])
        return
    if not records:
        info("No favorites yet.")
        return
    output.print_table(
        ["ID", "Title", "Type", "Episodes", "Score", "Added"],
        [
            [
                str(r.malId),
                r.title,
                r.type or "",
                str(r.episodes) if r.episodes else "?",
                f"{r.score:.2f}" if r.score else "N/A",
                r.addedDate.strftime("%Y-%m-%d"),
            ]
            for r in records
        ],
        title="Favorites",
    )


@favorites_app.command("add")
def favorites_add(
    ctx: typer.Context,
    anime_id: int = typer.Argument(help="MyAnimeList id of the anime."),
) -> None:
    """Look up an anime and save it as a favorite."""
    store = open_favorites()

    async def _lookup(app_context: AppContext) -> Anime:
        response = await app_context.jikan.get_anime_details(anime_id)
        return response.data

    anime = run(ctx, _lookup)
    store.add_favorite(FavoriteRecord.from_anime(anime))
    success(f"Added {anime.display_title} to favorites.")


@favorites_app.command("remove")
def favorites_remove(
    anime_id: int = typer.Argument(help="MyAnimeList id of the anime."),
) -> None:
    """Remove an anime from favorites."""
    if not open_favorites().remove_favorite(anime_id):
        warning(f"{anime_id} is not a favorite.")
        raise typer.Exit(code=EXIT_NOT_FOUND)
    success(f"Removed {anime_id} from favorites.")


@favorites_app.command("clear")
def favorites_clear(ctx: typer.Context) -> None:
    """Remove every favorite. Asks for confirmation unless ``--force`` is given."""
    store = open_favorites()
    if not context_option(ctx, "force", False):
        if not typer.confirm(f"Remove all {len(store)} favorites?"):
            info("Cancelled.")
            raise typer.Exit()
    store.clear_all_favorites()
    success("Favorites cleared.")
