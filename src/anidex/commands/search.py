"""Search command -- find anime by title."""

from __future__ import annotations

import typer

from anidex.client.response import format_anime_list
from anidex.commands.common import fail, run
from anidex.context import AppContext
from anidex.exit_codes import EXIT_INVALID_USAGE
from anidex.output import error, info
from anidex.state.search import SearchState


def search_command(
    ctx: typer.Context,
    query: str = typer.Argument(help="Title to search for."),
    pages: int = typer.Option(1, "--pages", min=1, help="Number of result pages."),
) -> None:
    """Search the catalog, most popular matches first.

    Example::

        anidex search "cowboy bebop"
        anidex search naruto --pages 2 --plain
    """
    if not query.strip():
        error("Search query must not be empty.")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    async def _search(app_context: AppContext) -> SearchState:
        session = app_context.search_session()
        session.set_query(query)
        await session.wait_idle()
        while (
            session.state.error_message is None
            and session.state.has_more_pages
            and session.state.current_page < pages
        ):
            await session.load_more_results()
        return session.state

    state = run(ctx, _search)
    if state.results:
        format_anime_list(state.results, title=f"Results for {query.strip()!r}")
    elif state.error_message is None:
        info(f"No results for {query.strip()!r}.")
    if state.error_message is not None:
        fail(state.error_message, state.last_error)
