"""Browse command -- list top, popular, upcoming or seasonal anime.

Drives a :class:`~anidex.state.paginated.PaginatedList` through its initial
load and as many "load more" steps as ``--pages`` asks for, then prints the
accumulated items.
"""

from __future__ import annotations

import typer

from anidex.client.jikan import ListType
from anidex.client.response import format_anime_list
from anidex.commands.common import fail, run
from anidex.context import AppContext
from anidex.output import progress
from anidex.state.paginated import ListState, Phase

_TITLES = {
    ListType.TOP_RATED: "Top rated",
    ListType.POPULAR: "Popular now",
    ListType.UPCOMING: "Upcoming",
    ListType.SEASONAL: "This season",
}


def _report_progress(state: ListState) -> None:
    if state.phase in (Phase.LOADING_INITIAL, Phase.LOADING_MORE):
        progress(f"Loading page {state.current_page}...")


def browse_command(
    ctx: typer.Context,
    list_type: ListType = typer.Argument(help="Which list to browse."),
    pages: int = typer.Option(1, "--pages", min=1, help="Number of pages to load."),
) -> None:
    """Browse a catalog list.

    Example::

        anidex browse top
        anidex browse seasonal --pages 3 --json
    """

    async def _browse(app_context: AppContext) -> ListState:
        browser = app_context.list_browser(list_type)
        browser.subscribe(_report_progress)
        await browser.load_initial()
        while (
            browser.state.error_message is None
            and browser.state.has_more_pages
            and browser.state.current_page < pages
        ):
            await browser.load_more()
        return browser.state

    state = run(ctx, _browse)
    if state.items:
        format_anime_list(state.items, title=_TITLES[list_type])
    if state.error_message is not None:
        fail(state.error_message, state.last_error)
