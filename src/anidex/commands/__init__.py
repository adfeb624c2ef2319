"""Built-in CLI sub-commands for anidex.

* :mod:`~anidex.commands.browse` -- top, popular, upcoming and seasonal lists.
* :mod:`~anidex.commands.search` -- title search.
* :mod:`~anidex.commands.show` -- one anime with characters and recommendations.
* :mod:`~anidex.commands.image` -- fetch images through the asset cache.
* :mod:`~anidex.commands.cache` -- inspect and clear the asset cache.
* :mod:`~anidex.commands.favorites` -- the local favorites list.
* :mod:`~anidex.commands.config` -- view and modify settings.

Single commands export a plain callback registered on the root app; groups
export a :class:`typer.Typer` sub-application.
"""
