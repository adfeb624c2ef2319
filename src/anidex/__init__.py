"""anidex -- rate-limited client and asset cache for the Jikan anime catalog.

This package wraps the public Jikan v4 API (``https://api.jikan.moe/v4``)
behind a single shared rate limiter and a typed error taxonomy, caches
binary assets (cover images) in memory and on disk, and provides the
paginated browse/search state machines that a front end drives.

Typical usage::

    async with AppContext(load_global_config()) as ctx:
        top = PaginatedList(ctx.jikan.page_fetcher(ListType.TOP_RATED))
        await top.load_initial()
        cover = await ctx.assets.get_asset(top.state.items[0].image_url)

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models for the wire schema and configuration.
    config: XDG-aware configuration loading and saving.
    context: Construction and lifetime of the shared services.
    exceptions: Error taxonomy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    favorites: Local favorites record store.
"""

__version__ = "0.3.0"
