"""Typer application and CLI entry point for anidex.

This module builds the top-level Typer application and registers the
built-in commands (``browse``, ``search``, ``show``, ``image``, ``cache``,
``favorites``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler and invokes the app.
:class:`~anidex.exceptions.AnidexError` exits with the error's code; any
other exception is written to a crash log under the data directory.

See Also:
    :mod:`anidex.config`: Configuration resolution.
    :mod:`anidex.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from anidex import __version__
from anidex.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="anidex",
    help="Browse, search and collect anime from the Jikan catalog.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from anidex.commands.browse import browse_command  # noqa: E402
from anidex.commands.cache import cache_app  # noqa: E402
from anidex.commands.config import config_app  # noqa: E402
from anidex.commands.favorites import favorites_app  # noqa: E402
from anidex.commands.image import image_app  # noqa: E402
from anidex.commands.search import search_command  # noqa: E402
from anidex.commands.show import show_command  # noqa: E402

app.command("browse")(browse_command)
app.command("search")(search_command)
app.command("show")(show_command)
app.add_typer(image_app, name="image", help="Fetch images through the cache.")
app.add_typer(cache_app, name="cache", help="Image cache management.")
app.add_typer(favorites_app, name="favorites", help="Local favorites.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"anidex {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="API base address (overrides config and env)."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmations."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~anidex.output.OutputManager`, routes library
    logging through it and stores shared options on ``ctx.obj`` for the
    sub-commands.
    """
    from anidex.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    configure_logging(output)

    ctx.ensure_object(dict)
    ctx.obj["base_url"] = base_url
    ctx.obj["force"] = force
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to the data directory and return its path."""
    from anidex.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(f"{type(exc).__name__}: {exc}\n\n{traceback.format_exc()}")
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``anidex`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from anidex.exceptions import AnidexError
        from anidex.output import error

        if isinstance(exc, AnidexError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
