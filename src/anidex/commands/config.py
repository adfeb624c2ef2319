"""Config commands -- view and modify the user configuration.

Provides the ``anidex config`` group for reading, updating and resetting
the stored :class:`~anidex.models.GlobalConfig`: API address, request
timeouts, rate-limit spacing, cache bounds and search behaviour.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError

from anidex.commands.common import context_option
from anidex.config import get_config_dir, load_global_config, save_global_config
from anidex.exit_codes import EXIT_INVALID_USAGE
from anidex.models import GlobalConfig
from anidex.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the stored configuration.

    Example::

        anidex config show
        anidex config show --json
    """
    config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


def _coerce(current: Any, key: str, value: str) -> Any:
    """Convert *value* to the type of the field it replaces."""
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes")
    try:
        if isinstance(current, int):
            return int(value)
        if isinstance(current, float):
            return float(value)
    except ValueError:
        error(f"Expected a number for {key}, got: {value}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    return value


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key in dot notation, e.g. 'rate_limit.minimum_interval'."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is converted to the type of the existing field and the result
    is validated before it is saved.

    Example::

        anidex config set request.base_url http://localhost:8080/v4
        anidex config set search.debounce_seconds 0.25
        anidex config set cache.enabled false
    """
    data = load_global_config().model_dump(mode="json")

    *parents, final_key = key.split(".")
    target = data
    for part in parents:
        if not isinstance(target.get(part), dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[part]

    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    coerced = _coerce(target[final_key], key, value)
    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Reset the configuration to defaults.

    Asks for confirmation unless ``--force`` is given.
    """
    if not context_option(ctx, "force", False):
        if not typer.confirm("Reset all config to defaults?"):
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
