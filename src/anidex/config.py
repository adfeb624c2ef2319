"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for anidex:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.anidex/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **Global config** -- A single :class:`~anidex.models.GlobalConfig`
  JSON file storing request, rate-limit, cache and search settings.
* **Precedence resolution** -- :func:`resolve_config` layers environment
  variables and CLI flags over the stored config.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) so a crash never leaves a half-written file behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from anidex.exceptions import ConfigError
from anidex.models import GlobalConfig

_APP_NAME = "anidex"
_CONFIG_FILENAME = "config.json"

ENV_BASE_URL = "ANIDEX_BASE_URL"
ENV_MIN_INTERVAL = "ANIDEX_MIN_INTERVAL"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/anidex/`` (default ``~/.config/anidex/``).
    On macOS/Windows: ``~/.anidex/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Holds the on-disk asset tier. Its contents can be deleted at any time.

    On Linux/BSD: ``$XDG_CACHE_HOME/anidex/`` (default ``~/.cache/anidex/``).
    On macOS/Windows: ``~/.anidex/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (favorites, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/anidex/`` (default ``~/.local/share/anidex/``).
    On macOS/Windows: ``~/.anidex/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str | bytes) -> None:
    """Write data to file atomically using temp file + rename.

    Text is written as UTF-8; ``bytes`` are written unchanged.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the exception re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        binary = isinstance(data, bytes)
        fd = tempfile.NamedTemporaryFile(
            mode="wb" if binary else "w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding=None if binary else "utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            try:
                fd.close()
            except OSError:
                pass
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~anidex.models.GlobalConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def resolve_config(
    cli_base_url: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_base_url``, ``cli_format``)
        2. Environment variables (``ANIDEX_BASE_URL``, ``ANIDEX_MIN_INTERVAL``)
        3. User config (``~/.config/anidex/config.json``)
        4. Defaults

    Raises:
        ConfigError: If the stored config or an environment override is invalid.
    """
    config = load_global_config()

    env_base_url = os.environ.get(ENV_BASE_URL)
    if cli_base_url is not None:
        config.request.base_url = cli_base_url
    elif env_base_url:
        config.request.base_url = env_base_url

    env_interval = os.environ.get(ENV_MIN_INTERVAL)
    if env_interval:
        try:
            config.rate_limit.minimum_interval = float(env_interval)
        except ValueError as exc:
            raise ConfigError(
                f"{ENV_MIN_INTERVAL} must be a number of seconds, got: {env_interval}"
            ) from exc

    if cli_format is not None:
        config.output.format = cli_format

    return config
