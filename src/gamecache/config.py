"""Directories, the global config file, and cache root resolution.

* **Directories** -- :func:`get_config_dir`, :func:`get_cache_dir` and
  :func:`get_data_dir` follow the XDG base directory layout on Linux/BSD
  and use ``~/.gamecache/`` on macOS and Windows.
* **Global config** -- ``config.json`` holds a
  :class:`~gamecache.models.GlobalConfig`: cache location and startup
  sweep, Steam client settings, output format.
* **Cache root** -- :func:`resolve_cache_root` picks the directory from the
  ``--cache-dir`` flag, then ``GAMECACHE_CACHE_DIR``, then
  ``cache.directory`` in the config, then ``<cache dir>/GameCache``.

:func:`atomic_write` is shared by the config file and by every cache entry
written through :meth:`~gamecache.cache.store.DiskStore.put`.
"""

from __future__ import annotations

import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from gamecache.exceptions import ConfigError
from gamecache.models import GlobalConfig

_APP_NAME = "gamecache"
_CONFIG_FILENAME = "config.json"
_CACHE_SUBDIR = "GameCache"
CACHE_DIR_ENV = "GAMECACHE_CACHE_DIR"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on Linux and the BSDs, where XDG base directories apply."""
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _fallback_base_dir() -> Path:
    """``~/.gamecache``, used for every directory on macOS and Windows."""
    return Path.home() / f".{_APP_NAME}"


def _app_dir(xdg_var: str, xdg_default: str, fallback_sub: Optional[str]) -> Path:
    """Resolve and create one of the application directories.

    Args:
        xdg_var: XDG environment variable, e.g. ``XDG_CACHE_HOME``.
        xdg_default: Its default relative to ``$HOME``, e.g. ``.cache``.
        fallback_sub: Sub-directory of :func:`_fallback_base_dir` used on
            non-XDG platforms; ``None`` for the base directory itself.
    """
    if _is_xdg_platform():
        base = os.environ.get(xdg_var) or str(Path.home() / xdg_default)
        path = Path(base) / _APP_NAME
    else:
        path = _fallback_base_dir()
        if fallback_sub:
            path = path / fallback_sub
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding ``config.json``.

    ``$XDG_CONFIG_HOME/gamecache`` (default ``~/.config/gamecache``) on
    Linux/BSD, ``~/.gamecache`` elsewhere.
    """
    return _app_dir("XDG_CONFIG_HOME", ".config", None)


def get_cache_dir() -> Path:
    """Parent of the default cache root.

    ``$XDG_CACHE_HOME/gamecache`` (default ``~/.cache/gamecache``) on
    Linux/BSD, ``~/.gamecache/cache`` elsewhere. Everything below it can be
    deleted at any time.
    """
    return _app_dir("XDG_CACHE_HOME", ".cache", "cache")


def get_data_dir() -> Path:
    """Directory for crash logs.

    ``$XDG_DATA_HOME/gamecache`` (default ``~/.local/share/gamecache``) on
    Linux/BSD, ``~/.gamecache/logs`` elsewhere.
    """
    return _app_dir("XDG_DATA_HOME", os.path.join(".local", "share"), "logs")


def default_cache_root() -> Path:
    """Return the default cache root, ``<cache dir>/GameCache``.

    The directory itself is created by the store, not here.
    """
    return get_cache_dir() / _CACHE_SUBDIR


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* so readers see either the old or the new content.

    The text goes to a sibling temp file named ``.<name>.<random>.tmp``,
    which is flushed to disk and then renamed over *path*. If anything fails
    the temp file is removed and *path* is untouched. Temp files never end
    in ``.cache``, so a crash mid-write cannot leave a half-written entry
    that the cache would pick up.

    Raises:
        OSError: If the directory, the temp file, or the rename fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Read ``config.json`` from :func:`get_config_dir`.

    A missing file yields the defaults. Keys absent from the file take
    their default values.

    Raises:
        ConfigError: If the file cannot be read, is not valid JSON, or does
            not validate against :class:`~gamecache.models.GlobalConfig`.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Write *config* to ``config.json`` with :func:`atomic_write`.

    Raises:
        ConfigError: If the file cannot be written.
    """
    path = _global_config_path()
    try:
        atomic_write(path, config.model_dump_json(indent=2) + "\n")
    except OSError as exc:
        raise ConfigError(f"Cannot write config at {path}: {exc}") from exc


def set_config_value(config: GlobalConfig, key: str, value: str) -> GlobalConfig:
    """Return a copy of *config* with the dot-separated *key* set to *value*.

    The string *value* is coerced to the type of the current field value
    (bool, int, or str). ``"none"``/``"null"`` clears optional fields.

    Raises:
        ConfigError: If the key path does not exist, the value cannot be
            coerced, or the result fails validation.
    """
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            raise ConfigError(f"Invalid config key: {key}")
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        raise ConfigError(f"Unknown config key: {key}")

    current = target[final_key]
    coerced: object
    if value.lower() in ("none", "null"):
        coerced = None
    elif isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            raise ConfigError(f"Expected integer for {key}, got: {value}") from None
    else:
        coerced = value
    target[final_key] = coerced

    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid value for {key}: {exc}") from exc


# --- Precedence resolution ---


def resolve_cache_root(
    cli_cache_dir: Optional[str] = None,
    config: Optional[GlobalConfig] = None,
) -> Path:
    """Resolve the cache root directory.

    Precedence (high to low):
        1. CLI flag (``--cache-dir``)
        2. Environment variable (``GAMECACHE_CACHE_DIR``)
        3. ``cache.directory`` in the global config
        4. :func:`default_cache_root`

    Args:
        cli_cache_dir: Value of the ``--cache-dir`` flag, if given.
        config: Already-loaded global config; loaded from disk when ``None``.

    Returns:
        The cache root with ``~`` expanded. It may not exist yet.
    """
    if cli_cache_dir:
        return Path(cli_cache_dir).expanduser()

    env_value = os.environ.get(CACHE_DIR_ENV)
    if env_value:
        return Path(env_value).expanduser()

    if config is None:
        config = load_global_config()
    if config.cache.directory:
        return Path(config.cache.directory).expanduser()

    return default_cache_root()
