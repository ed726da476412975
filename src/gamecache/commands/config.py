"""Config commands -- view and modify global configuration.

Provides the ``gamecache config`` sub-command group for reading,
updating, and resetting the user's global configuration file
(:class:`~gamecache.models.GlobalConfig`). Settings control the cache
location, startup sweeping, the Steam client, and the output format.
"""

from __future__ import annotations

import typer

from gamecache.output import format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show current configuration and the directories in use.

    Example::

        gamecache config show
        gamecache --json config show
    """
    from gamecache.config import get_config_dir, load_global_config, resolve_cache_root

    config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    info(f"Cache directory: {resolve_cache_root(config=config)}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'cache.sweep_on_open')."
    ),
    value: str = typer.Argument(help="Value to set ('none' clears optional keys)."),
) -> None:
    """Set a configuration value.

    The value is coerced to match the existing field's type (bool, int, or
    str) and the result is validated before saving.

    Example::

        gamecache config set cache.directory ~/steam-cache
        gamecache config set client.timeout 10
    """
    from gamecache.config import load_global_config, save_global_config, set_config_value

    config = set_config_value(load_global_config(), key, value)
    save_global_config(config)
    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is active.
    """
    from gamecache.config import save_global_config
    from gamecache.models import GlobalConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
