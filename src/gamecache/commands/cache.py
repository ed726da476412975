"""Cache commands -- inspect and maintain the on-disk cache.

Provides the ``gamecache cache`` sub-command group: listing keys, showing
or deleting a single entry, sweeping expired entries, clearing everything,
and printing directory statistics. Every command opens a
:class:`~gamecache.cache.service.CacheService` on the resolved cache root
(see :func:`~gamecache.config.resolve_cache_root`) and closes it before
returning.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import typer

from gamecache.cache import CacheService
from gamecache.exit_codes import EXIT_NOT_FOUND
from gamecache.models import CacheStats, GlobalConfig, SweepResult
from gamecache.output import error, format_response, info, print_table, success


cache_app = typer.Typer(no_args_is_help=True)


def open_cache_service(
    ctx: typer.Context,
    config: Optional[GlobalConfig] = None,
    sweep_on_open: Optional[bool] = None,
) -> CacheService[Any]:
    """Build the cache service for the current invocation.

    Args:
        ctx: Typer context carrying the ``--cache-dir`` override.
        config: Already-loaded global config; loaded from disk when ``None``.
        sweep_on_open: Override for ``cache.sweep_on_open``. Maintenance
            commands pass ``False`` so they observe the directory as is.
    """
    from gamecache.config import load_global_config, resolve_cache_root

    if config is None:
        config = load_global_config()
    cli_cache_dir = ctx.obj.get("cache_dir") if ctx.obj else None
    root = resolve_cache_root(cli_cache_dir, config)
    if sweep_on_open is None:
        sweep_on_open = config.cache.sweep_on_open
    return CacheService(root, sweep_on_open=sweep_on_open)


@cache_app.command("list")
def cache_list(ctx: typer.Context) -> None:
    """List cached keys and whether each entry is still fresh.

    Example::

        gamecache cache list
        gamecache --json cache list
    """

    async def _run() -> list[list[str]]:
        async with open_cache_service(ctx, sweep_on_open=False) as cache:
            rows = []
            for key in await cache.keys():
                fresh = await cache.contains(key)
                rows.append([key, "fresh" if fresh else "expired"])
            return rows

    rows = asyncio.run(_run())
    if not rows:
        info("Cache is empty.")
        return
    print_table(["Key", "Status"], rows, title="Cached entries")


@cache_app.command("show")
def cache_show(
    ctx: typer.Context,
    key: str = typer.Argument(help="Cache key, e.g. game_details_1245620."),
) -> None:
    """Print the cached value for KEY.

    An expired or corrupted entry is removed and reported as missing.
    """
    missing = object()

    async def _run() -> Any:
        async with open_cache_service(ctx, sweep_on_open=False) as cache:
            return await cache.get(key, missing)

    value = asyncio.run(_run())
    if value is missing:
        error(f"No fresh cache entry for '{key}'")
        raise typer.Exit(code=EXIT_NOT_FOUND)
    format_response(value)


@cache_app.command("delete")
def cache_delete(
    ctx: typer.Context,
    key: str = typer.Argument(help="Cache key to remove."),
) -> None:
    """Remove the entry for KEY. Missing entries are not an error."""

    async def _run() -> None:
        async with open_cache_service(ctx, sweep_on_open=False) as cache:
            await cache.delete(key)

    asyncio.run(_run())
    success(f"Deleted '{key}'")


@cache_app.command("clear")
def cache_clear(ctx: typer.Context) -> None:
    """Remove every cached entry.

    Asks for confirmation unless ``--force`` is active.

    Example::

        gamecache cache clear
        gamecache --force cache clear
    """
    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Remove all cached entries?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    async def _run() -> str:
        async with open_cache_service(ctx, sweep_on_open=False) as cache:
            await cache.clear()
            return str(cache.root)

    root = asyncio.run(_run())
    success(f"Cleared cache at {root}")


@cache_app.command("sweep")
def cache_sweep(ctx: typer.Context) -> None:
    """Delete entries older than the 24 hour validity window."""

    async def _run() -> SweepResult:
        async with open_cache_service(ctx, sweep_on_open=False) as cache:
            return await cache.sweep()

    result = asyncio.run(_run())
    format_response(result.model_dump(mode="json"))
    if result.failed:
        info(f"{result.failed} entries could not be checked; run with --verbose for details.")


@cache_app.command("stats")
def cache_stats(ctx: typer.Context) -> None:
    """Show the cache directory, entry counts, and total size."""

    async def _run() -> CacheStats:
        async with open_cache_service(ctx, sweep_on_open=False) as cache:
            return await cache.stats()

    stats = asyncio.run(_run())
    format_response(stats.model_dump(mode="json"))
