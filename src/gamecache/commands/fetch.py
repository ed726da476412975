"""Fetch commands -- read Steam data through the cache.

Provides the ``gamecache fetch`` sub-command group. Each command resolves
a cache key with :func:`~gamecache.cache.keys.make_key` and calls
:meth:`~gamecache.cache.service.CacheService.get_or_compute`, so the Steam
API is only contacted when no fresh entry exists.
"""

from __future__ import annotations

import asyncio
from typing import Any

import typer

from gamecache.cache import ResourceKind, make_key
from gamecache.client import SteamClient
from gamecache.commands.cache import open_cache_service
from gamecache.output import debug, format_response


fetch_app = typer.Typer(no_args_is_help=True)

_REFRESH_OPTION = typer.Option(
    False, "--refresh", "-r", help="Ignore the cached entry and fetch again."
)


async def _fetch(
    ctx: typer.Context,
    kind: ResourceKind,
    appid: int,
    refresh: bool,
) -> Any:
    from gamecache.config import load_global_config

    config = load_global_config()
    key = make_key(kind, appid)
    async with open_cache_service(ctx, config) as cache, SteamClient(config.client) as steam:
        producers = {
            ResourceKind.GAME_DETAILS: steam.details_producer,
            ResourceKind.GAME_REVIEWS: steam.reviews_producer,
            ResourceKind.GAME_SUMMARY: steam.summary_producer,
        }
        if refresh:
            debug(f"Refreshing {key}")
        return await cache.get_or_compute(key, producers[kind](appid), refresh=refresh)


@fetch_app.command("details")
def fetch_details(
    ctx: typer.Context,
    appid: int = typer.Argument(help="Steam app id, e.g. 1245620."),
    refresh: bool = _REFRESH_OPTION,
) -> None:
    """Show store details for a game.

    Example::

        gamecache fetch details 1245620
        gamecache --json fetch details 1245620 --refresh
    """
    format_response(asyncio.run(_fetch(ctx, ResourceKind.GAME_DETAILS, appid, refresh)))


@fetch_app.command("reviews")
def fetch_reviews(
    ctx: typer.Context,
    appid: int = typer.Argument(help="Steam app id."),
    refresh: bool = _REFRESH_OPTION,
) -> None:
    """Show the latest review batch and review score summary for a game."""
    format_response(asyncio.run(_fetch(ctx, ResourceKind.GAME_REVIEWS, appid, refresh)))


@fetch_app.command("summary")
def fetch_summary(
    ctx: typer.Context,
    appid: int = typer.Argument(help="Steam app id."),
    refresh: bool = _REFRESH_OPTION,
) -> None:
    """Show the generated review summary (pros, cons, recommendation) for a game."""
    format_response(asyncio.run(_fetch(ctx, ResourceKind.GAME_SUMMARY, appid, refresh)))
