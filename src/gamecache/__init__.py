"""gamecache -- keep Steam game data on disk for a day instead of refetching it.

Game details, review batches, and generated summaries do not change within
a day, so every fetch goes through a keyed, disk-backed cache with a fixed
24 hour validity window. The cache is safe to share between concurrent
asyncio tasks: all filesystem effects run one at a time on a dedicated
worker.

Typical use::

    from gamecache.cache import CacheService, ResourceKind, make_key
    from gamecache.client import SteamClient

    async with CacheService(root) as cache, SteamClient() as steam:
        details = await cache.get_or_compute(
            make_key(ResourceKind.GAME_DETAILS, 1245620),
            steam.details_producer(1245620),
        )

Modules:
    cache: Store, access serializer, and fetch-or-compute.
    client: Steam store client producing cacheable values.
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and cache root resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting and diagnostics with Rich.
"""

__version__ = "0.1.0"
