"""Async cache service shared by everything that fetches remote resources.

A :class:`CacheService` is built once at startup with an explicit root
directory and handed to every caller that needs it. It pairs a
:class:`~gamecache.cache.store.DiskStore` with an
:class:`~gamecache.cache.serializer.AccessSerializer`, so each public
coroutine maps to exactly one store operation executed in submission
order. The service itself holds no locks across awaits.

Example::

    async with CacheService(root) as cache:
        details = await cache.get_or_compute(
            make_key(ResourceKind.GAME_DETAILS, appid),
            steam.details_producer(appid),
        )
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Generic, Optional, TypeVar

from gamecache.cache.codec import PayloadCodec
from gamecache.cache.orchestrator import Producer, WriteErrorHandler, get_or_compute
from gamecache.cache.serializer import AccessSerializer
from gamecache.cache.store import Clock, DiskStore
from gamecache.exceptions import CacheError
from gamecache.models import CacheStats, SweepResult
from gamecache.output import debug, warning

T = TypeVar("T")


class CacheService(Generic[T]):
    """Serialized async access to a :class:`DiskStore`.

    Args:
        root: Cache root directory.
        codec: Payload codec; see :class:`~gamecache.cache.codec.PayloadCodec`.
        clock: Time source passed through to the store.
        sweep_on_open: Run :meth:`sweep` once when the service is opened.

    Raises:
        DirectoryError: If the root directory cannot be created.
    """

    def __init__(
        self,
        root: str | Path,
        codec: Optional[PayloadCodec[T]] = None,
        *,
        clock: Optional[Clock] = None,
        sweep_on_open: bool = False,
    ) -> None:
        self._store: DiskStore[T] = DiskStore(root, codec, clock=clock)
        self._serializer = AccessSerializer()
        self._sweep_on_open = sweep_on_open

    @property
    def root(self) -> Path:
        """The cache root directory."""
        return self._store.root

    @property
    def store(self) -> DiskStore[T]:
        """The underlying store. Not safe to call while the service is in use."""
        return self._store

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def open(self) -> CacheService[T]:
        """Prepare the service for use, sweeping expired entries if configured.

        A failing startup sweep is reported as a warning and never prevents
        the cache from being used.
        """
        if self._sweep_on_open:
            try:
                result = await self.sweep()
            except CacheError as exc:
                warning(f"Startup sweep failed: {exc}")
            else:
                if result.removed:
                    debug(f"Removed {result.removed} expired cache entries on startup")
        return self

    async def close(self) -> None:
        """Wait for queued operations and stop the worker thread."""
        await self._serializer.aclose()

    async def __aenter__(self) -> CacheService[T]:
        return await self.open()

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    # ------------------------------------------------------------------ #
    # Store operations
    # ------------------------------------------------------------------ #

    async def put(self, key: str, value: T) -> None:
        """Store *value* under *key*. See :meth:`DiskStore.put`."""
        await self._serializer.run(self._store.put, key, value)

    async def get(self, key: str, default: Any = None) -> T | Any:
        """Return the fresh value for *key* or *default*. See :meth:`DiskStore.get`."""
        return await self._serializer.run(self._store.get, key, default)

    async def contains(self, key: str) -> bool:
        """Return whether a fresh entry exists for *key*."""
        return await self._serializer.run(self._store.contains, key)

    async def delete(self, key: str) -> None:
        """Remove the entry for *key*; absence is not an error."""
        await self._serializer.run(self._store.delete, key)

    async def clear(self) -> None:
        """Empty the cache directory."""
        await self._serializer.run(self._store.clear)

    async def sweep(self) -> SweepResult:
        """Delete all expired entries. See :meth:`DiskStore.sweep`."""
        return await self._serializer.run(self._store.sweep)

    async def keys(self) -> list[str]:
        """Return all keys present on disk."""
        return await self._serializer.run(self._store.keys)

    async def stats(self) -> CacheStats:
        """Return a snapshot of the cache directory."""
        return await self._serializer.run(self._store.stats)

    # ------------------------------------------------------------------ #
    # Fetch-or-compute
    # ------------------------------------------------------------------ #

    async def get_or_compute(
        self,
        key: str,
        producer: Producer[T],
        *,
        on_write_error: Optional[WriteErrorHandler] = None,
        refresh: bool = False,
    ) -> T:
        """Return the cached value for *key*, calling *producer* on a miss.

        See :func:`~gamecache.cache.orchestrator.get_or_compute`.
        """
        return await get_or_compute(
            self, key, producer, on_write_error=on_write_error, refresh=refresh
        )
