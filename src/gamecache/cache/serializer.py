"""Single-owner execution of blocking cache operations.

:class:`AccessSerializer` owns one worker thread. Every store operation is
submitted to it and runs to completion before the next one starts, in
submission order, so a ``clear()`` can never interleave with a ``put()``.
Callers await the result from the event loop; the loop itself never blocks
on the filesystem.

Cancellation follows :meth:`asyncio.loop.run_in_executor`: an operation
still waiting in the queue is dropped when its caller is cancelled, while
an operation that already started runs to completion and its result is
discarded.
"""

from __future__ import annotations

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, TypeVar

from gamecache.exceptions import CacheError

R = TypeVar("R")


class AccessSerializer:
    """Runs callables one at a time on a dedicated worker thread.

    Only direct filesystem work belongs here. Producers and other slow I/O
    must run outside the serializer so they do not hold up unrelated cache
    operations.

    Args:
        name: Thread name prefix of the worker, visible in debuggers.

    Example::

        async with AccessSerializer() as serializer:
            value = await serializer.run(store.get, "game_details_100")
    """

    def __init__(self, name: str = "gamecache-store") -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether :meth:`close` has been called."""
        return self._closed

    async def run(self, fn: Callable[..., R], *args: Any, **kwargs: Any) -> R:
        """Run ``fn(*args, **kwargs)`` on the worker thread and return its result.

        Exceptions raised by *fn* propagate to the caller unchanged.

        Raises:
            CacheError: If the serializer has been closed.
        """
        if self._closed:
            raise CacheError("Cache is closed")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor, functools.partial(fn, *args, **kwargs)
        )

    def close(self) -> None:
        """Stop accepting work and wait for queued operations to finish."""
        self._closed = True
        self._executor.shutdown(wait=True)

    async def aclose(self) -> None:
        """Like :meth:`close`, without blocking the event loop."""
        self._closed = True
        await asyncio.to_thread(self._executor.shutdown, True)

    async def __aenter__(self) -> AccessSerializer:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
