"""Fetch-or-compute on top of the cache.

:func:`get_or_compute` is the one pattern callers should use to reach a
remote resource: look the key up, and only on a miss run the producer and
store its result.

No lock is held while the producer runs. Two tasks that miss on the same
key at the same time both call their producer, and the later ``put`` wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, TypeVar

from gamecache.cache.keys import validate_key
from gamecache.exceptions import CacheError
from gamecache.output import warning

if TYPE_CHECKING:
    from gamecache.cache.service import CacheService

T = TypeVar("T")

Producer = Callable[[], Awaitable[T]]
WriteErrorHandler = Callable[[str, CacheError], Any]

_MISSING: Any = object()


async def get_or_compute(
    cache: CacheService[T],
    key: str,
    producer: Producer[T],
    *,
    on_write_error: Optional[WriteErrorHandler] = None,
    refresh: bool = False,
) -> T:
    """Return the cached value for *key*, producing and caching it on a miss.

    A lookup that fails (e.g. an unreadable entry file) is reported as a
    warning and handled like a miss.

    Args:
        cache: The cache service to consult.
        key: Cache key, e.g. ``game_details_1245620``.
        producer: Zero-argument async callable returning the value to cache.
            Never invoked on a hit.
        on_write_error: Called with ``(key, error)`` when storing the
            produced value fails. The value is still returned.
        refresh: Skip the lookup and always call *producer*. The existing
            entry stays in place until the new value has been stored, so a
            failing producer leaves it untouched.

    Returns:
        The cached value on a hit, otherwise the producer's result.

    Raises:
        InvalidKeyError: If *key* cannot be used as a cache key.
        Exception: Whatever *producer* raises, unchanged. Nothing is cached.
    """
    validate_key(key)
    if not refresh:
        try:
            value = await cache.get(key, _MISSING)
        except CacheError as exc:
            warning(f"Cache lookup for '{key}' failed: {exc}")
            value = _MISSING
        if value is not _MISSING:
            return value

    result = await producer()

    try:
        await cache.put(key, result)
    except CacheError as exc:
        warning(f"Could not cache '{key}': {exc}")
        if on_write_error is not None:
            on_write_error(key, exc)
    return result
