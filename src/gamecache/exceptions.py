"""Exception hierarchy for gamecache.

All exceptions inherit from :class:`GameCacheError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`gamecache.exit_codes`.
The top-level error handler in :func:`gamecache.app.main` catches
``GameCacheError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    GameCacheError (exit 1)
    +-- CacheError          (exit 8)
    |   +-- EncodeError
    |   +-- DecodeError
    |   +-- WriteError
    |   +-- ReadError
    |   +-- DirectoryError
    |   +-- InvalidKeyError (exit 2)
    +-- NotFoundError       (exit 4)
    +-- ServerError         (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- ConfigError         (exit 1)

:class:`DecodeError` never reaches callers of
:meth:`~gamecache.cache.store.DiskStore.get`; a corrupted entry is treated
as a miss and deleted.
"""

from gamecache.exit_codes import (
    EXIT_CACHE_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class GameCacheError(Exception):
    """Base exception for all gamecache errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`gamecache.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class CacheError(GameCacheError):
    """Base class for failures of the on-disk cache."""

    exit_code = EXIT_CACHE_ERROR


class EncodeError(CacheError):
    """Raised when a value cannot be serialised into a cache envelope."""


class DecodeError(CacheError):
    """Raised when a cache file does not contain a valid envelope."""


class WriteError(CacheError):
    """Raised when an entry file cannot be written or removed."""


class ReadError(CacheError):
    """Raised when an existing entry file cannot be read."""


class DirectoryError(CacheError):
    """Raised when the cache root cannot be created, listed, or removed."""


class InvalidKeyError(CacheError):
    """Raised for keys that cannot be mapped to a file inside the cache root."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(GameCacheError):
    """Raised when the Steam API has no data for the requested app."""

    exit_code = EXIT_NOT_FOUND


class ServerError(GameCacheError):
    """Raised when a remote API answers with an error status."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(GameCacheError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ConfigError(GameCacheError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
