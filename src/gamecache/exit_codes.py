"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~gamecache.exceptions.GameCacheError` subclass.
Shell wrappers and cron jobs that run ``gamecache cache sweep`` can inspect
the exit code to tell a network problem from a broken cache directory
without parsing stderr.

Example::

    $ gamecache fetch details 1245620
    $ echo $?
    6   # EXIT_CONNECTION_ERROR -- the Steam store could not be reached
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments (including malformed cache keys)."""

EXIT_NOT_FOUND = 4
"""The requested resource does not exist upstream (HTTP 404 or ``success: false``)."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an error status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_CACHE_ERROR = 8
"""The on-disk cache could not be read, written, or listed."""
