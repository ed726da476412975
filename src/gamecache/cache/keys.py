"""Cache key conventions.

Keys follow ``"<resource-kind>_<resource-id>"``, e.g. ``game_details_1245620``.
The convention is caller discipline: the store accepts any key that
:func:`validate_key` lets through, and two equal strings always address the
same entry.
"""

from __future__ import annotations

import enum

from gamecache.exceptions import InvalidKeyError

_FORBIDDEN = ("/", "\\", "\x00")

# 255-byte file name limit, less ".cache" and the ".<name>.XXXXXXXX.tmp"
# temporary name used while an entry is written.
MAX_KEY_BYTES = 235


class ResourceKind(str, enum.Enum):
    """Kinds of remote resources cached per Steam app."""

    GAME_DETAILS = "game_details"
    GAME_REVIEWS = "game_reviews"
    GAME_SUMMARY = "game_summary"


def make_key(kind: ResourceKind | str, resource_id: int | str) -> str:
    """Build a conventional cache key.

    Example::

        >>> make_key(ResourceKind.GAME_DETAILS, 1245620)
        'game_details_1245620'
    """
    prefix = kind.value if isinstance(kind, ResourceKind) else kind
    return validate_key(f"{prefix}_{resource_id}")


def validate_key(key: str) -> str:
    """Return *key* unchanged if it can be used as a file name in the cache root.

    Raises:
        InvalidKeyError: If the key is empty, is ``.`` or ``..``, contains a
            path separator or NUL byte, or exceeds :data:`MAX_KEY_BYTES`
            once UTF-8 encoded.
    """
    if not isinstance(key, str) or not key:
        raise InvalidKeyError("Cache key must be a non-empty string")
    if key in (".", ".."):
        raise InvalidKeyError(f"Invalid cache key: {key!r}")
    if any(ch in key for ch in _FORBIDDEN):
        raise InvalidKeyError(f"Cache key must not contain path separators: {key!r}")
    if len(key.encode("utf-8")) > MAX_KEY_BYTES:
        raise InvalidKeyError(f"Cache key longer than {MAX_KEY_BYTES} bytes: {key[:40]!r}...")
    return key
