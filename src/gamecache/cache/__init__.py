"""Disk-backed, time-boxed caching of remote resources.

This package provides :class:`CacheService`, the object the rest of the
application uses to avoid refetching Steam data within a 24 hour window.
Entries live one file per key under a single root directory
(:class:`DiskStore`), every filesystem effect runs through a single-owner
worker (:class:`AccessSerializer`), and :func:`get_or_compute` implements
the check-fetch-store pattern on top.

Keys follow ``"<resource-kind>_<resource-id>"``; see :func:`make_key`.
"""

from gamecache.cache.codec import PayloadCodec
from gamecache.cache.keys import ResourceKind, make_key, validate_key
from gamecache.cache.orchestrator import get_or_compute
from gamecache.cache.serializer import AccessSerializer
from gamecache.cache.service import CacheService
from gamecache.cache.store import DiskStore

__all__ = [
    "AccessSerializer",
    "CacheService",
    "DiskStore",
    "PayloadCodec",
    "ResourceKind",
    "get_or_compute",
    "make_key",
    "validate_key",
]
