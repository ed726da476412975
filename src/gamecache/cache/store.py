"""File-per-key disk store with a fixed 24 hour validity window.

Every key maps to ``<root>/<key>.cache`` holding one JSON
:class:`~gamecache.models.Envelope`::

    {"written_at": "2026-10-17T09:30:00Z", "data": {"name": "ELDEN RING"}}

Entries are never refreshed in place: :meth:`DiskStore.put` writes a new
envelope atomically (temp file + rename), and expiry is observed lazily by
:meth:`DiskStore.get`, which deletes expired or undecodable files and
reports them as misses. :meth:`DiskStore.sweep` performs the same cleanup
for the whole directory without decoding payloads.

:class:`DiskStore` is synchronous and not safe for concurrent use on its
own. :class:`~gamecache.cache.service.CacheService` runs all of its
operations through an :class:`~gamecache.cache.serializer.AccessSerializer`.
"""

from __future__ import annotations

import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Generic, Optional, TypeVar

from gamecache.cache.codec import PayloadCodec
from gamecache.cache.keys import validate_key
from gamecache.config import atomic_write
from gamecache.exceptions import (
    DecodeError,
    DirectoryError,
    EncodeError,
    ReadError,
    WriteError,
)
from gamecache.models import CacheStats, Envelope, EnvelopeHeader, SweepResult, utcnow
from gamecache.output import debug

T = TypeVar("T")

ENTRY_SUFFIX = ".cache"

Clock = Callable[[], datetime]


class DiskStore(Generic[T]):
    """Disk-backed store of time-boxed entries, one file per key.

    Args:
        root: Cache root directory. Created (with parents) if missing.
        codec: Converts payloads to and from their stored form. Defaults
            to a codec that stores JSON-compatible values unchanged.
        clock: Returns the current time as an aware datetime. Tests pass a
            fake clock to move across the validity boundary.

    Raises:
        DirectoryError: If the root directory cannot be created.

    Example::

        store = DiskStore(tmp_path / "GameCache")
        store.put("game_details_100", {"name": "X"})
        store.get("game_details_100")   # {'name': 'X'}
    """

    def __init__(
        self,
        root: str | Path,
        codec: Optional[PayloadCodec[T]] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._root = Path(root)
        self._codec: PayloadCodec[T] = codec or PayloadCodec()
        self._now: Clock = clock or utcnow
        self._ensure_root()

    @property
    def root(self) -> Path:
        """The cache root directory."""
        return self._root

    @property
    def codec(self) -> PayloadCodec[T]:
        """The payload codec in use."""
        return self._codec

    def path_for(self, key: str) -> Path:
        """Return the entry file path for *key*.

        Raises:
            InvalidKeyError: If *key* cannot be used as a file name.
        """
        return self._root / f"{validate_key(key)}{ENTRY_SUFFIX}"

    # ------------------------------------------------------------------ #
    # Entry operations
    # ------------------------------------------------------------------ #

    def put(self, key: str, value: T) -> None:
        """Store *value* under *key*, replacing any previous entry.

        Raises:
            EncodeError: If *value* cannot be serialised. Nothing is written.
            WriteError: If the file cannot be written. The previous entry,
                if any, is left untouched.
        """
        path = self.path_for(key)
        try:
            envelope = Envelope(data=self._codec.dump(value), written_at=self._now())
            text = envelope.model_dump_json()
        except (ValueError, TypeError) as exc:
            raise EncodeError(f"Cannot encode cache entry '{key}': {exc}") from exc

        try:
            atomic_write(path, text)
        except OSError as exc:
            raise WriteError(f"Cannot write cache entry '{key}' at {path}: {exc}") from exc
        debug(f"Cache write: {key}")

    def get(self, key: str, default: Any = None) -> T | Any:
        """Return the fresh value stored under *key*, or *default*.

        A missing, expired, or undecodable entry is a miss. Expired and
        undecodable files are deleted as a side effect.

        Args:
            key: The cache key.
            default: Returned on a miss. Pass a sentinel when ``None`` is a
                legitimate payload.

        Raises:
            ReadError: If the entry file exists but cannot be read.
        """
        path = self.path_for(key)
        raw = self._read(path, key)
        if raw is None:
            debug(f"Cache miss: {key}")
            return default

        try:
            envelope = self._decode(raw)
        except DecodeError as exc:
            debug(f"Cache entry '{key}' is corrupted, discarding: {exc}")
            self._discard(path)
            return default

        if not envelope.is_valid(self._now()):
            debug(f"Cache entry '{key}' expired at {envelope.expires_at.isoformat()}")
            self._discard(path)
            return default

        try:
            value = self._codec.load(envelope.data)
        except ValueError as exc:
            debug(f"Cache entry '{key}' does not match {self._codec.type!r}, discarding: {exc}")
            self._discard(path)
            return default

        debug(f"Cache hit: {key}")
        return value

    def contains(self, key: str) -> bool:
        """Return ``True`` if a fresh entry exists for *key*.

        Unlike :meth:`get`, this never deletes anything.

        Raises:
            ReadError: If the entry file exists but cannot be read.
        """
        raw = self._read(self.path_for(key), key)
        if raw is None:
            return False
        try:
            header = EnvelopeHeader.model_validate_json(raw)
        except ValueError:
            return False
        return header.is_valid(self._now())

    def delete(self, key: str) -> None:
        """Remove the entry for *key*. A missing entry is not an error.

        Raises:
            WriteError: If the file exists but cannot be removed.
        """
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise WriteError(f"Cannot delete cache entry '{key}' at {path}: {exc}") from exc

    # ------------------------------------------------------------------ #
    # Directory operations
    # ------------------------------------------------------------------ #

    def clear(self) -> None:
        """Remove the whole cache root and recreate it empty.

        Raises:
            DirectoryError: If the root cannot be removed or recreated.
        """
        try:
            shutil.rmtree(self._root)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise DirectoryError(f"Cannot remove cache directory {self._root}: {exc}") from exc
        self._ensure_root()

    def keys(self) -> list[str]:
        """Return the keys of all entry files, sorted, fresh or not.

        Raises:
            DirectoryError: If the root cannot be listed.
        """
        return sorted(path.name[: -len(ENTRY_SUFFIX)] for path in self._entry_paths())

    def sweep(self) -> SweepResult:
        """Delete every entry whose validity window has elapsed.

        Only the envelope timestamp is decoded. Files that cannot be read,
        decoded, or deleted are counted in :attr:`SweepResult.failed` and
        skipped; they never stop the sweep.

        Raises:
            DirectoryError: If the root cannot be listed.
        """
        now = self._now()
        scanned = removed = kept = failed = 0
        for path in self._entry_paths():
            scanned += 1
            try:
                header = EnvelopeHeader.model_validate_json(path.read_bytes())
            except (OSError, ValueError) as exc:
                debug(f"Sweep skipped {path.name}: {exc}")
                failed += 1
                continue

            if header.is_valid(now):
                kept += 1
                continue

            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                debug(f"Sweep could not remove {path.name}: {exc}")
                failed += 1
                continue
            removed += 1

        debug(f"Sweep of {self._root}: {removed} removed, {kept} kept, {failed} failed")
        return SweepResult(scanned=scanned, removed=removed, kept=kept, failed=failed)

    def stats(self) -> CacheStats:
        """Return entry counts and total size of the cache directory.

        Unreadable entries count towards ``entries`` but not ``expired``.

        Raises:
            DirectoryError: If the root cannot be listed.
        """
        now = self._now()
        entries = expired = size = 0
        for path in self._entry_paths():
            entries += 1
            try:
                raw = path.read_bytes()
                header = EnvelopeHeader.model_validate_json(raw)
            except (OSError, ValueError):
                continue
            size += len(raw)
            if not header.is_valid(now):
                expired += 1
        return CacheStats(
            directory=str(self._root),
            entries=entries,
            expired=expired,
            size_bytes=size,
        )

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _ensure_root(self) -> None:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryError(f"Cannot create cache directory {self._root}: {exc}") from exc

    def _entry_paths(self) -> list[Path]:
        try:
            with os.scandir(self._root) as it:
                return [
                    Path(entry.path)
                    for entry in it
                    if entry.name.endswith(ENTRY_SUFFIX) and entry.is_file()
                ]
        except OSError as exc:
            raise DirectoryError(f"Cannot list cache directory {self._root}: {exc}") from exc

    @staticmethod
    def _read(path: Path, key: str) -> Optional[bytes]:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise ReadError(f"Cannot read cache entry '{key}' at {path}: {exc}") from exc

    @staticmethod
    def _decode(raw: bytes) -> Envelope:
        try:
            return Envelope.model_validate_json(raw)
        except ValueError as exc:
            raise DecodeError(str(exc)) from exc

    @staticmethod
    def _discard(path: Path) -> None:
        """Best-effort removal of an expired or corrupted entry file."""
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            debug(f"Could not remove {path.name}: {exc}")
