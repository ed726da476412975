"""Tests for DiskStore -- put/get, expiry, self-healing, sweep, clear."""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import BaseModel

from gamecache.cache import DiskStore, PayloadCodec
from gamecache.cache.keys import MAX_KEY_BYTES
from gamecache.exceptions import (
    DirectoryError,
    EncodeError,
    InvalidKeyError,
    ReadError,
    WriteError,
)


class GameDetails(BaseModel):
    steam_appid: int
    name: str


def _write_raw(store: DiskStore, key: str, content: str) -> Path:
    path = store.path_for(key)
    path.write_text(content, encoding="utf-8")
    return path


# ------------------------------------------------------------------ #
# Construction and layout
# ------------------------------------------------------------------ #


class TestLayout:
    def test_creates_root(self, cache_root: Path, clock) -> None:
        assert not cache_root.exists()
        DiskStore(cache_root, clock=clock)
        assert cache_root.is_dir()

    def test_one_file_per_key(self, store: DiskStore) -> None:
        store.put("game_details_100", {"name": "X"})
        assert store.path_for("game_details_100") == store.root / "game_details_100.cache"
        assert [p.name for p in store.root.iterdir()] == ["game_details_100.cache"]

    def test_file_holds_envelope(self, store: DiskStore, clock) -> None:
        store.put("game_details_100", {"name": "X"})
        data = json.loads(store.path_for("game_details_100").read_text(encoding="utf-8"))
        assert data["data"] == {"name": "X"}
        assert data["written_at"].startswith("2026-10-17T09:30:00")

    def test_root_not_creatable(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(DirectoryError):
            DiskStore(blocker / "GameCache")


# ------------------------------------------------------------------ #
# Round-trip and misses
# ------------------------------------------------------------------ #


class TestPutGet:
    def test_round_trip(self, store: DiskStore) -> None:
        store.put("game_details_100", {"name": "X", "tags": ["rpg", "souls"]})
        assert store.get("game_details_100") == {"name": "X", "tags": ["rpg", "souls"]}

    @pytest.mark.parametrize("value", [0, "text", [1, 2, 3], {"nested": {"a": [True]}}, 1.5])
    def test_json_values(self, store: DiskStore, value) -> None:
        store.put("k", value)
        assert store.get("k") == value

    def test_overwrite_replaces_value(self, store: DiskStore, clock) -> None:
        store.put("game_reviews_7", {"page": 1})
        clock.advance(hours=23)
        store.put("game_reviews_7", {"page": 2})
        clock.advance(hours=2)
        # Second write restarted the validity window.
        assert store.get("game_reviews_7") == {"page": 2}

    def test_miss_returns_default(self, store: DiskStore) -> None:
        assert store.get("never_written") is None
        sentinel = object()
        assert store.get("never_written", sentinel) is sentinel

    def test_miss_has_no_side_effect(self, store: DiskStore) -> None:
        store.get("never_written")
        store.get("never_written")
        assert list(store.root.iterdir()) == []

    def test_none_payload_distinguishable(self, store: DiskStore) -> None:
        sentinel = object()
        store.put("k", None)
        assert store.get("k", sentinel) is None

    def test_typed_codec(self, cache_root: Path, clock) -> None:
        store = DiskStore(cache_root, PayloadCodec(GameDetails), clock=clock)
        store.put("game_details_1245620", GameDetails(steam_appid=1245620, name="ELDEN RING"))
        got = store.get("game_details_1245620")
        assert isinstance(got, GameDetails)
        assert got.name == "ELDEN RING"

    def test_example_scenario(self, store: DiskStore, clock) -> None:
        store.put("game_details_100", {"name": "X"})
        clock.advance(hours=1)
        assert store.get("game_details_100") == {"name": "X"}
        clock.advance(hours=24)
        assert store.get("game_details_100") is None
        result = store.sweep()
        assert result.scanned == 0
        assert result.removed == 0


# ------------------------------------------------------------------ #
# Expiry
# ------------------------------------------------------------------ #


class TestExpiry:
    def test_fresh_just_before_window(self, store: DiskStore, clock) -> None:
        store.put("k", {"v": 1})
        clock.advance(hours=24, microseconds=-1)
        assert store.get("k") == {"v": 1}

    def test_expired_at_window_boundary(self, store: DiskStore, clock) -> None:
        store.put("k", {"v": 1})
        clock.advance(hours=24)
        assert store.get("k") is None

    def test_expired_entry_is_deleted(self, store: DiskStore, clock) -> None:
        store.put("k", {"v": 1})
        clock.advance(hours=24, seconds=1)
        assert store.get("k") is None
        assert not store.path_for("k").exists()

    def test_contains_does_not_delete(self, store: DiskStore, clock) -> None:
        store.put("k", {"v": 1})
        assert store.contains("k") is True
        clock.advance(hours=25)
        assert store.contains("k") is False
        assert store.path_for("k").exists()

    def test_contains_missing(self, store: DiskStore) -> None:
        assert store.contains("nope") is False


# ------------------------------------------------------------------ #
# Self-healing on corrupted entries
# ------------------------------------------------------------------ #


class TestCorruption:
    @pytest.mark.parametrize(
        "content",
        [
            "",
            "not json at all",
            "[1, 2, 3]",
            '{"data": {"name": "X"}}',
            '{"written_at": "yesterday-ish", "data": 1}',
            '{"written_at": "2026-10-17T09:00:00Z"}',
        ],
    )
    def test_undecodable_entry_is_miss_and_deleted(self, store: DiskStore, content: str) -> None:
        path = _write_raw(store, "k", content)
        assert store.get("k") is None
        assert not path.exists()

    def test_binary_garbage(self, store: DiskStore) -> None:
        path = store.path_for("k")
        path.write_bytes(b"\xff\xfe\x00garbage")
        assert store.get("k") is None
        assert not path.exists()

    def test_payload_rejected_by_codec(self, cache_root: Path, clock) -> None:
        untyped = DiskStore(cache_root, clock=clock)
        untyped.put("game_details_1", {"unexpected": True})

        typed = DiskStore(cache_root, PayloadCodec(GameDetails), clock=clock)
        assert typed.get("game_details_1") is None
        assert not typed.path_for("game_details_1").exists()

    def test_unreadable_entry_raises(self, store: DiskStore) -> None:
        store.path_for("k").mkdir()
        with pytest.raises(ReadError):
            store.get("k")


# ------------------------------------------------------------------ #
# Write failures
# ------------------------------------------------------------------ #


class TestPutFailures:
    def test_unencodable_value(self, store: DiskStore) -> None:
        store.put("k", {"v": 1})
        with pytest.raises(EncodeError):
            store.put("k", {"v": object()})
        assert store.get("k") == {"v": 1}

    def test_write_failure_keeps_previous_entry(self, store: DiskStore) -> None:
        store.put("k", {"v": 1})
        with patch("gamecache.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(WriteError, match="disk full"):
                store.put("k", {"v": 2})
        assert store.get("k") == {"v": 1}
        assert [p.name for p in store.root.iterdir()] == ["k.cache"]

    def test_fsync_failure_leaves_no_temp_file(self, store: DiskStore) -> None:
        with patch("gamecache.config.os.fsync", side_effect=OSError("io error")):
            with pytest.raises(WriteError):
                store.put("k", {"v": 1})
        assert list(store.root.iterdir()) == []

    def test_put_recreates_missing_root(self, store: DiskStore) -> None:
        store.root.rmdir()
        store.put("k", {"v": 1})
        assert store.get("k") == {"v": 1}


# ------------------------------------------------------------------ #
# Keys
# ------------------------------------------------------------------ #


class TestKeys:
    @pytest.mark.parametrize("key", ["", ".", "..", "../escape", "a/b", "a\\b", "nul\x00"])
    def test_invalid_keys_rejected(self, store: DiskStore, key: str) -> None:
        with pytest.raises(InvalidKeyError):
            store.put(key, 1)
        with pytest.raises(InvalidKeyError):
            store.get(key)

    def test_overlong_key_rejected_before_touching_disk(self, store: DiskStore) -> None:
        key = "game_details_" + "9" * MAX_KEY_BYTES
        with pytest.raises(InvalidKeyError):
            store.get(key)
        with pytest.raises(InvalidKeyError):
            store.contains(key)

    def test_longest_key_round_trips(self, store: DiskStore) -> None:
        key = "k" * MAX_KEY_BYTES
        store.put(key, {"ok": True})
        assert store.get(key) == {"ok": True}
        assert store.keys() == [key]

    def test_keys_sorted(self, store: DiskStore) -> None:
        for key in ("game_summary_2", "game_details_1", "game_reviews_1"):
            store.put(key, {})
        assert store.keys() == ["game_details_1", "game_reviews_1", "game_summary_2"]

    def test_keys_ignores_foreign_and_temp_files(self, store: DiskStore) -> None:
        store.put("game_details_1", {})
        (store.root / "notes.txt").write_text("x")
        (store.root / ".game_details_2.cache.abc123.tmp").write_text("partial")
        assert store.keys() == ["game_details_1"]


# ------------------------------------------------------------------ #
# Delete and clear
# ------------------------------------------------------------------ #


class TestDeleteAndClear:
    def test_delete_removes_entry(self, store: DiskStore) -> None:
        store.put("a", 1)
        store.put("b", 2)
        store.delete("a")
        assert store.get("a") is None
        assert store.get("b") == 2

    def test_delete_missing_is_not_an_error(self, store: DiskStore) -> None:
        store.delete("never_written")

    def test_delete_failure(self, store: DiskStore) -> None:
        store.path_for("k").mkdir()
        with pytest.raises(WriteError):
            store.delete("k")

    def test_clear_isolates(self, store: DiskStore) -> None:
        store.put("k1", {"v": 1})
        store.put("k2", {"v": 2})
        store.clear()
        assert store.get("k1") is None
        assert store.get("k2") is None
        assert store.root.is_dir()
        assert list(store.root.iterdir()) == []

    def test_clear_missing_root(self, store: DiskStore) -> None:
        store.root.rmdir()
        store.clear()
        assert store.root.is_dir()

    def test_clear_failure(self, store: DiskStore) -> None:
        with patch("gamecache.cache.store.shutil.rmtree", side_effect=PermissionError("denied")):
            with pytest.raises(DirectoryError, match="denied"):
                store.clear()


# ------------------------------------------------------------------ #
# Sweep
# ------------------------------------------------------------------ #


class TestSweep:
    def test_removes_only_expired(self, store: DiskStore, clock) -> None:
        store.put("old", {"v": "B"})
        clock.advance(hours=20)
        store.put("fresh", {"v": "A"})
        clock.advance(hours=5)

        result = store.sweep()

        assert result.model_dump() == {"scanned": 2, "removed": 1, "kept": 1, "failed": 0}
        assert not store.path_for("old").exists()
        assert store.get("fresh") == {"v": "A"}

    def test_bad_file_does_not_abort(self, store: DiskStore, clock) -> None:
        store.put("expired_1", 1)
        store.put("expired_2", 2)
        _write_raw(store, "corrupted", "{{{")
        clock.advance(hours=30)

        result = store.sweep()

        assert result.removed == 2
        assert result.failed == 1
        # Corrupted entries are reaped lazily by get().
        assert store.path_for("corrupted").exists()
        assert store.get("corrupted") is None
        assert not store.path_for("corrupted").exists()

    def test_unremovable_entry_counted(self, store: DiskStore, clock) -> None:
        store.put("a", 1)
        store.put("b", 2)
        clock.advance(hours=30)
        original_unlink = Path.unlink

        def flaky_unlink(self: Path, missing_ok: bool = False) -> None:
            if self.name == "a.cache":
                raise PermissionError("locked")
            original_unlink(self, missing_ok=missing_ok)

        with patch.object(Path, "unlink", flaky_unlink):
            result = store.sweep()

        assert result.removed == 1
        assert result.failed == 1
        assert store.keys() == ["a"]

    def test_ignores_temp_files(self, store: DiskStore, clock) -> None:
        tmp = store.root / ".k.cache.xyz.tmp"
        tmp.write_text("partial")
        clock.advance(hours=30)
        assert store.sweep().scanned == 0
        assert tmp.exists()

    def test_listing_failure(self, store: DiskStore) -> None:
        store.root.rmdir()
        with pytest.raises(DirectoryError):
            store.sweep()

    def test_does_not_decode_payload(self, cache_root: Path, clock) -> None:
        untyped = DiskStore(cache_root, clock=clock)
        untyped.put("k", {"not": "a game"})
        typed = DiskStore(cache_root, PayloadCodec(GameDetails), clock=clock)
        # A payload the codec would reject is still fresh as far as sweep cares.
        assert typed.sweep().kept == 1


# ------------------------------------------------------------------ #
# Stats
# ------------------------------------------------------------------ #


class TestStats:
    def test_empty(self, store: DiskStore) -> None:
        stats = store.stats()
        assert stats.entries == 0
        assert stats.expired == 0
        assert stats.size_bytes == 0
        assert stats.validity_hours == 24
        assert stats.directory == str(store.root)

    def test_counts(self, store: DiskStore, clock) -> None:
        store.put("a", 1)
        clock.advance(hours=25)
        store.put("b", 2)
        _write_raw(store, "c", "garbage")

        stats = store.stats()

        assert stats.entries == 3
        assert stats.expired == 1
        expected_size = sum(
            os.path.getsize(store.path_for(k)) for k in ("a", "b")
        )
        assert stats.size_bytes == expected_size
