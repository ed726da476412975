"""Shared test fixtures for gamecache.

Provides a controllable clock, isolated cache roots, and resets the global
output state between tests. These fixtures are automatically discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from gamecache.cache import DiskStore
from gamecache.output import reset_output

T0 = datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test, the cached references go stale once the test finishes.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Cache fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    """A clock frozen at T0."""
    return FakeClock()


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    """A cache root that does not exist yet."""
    return tmp_path / "GameCache"


@pytest.fixture
def store(cache_root: Path, clock: FakeClock) -> DiskStore:
    """A DiskStore on a fresh root driven by the fake clock."""
    return DiskStore(cache_root, clock=clock)
