"""Canonical Pydantic models shared across all gamecache modules.

The models fall into three groups:

**Cache entry models** -- the on-disk representation of a cached value:
    :class:`Envelope` (payload plus write timestamp) and
    :class:`EnvelopeHeader` (timestamp only, used when the payload does not
    need to be decoded).

**Cache reports** -- returned by maintenance operations:
    :class:`SweepResult` and :class:`CacheStats`.

**Configuration models** -- serialised as JSON in the user's config
directory: :class:`CacheConfig`, :class:`ClientConfig`,
:class:`OutputConfig`, and :class:`GlobalConfig`.

The validity window is a fixed module constant, :data:`VALIDITY_WINDOW`.
It is not part of the configuration models.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

VALIDITY_WINDOW = timedelta(hours=24)
"""How long an entry stays fresh after it was written."""


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# --- Cache entries ---


class EnvelopeHeader(BaseModel):
    """The timestamp part of a stored envelope.

    Validating a cache file against this model skips the ``data`` field
    entirely, which keeps :meth:`~gamecache.cache.store.DiskStore.sweep`
    from materialising payloads it is only going to throw away.
    """

    model_config = ConfigDict(frozen=True)

    written_at: datetime = Field(description="When the entry was written (UTC)")

    @field_validator("written_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def expires_at(self) -> datetime:
        """The first instant at which the entry is no longer valid."""
        return self.written_at + VALIDITY_WINDOW

    def is_valid(self, now: datetime) -> bool:
        """Return ``True`` while *now* is strictly before :attr:`expires_at`."""
        return now < self.expires_at


class Envelope(EnvelopeHeader):
    """A cached payload paired with its write timestamp.

    ``data`` holds the JSON-compatible form produced by a
    :class:`~gamecache.cache.codec.PayloadCodec`; turning it back into a
    typed value is the codec's job, not the envelope's. Envelopes are
    frozen: writing the same key again produces a new envelope.

    Example::

        Envelope(data={"name": "ELDEN RING"}, written_at=utcnow())
    """

    data: Any = Field(description="JSON-compatible payload")


class SweepResult(BaseModel):
    """Outcome of a :meth:`~gamecache.cache.store.DiskStore.sweep` pass."""

    scanned: int = 0
    removed: int = 0
    kept: int = 0
    failed: int = 0


class CacheStats(BaseModel):
    """Snapshot of the cache directory."""

    directory: str
    entries: int = 0
    expired: int = 0
    size_bytes: int = 0
    validity_hours: float = VALIDITY_WINDOW.total_seconds() / 3600


# --- Configuration ---


class CacheConfig(BaseModel):
    """Cache location and housekeeping settings."""

    directory: Optional[str] = Field(
        default=None,
        description="Cache root override; defaults to <cache dir>/GameCache",
    )
    sweep_on_open: bool = Field(
        default=True, description="Remove expired entries when the cache is opened"
    )


class ClientConfig(BaseModel):
    """Settings for the Steam store client."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    language: str = Field(default="english", description="Store and review language")
    country: str = Field(default="US", description="Store country code")
    summarize_url: str = Field(
        default="https://steamsummarize.com/api/summarize",
        description="Endpoint that generates review summaries",
    )


class OutputConfig(BaseModel):
    """Output formatting preferences."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto",
        description="Data format used when neither --json nor --plain is given",
    )


class GlobalConfig(BaseModel):
    """Top-level configuration stored in ``<config dir>/config.json``.

    Example::

        {
          "cache": {"directory": null, "sweep_on_open": true},
          "client": {"timeout": 30, "language": "english", "country": "US"},
          "output": {"format": "auto"}
        }
    """

    cache: CacheConfig = Field(default_factory=CacheConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
