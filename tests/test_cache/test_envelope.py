"""Tests for the envelope models and the validity window."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from gamecache.models import VALIDITY_WINDOW, Envelope, EnvelopeHeader

WRITTEN = datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)


class TestValidity:
    def test_window_is_24_hours(self) -> None:
        assert VALIDITY_WINDOW == timedelta(hours=24)

    def test_expires_at(self) -> None:
        env = Envelope(data=1, written_at=WRITTEN)
        assert env.expires_at == WRITTEN + timedelta(hours=24)

    @pytest.mark.parametrize(
        "age, valid",
        [
            (timedelta(0), True),
            (timedelta(hours=23, minutes=59, seconds=59), True),
            (timedelta(hours=24) - timedelta(microseconds=1), True),
            (timedelta(hours=24), False),
            (timedelta(days=3), False),
        ],
    )
    def test_is_valid(self, age: timedelta, valid: bool) -> None:
        env = Envelope(data={"v": 1}, written_at=WRITTEN)
        assert env.is_valid(WRITTEN + age) is valid

    def test_future_timestamp_is_valid(self) -> None:
        env = Envelope(data=None, written_at=WRITTEN + timedelta(hours=1))
        assert env.is_valid(WRITTEN)

    def test_naive_timestamp_treated_as_utc(self) -> None:
        env = Envelope(data=1, written_at=datetime(2026, 10, 17, 9, 30))
        assert env.written_at == WRITTEN
        assert env.is_valid(WRITTEN + timedelta(hours=1))

    def test_other_timezone_compares_by_instant(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        env = Envelope(data=1, written_at=datetime(2026, 10, 17, 11, 30, tzinfo=plus_two))
        assert env.expires_at == WRITTEN + timedelta(hours=24)


class TestEnvelopeModel:
    def test_frozen(self) -> None:
        env = Envelope(data=1, written_at=WRITTEN)
        with pytest.raises(ValidationError):
            env.data = 2

    def test_data_required(self) -> None:
        with pytest.raises(ValidationError):
            Envelope.model_validate({"written_at": WRITTEN.isoformat()})

    def test_none_data_allowed(self) -> None:
        env = Envelope.model_validate_json('{"written_at": "2026-10-17T09:30:00Z", "data": null}')
        assert env.data is None

    def test_json_field_names(self) -> None:
        env = Envelope(data={"name": "X"}, written_at=WRITTEN)
        dumped = env.model_dump(mode="json")
        assert set(dumped) == {"written_at", "data"}

    def test_header_ignores_payload(self) -> None:
        raw = '{"written_at": "2026-10-17T09:30:00Z", "data": {"huge": [1, 2, 3]}}'
        header = EnvelopeHeader.model_validate_json(raw)
        assert header.written_at == WRITTEN
        assert not hasattr(header, "data")

    def test_header_requires_timestamp(self) -> None:
        with pytest.raises(ValidationError):
            EnvelopeHeader.model_validate_json('{"data": 1}')
