"""Unit tests for the visit event models."""

import json

import pytest
from pydantic import ValidationError

from schemas.models.event import (
    ConnectionInfo,
    RateLimitRecord,
    SanitizedEvent,
    ScreenInfo,
    StoredEvent,
)


# ── Helpers ───────────────────────────────────────────────────────────────────


def _compose(sanitized: SanitizedEvent, **overrides) -> StoredEvent:
    server = dict(
        timestamp="2026-10-19T12:00:00.000Z",
        ip="203.0.113.7",
        country="DE",
        ua="Mozilla/5.0",
    )
    server.update(overrides)
    return StoredEvent.compose(sanitized, **server)


# ── SanitizedEvent ────────────────────────────────────────────────────────────


class TestSanitizedEvent:
    def test_camel_case_aliases(self):
        e = SanitizedEvent.model_validate({"sessionId": "s", "cpuCores": 4})
        assert e.session_id == "s"
        assert e.cpu_cores == 4

    def test_extra_keys_forbidden(self):
        with pytest.raises(ValidationError):
            SanitizedEvent.model_validate({"sessionId": "s", "ip": "1.1.1.1"})

    def test_int_stays_int(self):
        e = SanitizedEvent.model_validate({"cpuCores": 8, "deviceMemory": 0.5})
        assert isinstance(e.cpu_cores, int)
        assert e.device_memory == 0.5

    def test_nested_models(self):
        e = SanitizedEvent(
            connection=ConnectionInfo(effective_type="4g"),
            screen=ScreenInfo(width=1920, pixel_ratio=2),
        )
        assert e.connection.effective_type == "4g"
        assert e.screen.pixel_ratio == 2


# ── StoredEvent ───────────────────────────────────────────────────────────────


class TestStoredEvent:
    def test_server_fields_override_client_timestamp(self):
        sanitized = SanitizedEvent.model_validate(
            {"sessionId": "s", "timestamp": "1999-01-01T00:00:00.000Z"}
        )
        stored = _compose(sanitized)
        assert stored.timestamp == "2026-10-19T12:00:00.000Z"

    def test_to_json_only_set_fields(self):
        stored = _compose(SanitizedEvent.model_validate({"sessionId": "s"}))
        assert json.loads(stored.to_json()) == {
            "sessionId": "s",
            "timestamp": "2026-10-19T12:00:00.000Z",
            "ip": "203.0.113.7",
            "country": "DE",
            "ua": "Mozilla/5.0",
        }

    def test_to_json_nested_camel_case(self):
        sanitized = SanitizedEvent.model_validate(
            {
                "sessionId": "s",
                "screen": ScreenInfo(
                    height=1, orientation=None, pixel_ratio=1.5, width=2
                ),
            }
        )
        data = json.loads(_compose(sanitized).to_json())
        assert data["screen"] == {
            "height": 1,
            "orientation": None,
            "pixelRatio": 1.5,
            "width": 2,
        }

    def test_null_user_agent_serialized(self):
        stored = _compose(SanitizedEvent.model_validate({"sessionId": "s"}), ua=None)
        assert json.loads(stored.to_json())["ua"] is None

    def test_server_fields_required(self):
        with pytest.raises(ValidationError):
            StoredEvent.model_validate({"sessionId": "s"})


# ── RateLimitRecord ───────────────────────────────────────────────────────────


class TestRateLimitRecord:
    def test_round_trip_shape(self):
        r = RateLimitRecord(count=3, timestamp=1760000000000)
        assert json.loads(r.model_dump_json()) == {
            "count": 3,
            "timestamp": 1760000000000,
        }

    def test_requires_count(self):
        with pytest.raises(ValidationError):
            RateLimitRecord.model_validate({"timestamp": 1})
