"""Unit tests for AppSettings, sub-configs and IngestPolicy."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from config import (
    DEFAULT_ALLOWED_ORIGINS,
    AppSettings,
    IngestPolicy,
    LoggingSettings,
    RedisSettings,
)


# ---------------------------------------------------------------------------
# RedisSettings
# ---------------------------------------------------------------------------


class TestRedisSettings:
    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        for var in ("REDIS_URI", "RATE_LIMIT_REDIS_URI", "EVENTS_REDIS_URI"):
            monkeypatch.delenv(var, raising=False)

    def test_all_optional(self):
        s = RedisSettings()
        assert s.rate_limit_uri is None
        assert s.events_uri is None
        assert s.redis_timeout_seconds == 5.0

    def test_shared_uri_used_for_both_stores(self, monkeypatch):
        monkeypatch.setenv("REDIS_URI", "redis://shared:6379")
        s = RedisSettings()
        assert s.rate_limit_uri == "redis://shared:6379"
        assert s.events_uri == "redis://shared:6379"

    def test_per_store_uri_wins(self, monkeypatch):
        monkeypatch.setenv("REDIS_URI", "redis://shared:6379")
        monkeypatch.setenv("EVENTS_REDIS_URI", "redis://events:6379/1")
        s = RedisSettings()
        assert s.rate_limit_uri == "redis://shared:6379"
        assert s.events_uri == "redis://events:6379/1"


class TestLoggingSettings:
    def test_defaults(self, monkeypatch):
        for var in ("LOG_LEVEL", "LOG_FORMAT", "SAMPLE_RATE_TRACKED"):
            monkeypatch.delenv(var, raising=False)
        s = LoggingSettings()
        assert s.log_level == "INFO"
        assert s.log_format is None
        assert s.sample_rate_tracked == 0.10


# ---------------------------------------------------------------------------
# AppSettings
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "env, expected",
    [("production", True), ("development", False)],
    ids=["production", "development"],
)
def test_is_production(monkeypatch, env, expected):
    monkeypatch.setenv("ENV", env)
    assert AppSettings().is_production is expected


def test_sub_configs_populated(monkeypatch):
    monkeypatch.delenv("SENTRY_DSN", raising=False)
    s = AppSettings()
    assert isinstance(s.redis, RedisSettings)
    assert isinstance(s.logging, LoggingSettings)
    assert s.sentry.sentry_dsn == ""


# ---------------------------------------------------------------------------
# IngestPolicy
# ---------------------------------------------------------------------------


class TestIngestPolicy:
    def test_defaults(self):
        p = IngestPolicy()
        assert p.rate_limit_window_seconds == 60
        assert p.rate_limit_max_requests == 100
        assert p.event_retention_seconds == 30 * 24 * 60 * 60
        assert p.max_entry_bytes == 24 * 1024 * 1024
        assert p.max_field_length == 512
        assert p.max_nested_field_length == 32
        assert p.max_session_id_length == 255
        assert p.allowed_origins == DEFAULT_ALLOWED_ORIGINS

    def test_frozen(self):
        p = IngestPolicy()
        with pytest.raises(PydanticValidationError):
            p.rate_limit_max_requests = 1_000_000

    def test_unknown_field_rejected(self):
        with pytest.raises(PydanticValidationError):
            IngestPolicy(allow_everything=True)

    def test_not_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "5")
        assert IngestPolicy().rate_limit_max_requests == 100

    @pytest.mark.parametrize(
        "origin, expected",
        [
            ("https://nikhilbadyal.pages.dev", True),
            ("https://www.nikhilbadyal.com", True),
            ("https://nikhilbadyal.com", False),
            ("https://nikhilbadyal.pages.dev/", False),
            ("https://evil.nikhilbadyal.pages.dev", False),
            ("http://nikhilbadyal.pages.dev", False),
            ("", False),
            (None, False),
        ],
    )
    def test_is_origin_allowed_exact_match(self, origin, expected):
        assert IngestPolicy().is_origin_allowed(origin) is expected

    def test_keys(self):
        p = IngestPolicy()
        assert p.rate_limit_key("1.2.3.4") == "rateLimit:1.2.3.4"
        assert p.visit_key(1700000000000, "abc") == "visit:1700000000000:abc"
