"""
Application configuration.

Two layers:

- ``AppSettings`` and its sub-configs are loaded from environment variables
  (and .env file) via pydantic-settings. They describe *where* the service
  runs: Redis URIs, logging, Sentry.
- ``IngestPolicy`` is the fixed rule set of the tracking endpoint (origin
  allow-list, rate limits, retention, size and truncation limits). It is a
  frozen model built once in ``create_app()`` and never read from the
  environment.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Shared default for both stores; per-store URIs win when set
    redis_uri: Optional[str] = None
    rate_limit_redis_uri: Optional[str] = None
    events_redis_uri: Optional[str] = None
    redis_timeout_seconds: float = 5.0

    @property
    def rate_limit_uri(self) -> Optional[str]:
        return self.rate_limit_redis_uri or self.redis_uri

    @property
    def events_uri(self) -> Optional[str]:
        return self.events_redis_uri or self.redis_uri


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    # "json" or "console"; unset picks json in production, console otherwise
    log_format: Optional[str] = None

    # Sampling rate (0.0–1.0) for the per-visit success log
    sample_rate_tracked: float = 0.10


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: str = "development"
    app_name: str = "visit-tracker"

    # Sub-configs (composed via model_validator below)
    redis: Optional[RedisSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.redis is None:
            self.redis = RedisSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()
        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"


DEFAULT_ALLOWED_ORIGINS: tuple[str, ...] = (
    "https://www.nikhilbadyal.com",
    "https://nikhilbadyal.pages.dev",
    "https://nikhilbadyal.vercel.app",
    "https://nikhilbadyal.netlify.app",
    "https://nikhilbadyal.surge.sh",
)


class IngestPolicy(BaseModel):
    """Fixed rules applied by the tracking endpoint."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    allowed_origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS

    # Headers set by the edge platform (Cloudflare); not client-controllable
    client_ip_header: str = "CF-Connecting-IP"
    country_header: str = "CF-IPCountry"
    default_country: str = "Unknown"

    rate_limit_window_seconds: int = 60
    rate_limit_max_requests: int = 100

    event_retention_seconds: int = 60 * 60 * 24 * 30
    max_entry_bytes: int = 24 * 1024 * 1024

    max_field_length: int = 512
    max_nested_field_length: int = 32
    max_session_id_length: int = 255

    rate_limit_key_prefix: str = "rateLimit:"
    visit_key_prefix: str = "visit:"

    def is_origin_allowed(self, origin: Optional[str]) -> bool:
        """Exact match against the allow-list; no pattern matching."""
        return bool(origin) and origin in self.allowed_origins

    def rate_limit_key(self, client_ip: str) -> str:
        return f"{self.rate_limit_key_prefix}{client_ip}"

    def visit_key(self, now_ms: int, visit_id: str) -> str:
        return f"{self.visit_key_prefix}{now_ms}:{visit_id}"
