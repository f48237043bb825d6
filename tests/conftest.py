"""
Shared fixtures.

Everything runs against in-memory stores driven by a fake clock; no Redis or
network access is needed.
"""

import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import AppSettings, IngestPolicy
from infrastructure.stores.event_store import EventStore
from infrastructure.stores.memory_store import MemoryKeyValueStore
from infrastructure.stores.rate_limit_store import RateLimitStore
from services.tracking_service import ClientContext, TrackingService

ALLOWED_ORIGIN = "https://nikhilbadyal.pages.dev"
CLIENT_IP = "203.0.113.7"

SETTINGS_ENV_VARS = (
    "ENV",
    "REDIS_URI",
    "RATE_LIMIT_REDIS_URI",
    "EVENTS_REDIS_URI",
    "SENTRY_DSN",
    "LOG_FORMAT",
    "SAMPLE_RATE_TRACKED",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Settings see only what a test sets: no .env file, no inherited env vars."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class FakeClock:
    """Callable clock returning epoch seconds; advance() moves it forward."""

    def __init__(self, start: float = 1_760_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def policy():
    return IngestPolicy()


@pytest.fixture
def rate_backend(clock):
    return MemoryKeyValueStore(clock=clock)


@pytest.fixture
def event_backend(clock):
    return MemoryKeyValueStore(clock=clock)


@pytest.fixture
def service(policy, rate_backend, event_backend, clock):
    return TrackingService(
        policy,
        RateLimitStore(rate_backend, policy),
        EventStore(event_backend, policy),
        clock=clock,
    )


@pytest.fixture
def client_context():
    return ClientContext(
        origin=ALLOWED_ORIGIN,
        ip=CLIENT_IP,
        country="DE",
        user_agent="Mozilla/5.0 (X11; Linux x86_64)",
    )


def build_app(rate_backend, event_backend, policy: IngestPolicy = None):
    """App wired to the given in-memory backends, no Redis involved."""
    return create_app(
        settings=AppSettings(env="development"),
        policy=policy,
        rate_limit_backend=rate_backend,
        event_backend=event_backend,
    )


@pytest.fixture
def app_factory(rate_backend, event_backend):
    """Build apps on the shared backends, optionally with a custom policy."""

    def _build(policy: IngestPolicy = None):
        return build_app(rate_backend, event_backend, policy)

    return _build


@pytest.fixture
def client(rate_backend, event_backend):
    with TestClient(build_app(rate_backend, event_backend)) as test_client:
        yield test_client


@pytest.fixture
def tracking_headers():
    """Factory for headers of a request that passes every HTTP gate."""

    def _headers(origin: str = ALLOWED_ORIGIN, ip: str = CLIENT_IP, **extra: str) -> dict:
        headers = {
            "Origin": origin,
            "CF-Connecting-IP": ip,
            "Content-Type": "application/json",
        }
        headers.update(extra)
        return headers

    return _headers
