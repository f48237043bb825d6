"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI

from config import AppSettings, IngestPolicy
from errors import register_error_handlers
from infrastructure.stores.event_store import EventStore
from infrastructure.stores.memory_store import MemoryKeyValueStore
from infrastructure.stores.protocol import KeyValueStore
from infrastructure.stores.rate_limit_store import RateLimitStore
from infrastructure.stores.redis_client import create_redis_client
from infrastructure.stores.redis_store import RedisKeyValueStore
from routes.health_routes import router as health_router
from routes.tracking_routes import router as tracking_router
from services.tracking_service import TrackingService
from shared.logging import get_logger, register_request_logging

log = get_logger(__name__)


async def _open_store(
    name: str, uri: Optional[str], settings: AppSettings
) -> KeyValueStore:
    """Connect the Redis backend for *name*, or fall back to memory in dev."""
    if uri:
        client = await create_redis_client(
            uri, store=name, timeout_seconds=settings.redis.redis_timeout_seconds
        )
        if client is not None:
            return RedisKeyValueStore(client)

    if settings.is_production:
        raise RuntimeError(f"{name} store: Redis is required in production")

    log.warning("store_in_memory_fallback", store=name, configured=bool(uri))
    return MemoryKeyValueStore()


def create_app(
    settings: Optional[AppSettings] = None,
    policy: Optional[IngestPolicy] = None,
    rate_limit_backend: Optional[KeyValueStore] = None,
    event_backend: Optional[KeyValueStore] = None,
) -> FastAPI:
    """Create and return a fully configured FastAPI application.

    Backends passed in are used as-is; otherwise they are opened from
    ``settings.redis`` during startup.
    """
    if settings is None:
        settings = AppSettings()
    if policy is None:
        policy = IngestPolicy()

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        opened: list[KeyValueStore] = []

        rate_backend = rate_limit_backend
        if rate_backend is None:
            rate_backend = await _open_store(
                "rate_limit", settings.redis.rate_limit_uri, settings
            )
            opened.append(rate_backend)

        events_backend = event_backend
        if events_backend is None:
            events_backend = await _open_store(
                "events", settings.redis.events_uri, settings
            )
            opened.append(events_backend)

        app.state.settings = settings
        app.state.policy = policy
        app.state.tracking_service = TrackingService(
            policy,
            RateLimitStore(rate_backend, policy),
            EventStore(events_backend, policy),
        )
        log.info(
            "tracker_started",
            env=settings.env,
            allowed_origins=len(policy.allowed_origins),
            rate_limit_max_requests=policy.rate_limit_max_requests,
            rate_limit_window_seconds=policy.rate_limit_window_seconds,
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        for backend in opened:
            if isinstance(backend, RedisKeyValueStore):
                await backend.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    register_error_handlers(app)
    register_request_logging(app)
    # Order matters: /status must match before the catch-all tracking route
    app.include_router(health_router)
    app.include_router(tracking_router)

    return app
