"""
Visit tracking service.

Runs the body-level part of the ingestion pipeline for one request that has
already passed the HTTP gates (method, origin, client IP):

    rate limit -> parse JSON -> sessionId gate -> sanitize
    -> compose StoredEvent -> size cap -> unique key -> persist

Every step raises a TrackingError subclass on failure; nothing after a
failed step runs. The service holds no per-request state, so one instance is
shared by all requests.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from config import IngestPolicy
from errors import (
    InvalidDataError,
    InvalidJSONError,
    OriginDeniedError,
    OriginMissingError,
    RateLimitError,
    StorageError,
)
from infrastructure.stores.event_store import EventStore
from infrastructure.stores.rate_limit_store import RateLimitStore
from schemas.models.event import RateLimitRecord, StoredEvent
from shared.datetime_utils import epoch_ms, to_iso_millis
from shared.generators import generate_visit_id
from shared.logging import get_logger, hash_ip, should_sample
from shared.sanitizer import sanitize_telemetry

log = get_logger(__name__)


@dataclass(frozen=True)
class ClientContext:
    """Server-observed facts about the caller, taken from trusted headers."""

    origin: str
    ip: str
    country: str
    user_agent: Optional[str]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite constant {name}")


def parse_body(body: bytes) -> dict:
    """Parse a request body as a JSON object or raise InvalidJSONError."""
    if not body:
        raise InvalidJSONError("empty body")
    try:
        data = json.loads(body, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        raise InvalidJSONError(f"unparseable body: {type(e).__name__}") from e
    if not isinstance(data, dict):
        raise InvalidJSONError(f"body is {type(data).__name__}, not an object")
    return data


class TrackingService:
    def __init__(
        self,
        policy: IngestPolicy,
        rate_limits: RateLimitStore,
        events: EventStore,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.policy = policy
        self._rate_limits = rate_limits
        self._events = events
        self._clock = clock

    def check_origin(self, origin: Optional[str]) -> str:
        """Return *origin* if allow-listed; raise the matching 403 otherwise."""
        if not origin:
            raise OriginMissingError("no Origin header")
        if not self.policy.is_origin_allowed(origin):
            raise OriginDeniedError(f"origin not allow-listed: {origin[:100]}")
        return origin

    async def check_rate_limit(self, client_ip: str, now_ms: int) -> None:
        """Count this request against *client_ip* or raise RateLimitError.

        Read-then-write, not atomic: concurrent requests from one IP may both
        pass near the ceiling.
        """
        try:
            record = await self._rate_limits.get(client_ip)
        except Exception as e:
            log.error("rate_limit_read_failed", error=str(e), exc_info=e)
            raise StorageError("rate-limit store read failed") from e

        count = record.count if record is not None else 0
        if count >= self.policy.rate_limit_max_requests:
            raise RateLimitError(f"ip {hash_ip(client_ip)} at {count} requests")

        try:
            await self._rate_limits.put(
                client_ip, RateLimitRecord(count=count + 1, timestamp=now_ms)
            )
        except Exception as e:
            log.error("rate_limit_write_failed", error=str(e), exc_info=e)
            raise StorageError("rate-limit store write failed") from e

    def validate(self, data: dict) -> None:
        session_id = data.get("sessionId")
        if not isinstance(session_id, str):
            raise InvalidDataError("sessionId missing or not a string")
        if len(session_id) > self.policy.max_session_id_length:
            raise InvalidDataError(f"sessionId length {len(session_id)}")

    def compose(self, data: dict, client: ClientContext, now_ms: int) -> StoredEvent:
        sanitized = sanitize_telemetry(
            data,
            max_length=self.policy.max_field_length,
            nested_max_length=self.policy.max_nested_field_length,
        )
        return StoredEvent.compose(
            sanitized,
            timestamp=to_iso_millis(now_ms),
            ip=client.ip,
            country=client.country,
            ua=client.user_agent,
        )

    async def track(self, client: ClientContext, body: bytes) -> str:
        """Run the pipeline for one request and return the stored visit key."""
        now_ms = epoch_ms(self._clock())

        await self.check_rate_limit(client.ip, now_ms)

        data = parse_body(body)
        self.validate(data)
        entry = self.compose(data, client, now_ms)

        serialized = entry.to_json()
        size = len(serialized.encode("utf-8"))
        if size > self.policy.max_entry_bytes:
            raise InvalidDataError(f"entry of {size} bytes exceeds cap")

        visit_key = self.policy.visit_key(now_ms, generate_visit_id(now_ms))
        try:
            await self._events.put(visit_key, serialized)
        except Exception as e:
            log.error(
                "visit_store_failed",
                visit_key=visit_key,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=e,
            )
            raise StorageError("event store write failed") from e

        if should_sample("visit_tracked"):
            log.info(
                "visit_tracked",
                visit_key=visit_key,
                client_ip=client.ip,
                country=client.country,
                size_bytes=size,
            )
        return visit_key
