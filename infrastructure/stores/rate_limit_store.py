"""Per-IP rate-limit counters.

Stores RateLimitRecord as JSON under ``rateLimit:<ip>``. Every write carries
a fresh TTL equal to the window, so the counter only disappears after a full
window without writes (rolling, approximate window).
"""

import json
from typing import Optional

from pydantic import ValidationError

from config import IngestPolicy
from infrastructure.stores.protocol import KeyValueStore
from schemas.models.event import RateLimitRecord
from shared.logging import get_logger

log = get_logger(__name__)


class RateLimitStore:
    def __init__(self, backend: KeyValueStore, policy: IngestPolicy) -> None:
        self._backend = backend
        self._policy = policy

    async def get(self, client_ip: str) -> Optional[RateLimitRecord]:
        """Return the counter for *client_ip*, or None if absent or unreadable.

        Backend errors propagate.
        """
        raw = await self._backend.get(self._policy.rate_limit_key(client_ip))
        if raw is None:
            return None
        try:
            return RateLimitRecord.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            log.warning("rate_limit_record_corrupt", error=str(e))
            return None

    async def put(self, client_ip: str, record: RateLimitRecord) -> None:
        await self._backend.put(
            self._policy.rate_limit_key(client_ip),
            record.model_dump_json(),
            self._policy.rate_limit_window_seconds,
        )
