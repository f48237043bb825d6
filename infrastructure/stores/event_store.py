"""Write-only store for tracked visits.

Each visit is written once under its own unique key with the retention TTL;
there is no read, update or delete path.
"""

from config import IngestPolicy
from infrastructure.stores.protocol import KeyValueStore


class EventStore:
    def __init__(self, backend: KeyValueStore, policy: IngestPolicy) -> None:
        self._backend = backend
        self._policy = policy

    async def put(self, key: str, serialized_event: str) -> None:
        await self._backend.put(
            key, serialized_event, self._policy.event_retention_seconds
        )
