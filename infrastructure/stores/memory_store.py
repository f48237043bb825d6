"""In-process KeyValueStore with per-key expiry.

Used by the test-suite and for local development without Redis. Expiry is
evaluated lazily on access against an injectable monotonic clock, so tests
can move time forward without sleeping.

``keys()``, ``ttl()`` and ``len()`` are not part of KeyValueStore; they exist
for inspecting stored state from tests and a local shell.
"""

import time
from typing import Callable, Optional


class MemoryKeyValueStore:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    def _expired(self, expires_at: float) -> bool:
        return self._clock() >= expires_at

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._expired(expires_at):
            del self._entries[key]
            return None
        return value

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self._entries[key] = (value, self._clock() + ttl_seconds)

    def keys(self) -> list[str]:
        """Live (unexpired) keys, in insertion order."""
        return [k for k, (_, exp) in self._entries.items() if not self._expired(exp)]

    def ttl(self, key: str) -> Optional[float]:
        """Seconds until *key* expires, or None if absent/expired."""
        entry = self._entries.get(key)
        if entry is None or self._expired(entry[1]):
            return None
        return entry[1] - self._clock()

    def __len__(self) -> int:
        return len(self.keys())
