"""Redis-backed KeyValueStore.

Values are plain strings (JSON text); every write is a single SETEX so a
record is either fully visible with its TTL or not at all. Redis errors
propagate to the caller.
"""

from typing import Optional

import redis.asyncio as aioredis


class RedisKeyValueStore:
    def __init__(self, redis_client: aioredis.Redis) -> None:
        self._redis = redis_client

    async def get(self, key: str) -> Optional[str]:
        return await self._redis.get(key)

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._redis.setex(key, ttl_seconds, value)

    async def aclose(self) -> None:
        await self._redis.aclose()
