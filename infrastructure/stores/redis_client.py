"""Async Redis connection factory for the rate-limit and event stores.

``create_redis_client`` pings before returning, so a returned client was
reachable at startup. It returns None instead of raising; the app factory
decides whether that is fatal (production) or falls back to memory.
"""

from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from shared.logging import get_logger

log = get_logger(__name__)


def redis_host(redis_uri: str) -> str:
    """*redis_uri* without its credentials, for logs."""
    return redis_uri.rsplit("@", 1)[-1]


async def create_redis_client(
    redis_uri: str, *, store: str = "default", timeout_seconds: float = 5.0
) -> Optional[aioredis.Redis]:
    """Connect to Redis for *store* and return a client, or None on failure."""
    client: Optional[aioredis.Redis] = None
    try:
        client = aioredis.from_url(
            redis_uri,
            decode_responses=True,
            socket_connect_timeout=timeout_seconds,
            socket_timeout=timeout_seconds,
        )
        await client.ping()
    except (RedisError, OSError, ValueError) as e:
        log.warning(
            "redis_connection_failed",
            store=store,
            host=redis_host(redis_uri),
            error=str(e),
            error_type=type(e).__name__,
        )
        if client is not None:
            await client.aclose()
        return None

    log.info("redis_connected", store=store, host=redis_host(redis_uri))
    return client
