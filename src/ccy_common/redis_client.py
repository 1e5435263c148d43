"""Redis client factory: backs the currency read cache only.

PostgreSQL stays the source of truth; nothing in Redis is authoritative.
"""

import redis.asyncio as aioredis

from config.settings import Settings


def create_redis(settings: Settings) -> aioredis.Redis:
    """Build a pooled client. Connections are opened lazily on first command."""
    return aioredis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.REDIS_PASSWORD or None,
        db=settings.REDIS_DB,
        decode_responses=True,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
    )


async def close_redis(client: aioredis.Redis) -> None:
    """Close the client and release its connection pool."""
    await client.aclose()
