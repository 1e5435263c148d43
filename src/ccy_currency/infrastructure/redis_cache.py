"""RedisKeyValueCache: concrete KeyValueCache over redis.asyncio.

Every Redis/transport failure is re-raised as CacheError so the service can
degrade to the store without knowing about redis exception types.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.ccy_common.errors import CacheError

_SCAN_BATCH = 500


@asynccontextmanager
async def _cache_errors(op: str) -> AsyncIterator[None]:
    try:
        yield
    except (RedisError, OSError, TimeoutError) as exc:
        raise CacheError(f"{op}: {exc}") from exc


class RedisKeyValueCache:
    def __init__(self, client: aioredis.Redis) -> None:
        self._client = client

    async def get(self, key: str) -> str | None:
        async with _cache_errors(f"GET {key}"):
            return await self._client.get(key)

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        async with _cache_errors(f"SET {key}"):
            await self._client.set(key, value, ex=ttl)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        async with _cache_errors(f"DEL {' '.join(keys)}"):
            return await self._client.delete(*keys)

    async def delete_by_prefix(self, prefix: str) -> int:
        """SCAN + DEL; unlike KEYS this does not block Redis on a large keyspace."""
        async with _cache_errors(f"DEL {prefix}*"):
            keys = [k async for k in self._client.scan_iter(match=f"{prefix}*", count=_SCAN_BATCH)]
            if not keys:
                return 0
            return await self._client.delete(*keys)

    async def ping(self) -> bool:
        async with _cache_errors("PING"):
            return await self._client.ping()
