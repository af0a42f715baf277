"""Redis cache backend."""

import json
import logging
from typing import Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from content_curator.core import CacheBackend, CacheBackendError, CacheEntry

logger = logging.getLogger(__name__)


class RedisCache(CacheBackend):
    """Cache entries stored as JSON strings with a Redis expiry."""

    def __init__(self, client: aioredis.Redis) -> None:
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        """Create a cache with its own connection pool."""
        client = aioredis.Redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        return cls(client)

    async def get(self, key: str) -> Optional[CacheEntry]:
        try:
            raw = await self.client.get(key)
        except RedisError as e:
            raise CacheBackendError(f"GET {key} failed: {e}") from e

        if raw is None:
            return None

        try:
            return CacheEntry.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            # Unreadable entries behave like a miss and get overwritten
            logger.warning("Discarding unreadable cache entry %s: %s", key, e)
            return None

    async def set(self, key: str, entry: CacheEntry) -> None:
        payload = json.dumps(entry.to_dict(), ensure_ascii=False)
        try:
            await self.client.set(key, payload, ex=max(1, int(entry.ttl_seconds)))
        except RedisError as e:
            raise CacheBackendError(f"SET {key} failed: {e}") from e

    async def delete_prefix(self, prefix: str) -> int:
        try:
            keys = [key async for key in self.client.scan_iter(match=f"{prefix}*")]
            if not keys:
                return 0
            return int(await self.client.delete(*keys))
        except RedisError as e:
            raise CacheBackendError(f"DELETE {prefix}* failed: {e}") from e

    async def close(self) -> None:
        await self.client.aclose()
