"""Cache backend adapters."""

from content_curator.adapters.cache.memory_cache import InMemoryCache
from content_curator.adapters.cache.redis_cache import RedisCache

__all__ = ["InMemoryCache", "RedisCache"]
