"""In-process cache backend."""

import time
from typing import Callable, Optional

from content_curator.core import CacheBackend, CacheEntry


class InMemoryCache(CacheBackend):
    """Dict-backed cache; entries are kept as objects, not serialized."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self.clock = clock
        self._entries: dict[str, tuple[CacheEntry, float]] = {}

    async def get(self, key: str) -> Optional[CacheEntry]:
        stored = self._entries.get(key)
        if stored is None:
            return None

        entry, expires_at = stored
        if self.clock() >= expires_at:
            del self._entries[key]
            return None
        return entry

    async def set(self, key: str, entry: CacheEntry) -> None:
        self._entries[key] = (entry, self.clock() + entry.ttl_seconds)

    async def delete_prefix(self, prefix: str) -> int:
        keys = [key for key in self._entries if key.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def __len__(self) -> int:
        return len(self._entries)
