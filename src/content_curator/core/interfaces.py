"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from typing import Optional

from content_curator.core.entities import CacheEntry, MediaKind, MetadataCandidate, RawListing


class ListingProvider(ABC):
    """Interface for searching the release indexer."""
    
    @abstractmethod
    async def search_listings(
        self,
        query_terms: list[str],
        category_filter: list[int],
        min_seeders: int,
        limit: int,
    ) -> list[RawListing]:
        """Search releases matching any of the query terms."""
        pass


class MetadataProvider(ABC):
    """Interface for the movie/TV metadata database."""
    
    @abstractmethod
    async def search_by_title(self, cleaned_title: str, media_kind: MediaKind) -> list[MetadataCandidate]:
        """Search candidates by title; results may carry partial data."""
        pass
    
    @abstractmethod
    async def fetch_details(self, external_id: int, media_kind: MediaKind) -> Optional[MetadataCandidate]:
        """Fetch the complete record for one candidate."""
        pass


class CacheBackend(ABC):
    """Interface for storing cache entries."""
    
    @abstractmethod
    async def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry stored under key, if any."""
        pass
    
    @abstractmethod
    async def set(self, key: str, entry: CacheEntry) -> None:
        """Store entry under key, expiring after the entry's TTL."""
        pass
    
    @abstractmethod
    async def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with prefix and return how many were removed."""
        pass
    
    async def close(self) -> None:
        """Release connections held by the backend."""
        pass
