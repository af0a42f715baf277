"""Core domain layer."""

from content_curator.core.entities import (
    CacheEntry,
    CacheStatus,
    CategoryQuery,
    ContentCategory,
    ContentItem,
    DocumentSource,
    EnrichmentResult,
    EnrichmentStatus,
    FeaturedContentDocument,
    MediaKind,
    MetadataCandidate,
    RawListing,
    RefreshResult,
)
from content_curator.core.errors import (
    CacheBackendError,
    CuratorError,
    ListingProviderError,
    MetadataProviderError,
)
from content_curator.core.fallback_content import FallbackContentProvider
from content_curator.core.interfaces import CacheBackend, ListingProvider, MetadataProvider

__all__ = [
    "CacheEntry",
    "CacheStatus",
    "CategoryQuery",
    "ContentCategory",
    "ContentItem",
    "DocumentSource",
    "EnrichmentResult",
    "EnrichmentStatus",
    "FeaturedContentDocument",
    "MediaKind",
    "MetadataCandidate",
    "RawListing",
    "RefreshResult",
    "CacheBackendError",
    "CuratorError",
    "ListingProviderError",
    "MetadataProviderError",
    "FallbackContentProvider",
    "CacheBackend",
    "ListingProvider",
    "MetadataProvider",
]
