"""Errors raised by adapters and handled by the core services."""


class CuratorError(Exception):
    """Base class for content curator errors."""


class ListingProviderError(CuratorError):
    """The release indexer is unreachable or returned an unusable response."""


class MetadataProviderError(CuratorError):
    """The metadata database is unreachable or returned an unusable response."""


class CacheBackendError(CuratorError):
    """The cache backend could not complete a read, write or delete."""
