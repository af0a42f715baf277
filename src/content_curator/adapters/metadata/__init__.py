"""Metadata provider adapters."""

from content_curator.adapters.metadata.tmdb_client import TMDbClient

__all__ = ["TMDbClient"]
