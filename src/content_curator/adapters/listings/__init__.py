"""Listing provider adapters."""

from content_curator.adapters.listings.prowlarr_source import ProwlarrListingProvider

__all__ = ["ProwlarrListingProvider"]
