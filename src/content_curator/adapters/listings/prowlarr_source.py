"""Prowlarr indexer search as a listing provider."""

import asyncio
import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from content_curator.core import ListingProvider, ListingProviderError, RawListing
from content_curator.core.categories import MOVIES_CATEGORY, TV_CATEGORY

logger = logging.getLogger(__name__)


class ProwlarrListingProvider(ListingProvider):
    """Search releases across every indexer configured in Prowlarr."""

    name = "Prowlarr"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    async def search_listings(
        self,
        query_terms: list[str],
        category_filter: list[int],
        min_seeders: int,
        limit: int,
    ) -> list[RawListing]:
        """
        Run one search per query term concurrently and merge the results.

        Each term is bounded by the provider timeout on its own, so a slow
        term only loses its own results. Results are merged in term order,
        first-seen guid wins, and the merged list is truncated to limit.

        Raises:
            ListingProviderError: When every query term failed
        """
        terms = query_terms or ["*"]

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            outcomes = await asyncio.gather(
                *(self._bounded_search(client, term, category_filter, limit) for term in terms),
                return_exceptions=True,
            )

        seen_guids: set[str] = set()
        listings: list[RawListing] = []
        errors: list[ListingProviderError] = []

        for term, outcome in zip(terms, outcomes):
            if isinstance(outcome, ListingProviderError):
                logger.warning("Prowlarr search for %r failed: %s", term, outcome)
                errors.append(outcome)
                continue
            if isinstance(outcome, BaseException):
                raise outcome

            for listing in outcome:
                if listing.guid in seen_guids:
                    continue
                if (listing.seeders or 0) < min_seeders:
                    continue
                seen_guids.add(listing.guid)
                listings.append(listing)

        if errors and len(errors) == len(terms):
            raise errors[-1]

        return listings[:limit]

    async def _bounded_search(
        self,
        client: httpx.AsyncClient,
        term: str,
        category_filter: list[int],
        limit: int,
    ) -> list[RawListing]:
        try:
            return await asyncio.wait_for(
                self._search(client, term, category_filter, limit),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ListingProviderError(f"timed out after {self.timeout}s for query '{term}'") from e

    async def _search(
        self,
        client: httpx.AsyncClient,
        term: str,
        category_filter: list[int],
        limit: int,
    ) -> list[RawListing]:
        """Execute a search query and return parsed listings."""
        params: dict[str, Any] = {
            "query": term,
            "type": self._search_type(category_filter),
            "limit": limit,
        }
        if category_filter:
            params["categories"] = ",".join(str(c) for c in category_filter)

        try:
            response = await client.get(
                f"{self.base_url}/api/v1/search",
                headers={"X-Api-Key": self.api_key},
                params=params,
            )
        except httpx.HTTPError as e:
            raise ListingProviderError(f"request failed: {e}") from e

        if response.status_code != 200:
            raise ListingProviderError(f"HTTP {response.status_code} for query '{term}'")

        try:
            data = response.json()
        except ValueError as e:
            raise ListingProviderError(f"invalid JSON for query '{term}'") from e

        if not isinstance(data, list):
            raise ListingProviderError(f"unexpected response type {type(data).__name__}")

        listings = []
        for entry in data:
            listing = self._parse_listing(entry)
            if listing:
                listings.append(listing)

        logger.debug("Prowlarr '%s': %d of %d results usable", term, len(listings), len(data))
        return listings

    @staticmethod
    def _search_type(category_filter: list[int]) -> str:
        if category_filter and all(TV_CATEGORY <= c < TV_CATEGORY + 1000 for c in category_filter):
            return "tvsearch"
        if category_filter and all(MOVIES_CATEGORY <= c < MOVIES_CATEGORY + 1000 for c in category_filter):
            return "movie"
        return "search"

    def _parse_listing(self, entry: Any) -> Optional[RawListing]:
        """Map one Prowlarr result onto a RawListing, None when unusable."""
        if not isinstance(entry, dict):
            return None

        try:
            return RawListing(
                guid=str(entry.get("guid") or ""),
                title=str(entry.get("title") or "").strip(),
                size=max(0, int(entry.get("size") or 0)),
                seeders=self._optional_count(entry.get("seeders")),
                leechers=self._optional_count(entry.get("leechers")),
                publish_date=self._parse_date(entry.get("publishDate")),
                categories=self._parse_categories(entry.get("categories")),
                indexer=str(entry.get("indexer") or ""),
                info_url=str(entry.get("infoUrl") or ""),
                download_url=str(entry.get("downloadUrl") or entry.get("magnetUrl") or ""),
            )
        except (TypeError, ValueError) as e:
            logger.debug("Skipping malformed Prowlarr result: %s", e)
            return None

    @staticmethod
    def _optional_count(value: Any) -> Optional[int]:
        if value is None:
            return None
        return max(0, int(value))

    @staticmethod
    def _parse_date(value: Any) -> Optional[datetime]:
        if not value or not isinstance(value, str):
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None

    @staticmethod
    def _parse_categories(value: Any) -> list[str]:
        """Flatten category objects into ids and names."""
        categories: list[str] = []
        for category in value or []:
            if isinstance(category, dict):
                if category.get("id") is not None:
                    categories.append(str(category["id"]))
                if category.get("name"):
                    categories.append(str(category["name"]))
            elif category is not None:
                categories.append(str(category))
        return categories
