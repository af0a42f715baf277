"""Business logic use cases."""

import asyncio
import logging
import re
import time
from datetime import date
from typing import TYPE_CHECKING, Callable, Optional

from content_curator.core import (
    CacheBackend,
    CacheBackendError,
    CacheEntry,
    CacheStatus,
    CategoryQuery,
    ContentCategory,
    ContentItem,
    FallbackContentProvider,
    FeaturedContentDocument,
    ListingProvider,
    MediaKind,
    RawListing,
)
from content_curator.core.categories import HERO_CATEGORY, TRENDING_MOVIES, default_category_queries
from content_curator.core.matching import extract_quality, extract_year
from content_curator.enrichment import MetadataEnricher

if TYPE_CHECKING:
    from content_curator.scheduler import RefreshScheduler

logger = logging.getLogger(__name__)

ADULT_KEYWORDS = (
    "xxx", "porn", "adult", "sex", "erotic", "nude", "naked",
    "hentai", "brazzers", "playboy", "penthouse",
)

_SERIES_CATEGORY_ID = re.compile(r"^5\d{3}$")
_SERIES_CATEGORY_NAME = re.compile(r"tv|series|show", re.IGNORECASE)


def is_adult_content(title: str) -> bool:
    """Keyword check used to keep adult releases out of featured content."""
    lower_title = title.lower()
    return any(keyword in lower_title for keyword in ADULT_KEYWORDS)


def infer_media_kind(categories: list[str]) -> MediaKind:
    """Series when any indexer category is a 5xxx id or names TV; movie otherwise."""
    for category in categories:
        if _SERIES_CATEGORY_ID.match(category) or _SERIES_CATEGORY_NAME.search(category):
            return MediaKind.SERIES
    return MediaKind.MOVIE


def unavailable_hero() -> ContentItem:
    """Hero stand-in for a live document whose trending category is empty."""
    return ContentItem(
        source_guid="featured-unavailable",
        title="Featured content unavailable",
        media_kind=MediaKind.MOVIE,
        overview="Featured content is temporarily unavailable. Check back soon.",
    )


class ContentAggregator:
    """Build a featured content document from the listing and metadata providers."""

    def __init__(
        self,
        listing_provider: Optional[ListingProvider],
        enricher: MetadataEnricher,
        fallback: Optional[FallbackContentProvider] = None,
        queries: Optional[list[CategoryQuery]] = None,
        max_items_per_category: int = 20,
        category_overrides: Optional[dict[str, dict]] = None,
        request_timeout: float = 10.0,
        category_timeout: Optional[float] = None,
        enrichment_concurrency: int = 8,
        exclude_adult: bool = True,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.listing_provider = listing_provider
        self.enricher = enricher
        self.fallback = fallback or FallbackContentProvider()
        self.queries = queries
        self.max_items_per_category = max_items_per_category
        self.category_overrides = category_overrides or {}
        self.request_timeout = request_timeout
        # Providers bound each upstream call by request_timeout; this only
        # catches a provider that never returns
        self.category_timeout = category_timeout or request_timeout * 2
        self.enrichment_concurrency = enrichment_concurrency
        self.exclude_adult = exclude_adult
        self.today = today
        self._disabled_warned = False

    def category_queries(self) -> list[CategoryQuery]:
        """Queries for this run; year-based terms follow the current date."""
        if self.queries is not None:
            return self.queries
        return default_category_queries(
            today=self.today(),
            limit=self.max_items_per_category,
            overrides=self.category_overrides,
        )

    async def aggregate(self) -> FeaturedContentDocument:
        """Query every category, enrich the results and compose the document. Never raises."""
        if self.listing_provider is None:
            if not self._disabled_warned:
                logger.warning("Listing provider not configured, serving static featured content")
                self._disabled_warned = True
            return self.fallback.get_static_content()

        try:
            return await self._aggregate()
        except Exception:
            logger.exception("Aggregation failed, serving static featured content")
            return self.fallback.get_static_content()

    async def _aggregate(self) -> FeaturedContentDocument:
        queries = self.category_queries()

        # Fan out, one task per category
        results = await asyncio.gather(*(self._fetch_category(query) for query in queries))

        items_by_category = [
            self._normalize(query, listings) for query, listings in zip(queries, results)
        ]

        if not any(items_by_category):
            logger.warning("Every category came back empty, serving static featured content")
            return self.fallback.get_static_content()

        # Enrich everything in one bounded pass, then split back per category
        flat = [item for items in items_by_category for item in items]
        enriched = await self.enricher.enrich_many(flat, concurrency=self.enrichment_concurrency)

        categories = []
        offset = 0
        for query, items in zip(queries, items_by_category):
            categories.append(ContentCategory(
                category_id=query.category_id,
                title=query.title,
                items=tuple(enriched[offset:offset + len(items)]),
            ))
            offset += len(items)

        trending = next((c for c in categories if c.category_id == TRENDING_MOVIES), None)
        hero = trending.items[0] if trending and trending.items else unavailable_hero()

        logger.info(
            "Aggregated %d items: %s",
            len(flat),
            ", ".join(f"{c.category_id}={len(c.items)}" for c in categories),
        )
        return FeaturedContentDocument(hero_item=hero, categories=tuple(categories))

    async def _fetch_category(self, query: CategoryQuery) -> list[RawListing]:
        """Listings for one category; a failed or timed-out query yields no listings."""
        try:
            return await asyncio.wait_for(
                self.listing_provider.search_listings(
                    query_terms=query.query_terms,
                    category_filter=query.category_filter,
                    min_seeders=query.min_seeders,
                    limit=query.limit,
                ),
                timeout=self.category_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Category %s timed out after %.1fs", query.category_id, self.category_timeout)
        except Exception as e:
            logger.warning("Category %s failed: %s", query.category_id, e)
        return []

    def _normalize(self, query: CategoryQuery, listings: list[RawListing]) -> list[ContentItem]:
        """Turn raw listings into unique content items, keeping provider order."""
        seen_guids: set[str] = set()
        items: list[ContentItem] = []

        for listing in listings:
            item = self._to_item(query, listing)
            if item is None or item.source_guid in seen_guids:
                continue
            if self.exclude_adult and is_adult_content(item.title):
                continue
            seen_guids.add(item.source_guid)
            items.append(item)
            if len(items) >= query.limit:
                break

        return items

    @staticmethod
    def _to_item(query: CategoryQuery, listing: RawListing) -> Optional[ContentItem]:
        try:
            return ContentItem(
                source_guid=listing.guid,
                title=listing.title,
                media_kind=query.media_kind or infer_media_kind(listing.categories),
                size_bytes=listing.size or 0,
                seeder_count=listing.seeders,
                leecher_count=listing.leechers,
                quality_label=extract_quality(listing.title),
                published_at=listing.publish_date,
                approximate_year=extract_year(listing.title),
            )
        except (AttributeError, TypeError, ValueError) as e:
            logger.debug("Skipping malformed listing %r: %s", getattr(listing, "title", listing), e)
            return None


class CacheOrchestrator:
    """Read-through TTL cache in front of the aggregator."""

    PRIMARY_KEY = "content"

    def __init__(
        self,
        backend: CacheBackend,
        aggregator: ContentAggregator,
        ttl_seconds: int = 3600,
        key_prefix: str = "featured:",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.backend = backend
        self.aggregator = aggregator
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix
        self.clock = clock
        self._inflight: Optional[asyncio.Future] = None
        self._generation = 0

    @property
    def primary_key(self) -> str:
        return f"{self.key_prefix}{self.PRIMARY_KEY}"

    def category_key(self, category_id: str) -> str:
        return f"{self.key_prefix}category:{category_id}"

    async def get(self) -> FeaturedContentDocument:
        """Cached document while it is fresh, otherwise a newly aggregated one."""
        entry = await self._read()
        if entry is not None and entry.is_valid(self.clock()):
            return entry.document

        # Concurrent misses wait on the same aggregation
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._populate())
        return await asyncio.shield(self._inflight)

    async def get_category(self, category_id: str) -> Optional[ContentCategory]:
        """
        One category of the current document; "featured" wraps the hero item.

        A fresh per-category entry answers without reading the full document.
        """
        if category_id == HERO_CATEGORY:
            document = await self.get()
            return ContentCategory(
                category_id=HERO_CATEGORY,
                title="Featured",
                items=(document.hero_item,),
            )

        entry = await self._read(self.category_key(category_id))
        if entry is not None and entry.is_valid(self.clock()):
            category = entry.document.category(category_id)
            if category is not None:
                return category

        document = await self.get()
        return document.category(category_id)

    async def store(self, document: FeaturedContentDocument, generation: Optional[int] = None) -> bool:
        """
        Write the document and its per-category entries.

        When generation is given and the cache was invalidated since, nothing
        more is written. Returns False if the write was skipped or the backend
        failed.
        """
        stored_at = self.clock()
        entries = [(self.primary_key, document)]
        entries.extend(
            (
                self.category_key(category.category_id),
                FeaturedContentDocument(
                    hero_item=document.hero_item,
                    categories=(category,),
                    source=document.source,
                    generated_at=document.generated_at,
                ),
            )
            for category in document.categories
        )

        try:
            for key, entry_document in entries:
                if generation is not None and generation != self._generation:
                    logger.info("Cache invalidated during refresh, discarding stale document")
                    return False
                await self.backend.set(
                    key,
                    CacheEntry(document=entry_document, stored_at=stored_at, ttl_seconds=self.ttl_seconds),
                )
        except CacheBackendError as e:
            logger.warning("Cache write failed, serving uncached content: %s", e)
            return False

        return True

    @property
    def generation(self) -> int:
        """Bumped by every invalidation."""
        return self._generation

    async def invalidate(self) -> bool:
        """Drop the document and every category entry. Safe to call repeatedly."""
        # Passes started before invalidation must neither store nor satisfy the next read
        self._generation += 1
        self._inflight = None

        try:
            removed = await self.backend.delete_prefix(self.key_prefix)
        except CacheBackendError as e:
            logger.warning("Cache invalidation failed: %s", e)
            return False

        logger.info("Cache invalidated (%d keys removed)", removed)
        return True

    async def status(self) -> CacheStatus:
        entry = await self._read()
        now = self.clock()

        if entry is None or not entry.is_valid(now):
            return CacheStatus(populated=False, ttl_seconds=self.ttl_seconds)

        return CacheStatus(
            populated=True,
            ttl_seconds=entry.ttl_seconds,
            stored_at=entry.stored_at,
            expires_in=entry.expires_in(now),
            source=entry.document.source,
        )

    async def close(self) -> None:
        await self.backend.close()

    async def _read(self, key: Optional[str] = None) -> Optional[CacheEntry]:
        try:
            return await self.backend.get(key or self.primary_key)
        except CacheBackendError as e:
            logger.warning("Cache read failed, aggregating live: %s", e)
            return None

    async def _populate(self) -> FeaturedContentDocument:
        generation = self._generation
        document = await self.aggregator.aggregate()
        await self.store(document, generation=generation)
        return document


class FeaturedContentService:
    """Entry point for callers that serve featured content."""

    def __init__(self, orchestrator: CacheOrchestrator, scheduler: "RefreshScheduler") -> None:
        self.orchestrator = orchestrator
        self.scheduler = scheduler
        self._background: set[asyncio.Task] = set()

    async def get_featured_content(self) -> FeaturedContentDocument:
        return await self.orchestrator.get()

    async def get_category(self, category_id: str) -> Optional[ContentCategory]:
        return await self.orchestrator.get_category(category_id)

    async def invalidate_cache(self) -> bool:
        return await self.orchestrator.invalidate()

    def trigger_refresh(self) -> asyncio.Task:
        """Start a refresh pass in the background and return its task."""
        task = asyncio.create_task(self.scheduler.run_once())
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def cache_status(self) -> CacheStatus:
        return await self.orchestrator.status()

    async def close(self) -> None:
        """Wait for background refreshes, then release the cache backend."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
        await self.orchestrator.close()
