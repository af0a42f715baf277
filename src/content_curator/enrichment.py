"""Metadata enrichment of content items."""

import asyncio
import logging
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Optional, Sequence

from content_curator.core import (
    ContentItem,
    EnrichmentResult,
    EnrichmentStatus,
    MetadataCandidate,
    MetadataProvider,
)
from content_curator.core.entities import PLACEHOLDER_BACKDROP, PLACEHOLDER_POSTER
from content_curator.core.matching import clean_search_title, find_best_match

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"


def _present(value: Any) -> bool:
    # Zero is a real value (a 0.0 rating); None and empties are not
    if value is None:
        return False
    if isinstance(value, (str, list, tuple, dict, set)):
        return len(value) > 0
    return True


def _first_present(*values: Any) -> Any:
    return next((v for v in values if _present(v)), None)


class MetadataEnricher:
    """Attach metadata records to content items by fuzzy title matching."""

    def __init__(
        self,
        provider: Optional[MetadataProvider],
        image_base_url: str = DEFAULT_IMAGE_BASE_URL,
        poster_size: str = "w500",
        backdrop_size: str = "original",
        timeout: Optional[float] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.provider = provider
        self.image_base_url = image_base_url.rstrip("/")
        self.poster_size = poster_size
        self.backdrop_size = backdrop_size
        # Whole-item budget covering search, details and their retries
        self.timeout = timeout
        self.today = today
        self._disabled_warned = False

    async def enrich(self, item: ContentItem) -> ContentItem:
        """Enrich a single item. Never raises; falls back to placeholders."""
        result = await self.enrich_with_status(item)
        return result.item

    async def enrich_many(self, items: Sequence[ContentItem], concurrency: int = 8) -> list[ContentItem]:
        """Enrich items with at most `concurrency` lookups in flight, keeping input order."""
        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def bounded(item: ContentItem) -> ContentItem:
            async with semaphore:
                return await self.enrich(item)

        return list(await asyncio.gather(*(bounded(item) for item in items)))

    async def enrich_with_status(self, item: ContentItem) -> EnrichmentResult:
        """Enrich a single item and report why it did or did not match."""
        if self.provider is None:
            if not self._disabled_warned:
                logger.warning("Metadata provider not configured, items keep placeholder artwork")
                self._disabled_warned = True
            return EnrichmentResult(
                item=self._placeholder(item),
                status=EnrichmentStatus.PROVIDER_DISABLED,
                reason="metadata provider not configured",
            )

        try:
            return await asyncio.wait_for(self._lookup(item), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Enrichment timed out for %r after %ss", item.title, self.timeout)
            return EnrichmentResult(
                item=self._placeholder(item),
                status=EnrichmentStatus.PROVIDER_ERROR,
                reason=f"timed out after {self.timeout}s",
            )
        except Exception as e:
            logger.warning("Enrichment failed for %r: %s", item.title, e)
            return EnrichmentResult(
                item=self._placeholder(item),
                status=EnrichmentStatus.PROVIDER_ERROR,
                reason=f"{type(e).__name__}: {e}",
            )

    async def _lookup(self, item: ContentItem) -> EnrichmentResult:
        cleaned = clean_search_title(item.title)
        if not cleaned:
            return EnrichmentResult(
                item=self._placeholder(item),
                status=EnrichmentStatus.NO_MATCH,
                reason="nothing left to search after cleaning the title",
            )

        candidates = await self.provider.search_by_title(cleaned, item.media_kind)
        if not candidates:
            logger.debug("No metadata match for %r (searched %r)", item.title, cleaned)
            return EnrichmentResult(
                item=self._placeholder(item),
                status=EnrichmentStatus.NO_MATCH,
                reason=f"no results for '{cleaned}'",
            )

        if item.approximate_year is not None:
            same_year = [c for c in candidates if c.release_year == item.approximate_year]
            if same_year:
                candidates = same_year

        best = find_best_match(candidates, item.title)
        details = await self.provider.fetch_details(best.external_id, item.media_kind)

        enriched = self._merge(item, best, details)
        logger.debug("Enriched %r as %r (%s)", item.title, enriched.metadata_title, enriched.external_id)
        return EnrichmentResult(item=enriched, status=EnrichmentStatus.ENRICHED)

    def _merge(
        self,
        item: ContentItem,
        match: MetadataCandidate,
        details: Optional[MetadataCandidate],
    ) -> ContentItem:
        layers = [details, match] if details is not None else [match]

        def pick(name: str) -> Any:
            return _first_present(*(getattr(layer, name) for layer in layers))

        release_year = (
            _first_present(*(layer.release_year for layer in layers))
            or item.approximate_year
            or self.today().year
        )
        poster_path = pick("poster_path")
        backdrop_path = pick("backdrop_path")

        return replace(
            item,
            external_id=_first_present(*(layer.external_id for layer in layers)),
            metadata_title=pick("title") or item.title,
            overview=pick("overview") or item.overview,
            poster_path=poster_path,
            backdrop_path=backdrop_path,
            vote_average=pick("vote_average"),
            genre_ids=tuple(pick("genre_ids") or ()),
            genre_names=tuple(pick("genre_names") or ()),
            release_year=release_year,
            runtime_minutes=pick("runtime_minutes"),
            season_count=pick("season_count"),
            poster_url=self.image_url(self.poster_size, poster_path) or PLACEHOLDER_POSTER,
            backdrop_url=self.image_url(self.backdrop_size, backdrop_path) or PLACEHOLDER_BACKDROP,
        )

    def image_url(self, size: str, path: Optional[str]) -> Optional[str]:
        """Full image URL for a provider image path, or None without a path."""
        if not path:
            return None
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.image_base_url}/{size}{path}"

    def _placeholder(self, item: ContentItem) -> ContentItem:
        return item.unenriched()
