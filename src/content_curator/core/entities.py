"""Core domain entities."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterator, Optional

PLACEHOLDER_POSTER = "/api/placeholder/500/750"
PLACEHOLDER_BACKDROP = "/api/placeholder/1920/1080"


class MediaKind(str, Enum):
    """Kind of media a content item represents."""

    MOVIE = "movie"
    SERIES = "tv"


class DocumentSource(str, Enum):
    """Where a featured content document came from."""

    LIVE = "live"
    FALLBACK = "fallback"


class EnrichmentStatus(str, Enum):
    """Outcome of a single enrichment attempt."""

    ENRICHED = "enriched"
    NO_MATCH = "no_match"
    PROVIDER_DISABLED = "provider_disabled"
    PROVIDER_ERROR = "provider_error"


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class RawListing:
    """Indexer search result as returned by a listing provider."""

    guid: str
    title: str
    size: int = 0
    seeders: Optional[int] = None
    leechers: Optional[int] = None
    publish_date: Optional[datetime] = None
    categories: list[str] = field(default_factory=list)
    indexer: str = ""
    info_url: str = ""
    download_url: str = ""

    def __post_init__(self) -> None:
        if not self.guid:
            raise ValueError("Guid cannot be empty")
        if not self.title:
            raise ValueError("Title cannot be empty")


@dataclass
class MetadataCandidate:
    """Movie or series record from the metadata provider."""

    external_id: int
    title: str
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    vote_average: Optional[float] = None
    release_date: Optional[str] = None
    genre_ids: list[int] = field(default_factory=list)
    genre_names: list[str] = field(default_factory=list)
    runtime_minutes: Optional[int] = None
    season_count: Optional[int] = None

    @property
    def release_year(self) -> Optional[int]:
        """Year taken from the leading part of the release or air date."""
        if not self.release_date or len(self.release_date) < 4:
            return None
        year = self.release_date[:4]
        return int(year) if year.isdigit() else None


@dataclass(frozen=True)
class ContentItem:
    """A single release surfaced to the user, optionally enriched with metadata."""

    source_guid: str
    title: str
    media_kind: MediaKind = MediaKind.MOVIE
    size_bytes: int = 0
    seeder_count: Optional[int] = None
    leecher_count: Optional[int] = None
    quality_label: Optional[str] = None
    published_at: Optional[datetime] = None
    approximate_year: Optional[int] = None

    # Enrichment
    external_id: Optional[int] = None
    metadata_title: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    vote_average: Optional[float] = None
    genre_ids: tuple[int, ...] = ()
    genre_names: tuple[str, ...] = ()
    release_year: Optional[int] = None
    runtime_minutes: Optional[int] = None
    season_count: Optional[int] = None

    poster_url: str = PLACEHOLDER_POSTER
    backdrop_url: str = PLACEHOLDER_BACKDROP

    def __post_init__(self) -> None:
        if not self.source_guid:
            raise ValueError("Source guid cannot be empty")
        if not self.title:
            raise ValueError("Title cannot be empty")
        if self.size_bytes < 0:
            raise ValueError("Size cannot be negative")
        for name in ("seeder_count", "leecher_count"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} cannot be negative")

    @property
    def is_enriched(self) -> bool:
        return self.external_id is not None

    @property
    def display_title(self) -> str:
        return self.metadata_title or self.title

    @property
    def display_overview(self) -> str:
        return self.overview or self.title

    @property
    def display_year(self) -> Optional[int]:
        return self.release_year or self.approximate_year

    @property
    def display_rating(self) -> float:
        return self.vote_average if self.vote_average is not None else 0.0

    def unenriched(self) -> "ContentItem":
        """Copy of this item with every enrichment field reset to placeholders."""
        return replace(
            self,
            external_id=None,
            metadata_title=None,
            overview=None,
            poster_path=None,
            backdrop_path=None,
            vote_average=None,
            genre_ids=(),
            genre_names=(),
            release_year=None,
            runtime_minutes=None,
            season_count=None,
            poster_url=PLACEHOLDER_POSTER,
            backdrop_url=PLACEHOLDER_BACKDROP,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_guid": self.source_guid,
            "title": self.title,
            "media_kind": self.media_kind.value,
            "size_bytes": self.size_bytes,
            "seeder_count": self.seeder_count,
            "leecher_count": self.leecher_count,
            "quality_label": self.quality_label,
            "published_at": _format_datetime(self.published_at),
            "approximate_year": self.approximate_year,
            "external_id": self.external_id,
            "metadata_title": self.metadata_title,
            "overview": self.overview,
            "poster_path": self.poster_path,
            "backdrop_path": self.backdrop_path,
            "vote_average": self.vote_average,
            "genre_ids": list(self.genre_ids),
            "genre_names": list(self.genre_names),
            "release_year": self.release_year,
            "runtime_minutes": self.runtime_minutes,
            "season_count": self.season_count,
            "poster_url": self.poster_url,
            "backdrop_url": self.backdrop_url,
            # Read-only, for consumers of the serialized document
            "display_title": self.display_title,
            "display_overview": self.display_overview,
            "display_year": self.display_year,
            "display_rating": self.display_rating,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContentItem":
        return cls(
            source_guid=data["source_guid"],
            title=data["title"],
            media_kind=MediaKind(data.get("media_kind", MediaKind.MOVIE.value)),
            size_bytes=data.get("size_bytes", 0),
            seeder_count=data.get("seeder_count"),
            leecher_count=data.get("leecher_count"),
            quality_label=data.get("quality_label"),
            published_at=_parse_datetime(data.get("published_at")),
            approximate_year=data.get("approximate_year"),
            external_id=data.get("external_id"),
            metadata_title=data.get("metadata_title"),
            overview=data.get("overview"),
            poster_path=data.get("poster_path"),
            backdrop_path=data.get("backdrop_path"),
            vote_average=data.get("vote_average"),
            genre_ids=tuple(data.get("genre_ids") or ()),
            genre_names=tuple(data.get("genre_names") or ()),
            release_year=data.get("release_year"),
            runtime_minutes=data.get("runtime_minutes"),
            season_count=data.get("season_count"),
            poster_url=data.get("poster_url") or PLACEHOLDER_POSTER,
            backdrop_url=data.get("backdrop_url") or PLACEHOLDER_BACKDROP,
        )


@dataclass(frozen=True)
class ContentCategory:
    """Named, ordered group of content items."""

    category_id: str
    title: str
    items: tuple[ContentItem, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "category_id": self.category_id,
            "title": self.title,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContentCategory":
        return cls(
            category_id=data["category_id"],
            title=data["title"],
            items=tuple(ContentItem.from_dict(item) for item in data.get("items", [])),
        )


@dataclass(frozen=True)
class FeaturedContentDocument:
    """Hero item plus ordered categories; the unit of caching."""

    hero_item: ContentItem
    categories: tuple[ContentCategory, ...]
    source: DocumentSource = DocumentSource.LIVE
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def category(self, category_id: str) -> Optional[ContentCategory]:
        return next((c for c in self.categories if c.category_id == category_id), None)

    def all_items(self) -> Iterator[ContentItem]:
        yield self.hero_item
        for category in self.categories:
            yield from category.items

    @property
    def is_empty(self) -> bool:
        return all(not c.items for c in self.categories)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hero_item": self.hero_item.to_dict(),
            "categories": [c.to_dict() for c in self.categories],
            "source": self.source.value,
            "generated_at": self.generated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FeaturedContentDocument":
        generated_at = _parse_datetime(data.get("generated_at")) or datetime.now(timezone.utc)
        return cls(
            hero_item=ContentItem.from_dict(data["hero_item"]),
            categories=tuple(ContentCategory.from_dict(c) for c in data.get("categories", [])),
            source=DocumentSource(data.get("source", DocumentSource.LIVE.value)),
            generated_at=generated_at,
        )


@dataclass(frozen=True)
class CacheEntry:
    """Cached document with the time it was stored and its TTL."""

    document: FeaturedContentDocument
    stored_at: float
    ttl_seconds: int

    def is_valid(self, now: float) -> bool:
        return now - self.stored_at < self.ttl_seconds

    def expires_in(self, now: float) -> float:
        return max(0.0, self.stored_at + self.ttl_seconds - now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "document": self.document.to_dict(),
            "stored_at": self.stored_at,
            "ttl_seconds": self.ttl_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheEntry":
        return cls(
            document=FeaturedContentDocument.from_dict(data["document"]),
            stored_at=float(data["stored_at"]),
            ttl_seconds=int(data["ttl_seconds"]),
        )


@dataclass
class CategoryQuery:
    """Listing strategy for one content category."""

    category_id: str
    title: str
    query_terms: list[str]
    category_filter: list[int] = field(default_factory=list)
    media_kind: Optional[MediaKind] = None
    min_seeders: int = 0
    limit: int = 20


@dataclass
class EnrichmentResult:
    """Enriched item together with the reason it is (or is not) enriched."""

    item: ContentItem
    status: EnrichmentStatus
    reason: str = ""


@dataclass
class RefreshResult:
    """Outcome of one background refresh pass."""

    success: bool
    skipped: bool = False
    source: Optional[DocumentSource] = None
    item_count: int = 0
    duration_seconds: float = 0.0
    error: Optional[str] = None


@dataclass
class CacheStatus:
    """Snapshot of the featured content cache."""

    populated: bool
    ttl_seconds: int
    stored_at: Optional[float] = None
    expires_in: float = 0.0
    source: Optional[DocumentSource] = None
