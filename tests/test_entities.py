"""Tests for core entities."""

import json
from datetime import datetime, timezone

import pytest

from content_curator.core import (
    CacheEntry,
    ContentItem,
    FallbackContentProvider,
    FeaturedContentDocument,
    MediaKind,
    MetadataCandidate,
    RawListing,
)
from content_curator.core.entities import PLACEHOLDER_BACKDROP, PLACEHOLDER_POSTER


def test_content_item_display_fields_without_enrichment() -> None:
    """Test an unenriched item falls back to its raw title."""
    item = ContentItem(source_guid="g1", title="Dune.Part.Two.2024.2160p", approximate_year=2024)

    assert item.display_title == "Dune.Part.Two.2024.2160p"
    assert item.display_overview == "Dune.Part.Two.2024.2160p"
    assert item.display_year == 2024
    assert item.display_rating == 0.0
    assert item.poster_url == PLACEHOLDER_POSTER
    assert item.backdrop_url == PLACEHOLDER_BACKDROP
    assert not item.is_enriched


def test_content_item_display_fields_prefer_enrichment() -> None:
    """Test enrichment data wins over raw listing data."""
    item = ContentItem(
        source_guid="g1",
        title="Dune.Part.Two.2024.2160p",
        approximate_year=2023,
        external_id=693134,
        metadata_title="Dune: Part Two",
        overview="Paul Atreides unites with Chani.",
        vote_average=8.3,
        release_year=2024,
    )

    assert item.display_title == "Dune: Part Two"
    assert item.display_overview == "Paul Atreides unites with Chani."
    assert item.display_year == 2024
    assert item.display_rating == 8.3
    assert item.is_enriched


def test_content_item_validation() -> None:
    """Test invalid items are rejected."""
    with pytest.raises(ValueError, match="guid"):
        ContentItem(source_guid="", title="Title")

    with pytest.raises(ValueError, match="Title"):
        ContentItem(source_guid="g1", title="")

    with pytest.raises(ValueError, match="Size"):
        ContentItem(source_guid="g1", title="Title", size_bytes=-1)

    with pytest.raises(ValueError, match="seeder_count"):
        ContentItem(source_guid="g1", title="Title", seeder_count=-5)


def test_unenriched_resets_metadata() -> None:
    """Test unenriched copy keeps listing fields only."""
    item = ContentItem(
        source_guid="g1",
        title="Raw",
        seeder_count=10,
        external_id=1,
        metadata_title="Pretty",
        poster_path="/p.jpg",
        poster_url="https://image.tmdb.org/t/p/w500/p.jpg",
    )

    plain = item.unenriched()

    assert plain.seeder_count == 10
    assert plain.external_id is None
    assert plain.display_title == "Raw"
    assert plain.poster_url == PLACEHOLDER_POSTER


def test_raw_listing_validation() -> None:
    """Test listings need a guid and a title."""
    with pytest.raises(ValueError):
        RawListing(guid="", title="Title")

    with pytest.raises(ValueError):
        RawListing(guid="g1", title="")


def test_metadata_candidate_release_year() -> None:
    """Test year extraction from full and partial dates."""
    assert MetadataCandidate(external_id=1, title="A", release_date="2024-03-01").release_year == 2024
    assert MetadataCandidate(external_id=1, title="A", release_date="1999").release_year == 1999
    assert MetadataCandidate(external_id=1, title="A", release_date="").release_year is None
    assert MetadataCandidate(external_id=1, title="A", release_date="n/a").release_year is None


def test_document_serialization_survives_json() -> None:
    """Test a document can be restored from its JSON form."""
    document = FallbackContentProvider().get_static_content()
    entry = CacheEntry(document=document, stored_at=1700000000.0, ttl_seconds=3600)

    restored = CacheEntry.from_dict(json.loads(json.dumps(entry.to_dict())))

    assert restored == entry
    assert restored.document.categories[1].items[0].media_kind == MediaKind.SERIES


def test_serialized_item_includes_display_fields() -> None:
    """Test consumers of the JSON document get display fields."""
    item = ContentItem(
        source_guid="g1",
        title="Raw",
        published_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
    )

    data = item.to_dict()

    assert data["display_title"] == "Raw"
    assert data["display_rating"] == 0.0
    assert data["published_at"] == "2024-03-01T00:00:00+00:00"
    assert ContentItem.from_dict(data) == item


def test_cache_entry_validity() -> None:
    """Test entries are valid strictly before their TTL elapses."""
    document = FallbackContentProvider().get_static_content()
    entry = CacheEntry(document=document, stored_at=0.0, ttl_seconds=100)

    assert entry.is_valid(0)
    assert entry.is_valid(99.9)
    assert not entry.is_valid(100)
    assert entry.expires_in(40) == 60
    assert entry.expires_in(500) == 0.0


def test_document_lookup() -> None:
    """Test category lookup and item iteration."""
    document = FallbackContentProvider(items_per_category=2).get_static_content()

    assert document.category("documentaries").title == "Documentaries"
    assert document.category("missing") is None
    assert len(list(document.all_items())) == 1 + 5 * 2
    assert isinstance(document, FeaturedContentDocument)
