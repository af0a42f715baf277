"""Tests for static fallback content."""

from content_curator.core import DocumentSource, FallbackContentProvider
from content_curator.core.categories import CATEGORY_ORDER
from content_curator.core.entities import PLACEHOLDER_POSTER


def test_static_content_shape() -> None:
    """Test the fallback document looks like a live one."""
    document = FallbackContentProvider().get_static_content()

    assert document.source == DocumentSource.FALLBACK
    assert [c.category_id for c in document.categories] == list(CATEGORY_ORDER)
    assert all(len(c.items) == 10 for c in document.categories)
    assert not document.is_empty


def test_static_content_hero() -> None:
    """Test the hero item is Dune: Part Two."""
    hero = FallbackContentProvider().get_static_content().hero_item

    assert hero.display_title == "Dune: Part Two"
    assert hero.display_year == 2024
    assert hero.display_rating == 8.5
    assert hero.external_id == 693134


def test_static_content_is_deterministic() -> None:
    """Test repeated calls return equal documents."""
    provider = FallbackContentProvider()

    assert provider.get_static_content() == provider.get_static_content()


def test_static_content_items_are_renderable() -> None:
    """Test every item has display fields and image paths."""
    document = FallbackContentProvider(items_per_category=3).get_static_content()

    for item in document.all_items():
        assert item.display_title
        assert item.display_overview
        assert item.poster_url == PLACEHOLDER_POSTER
    assert all(len(c.items) == 3 for c in document.categories)


def test_static_content_unique_guids_per_category() -> None:
    """Test item ids do not repeat inside a category."""
    document = FallbackContentProvider().get_static_content()

    for category in document.categories:
        guids = [item.source_guid for item in category.items]
        assert len(guids) == len(set(guids))
