"""Static featured content used when live aggregation is unavailable."""

from datetime import datetime, timezone

from content_curator.core.categories import (
    CATEGORY_TITLES,
    DOCUMENTARIES,
    FOUR_K,
    NEW_RELEASES,
    POPULAR_TV,
    TRENDING_MOVIES,
)
from content_curator.core.entities import (
    ContentCategory,
    ContentItem,
    DocumentSource,
    FeaturedContentDocument,
    MediaKind,
)

# Fixed so that repeated calls produce equal documents
_GENERATED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)

_SAMPLE_MOVIES = [
    ("The Batman", 2022, 7.8),
    ("Spider-Man: No Way Home", 2021, 8.2),
    ("Top Gun: Maverick", 2022, 8.3),
    ("Everything Everywhere All at Once", 2022, 8.0),
    ("The Northman", 2022, 7.1),
    ("Black Panther: Wakanda Forever", 2022, 7.2),
    ("Avatar: The Way of Water", 2022, 7.6),
    ("Oppenheimer", 2023, 8.5),
    ("Barbie", 2023, 7.0),
    ("Guardians of the Galaxy Vol. 3", 2023, 7.9),
]

_SAMPLE_SHOWS = [
    ("The Last of Us", 2023, 8.7),
    ("House of the Dragon", 2022, 8.4),
    ("The Bear", 2022, 8.5),
    ("Wednesday", 2022, 8.1),
    ("Severance", 2022, 8.7),
    ("The White Lotus", 2021, 7.9),
    ("Succession", 2018, 8.8),
    ("The Mandalorian", 2019, 8.6),
    ("Stranger Things", 2016, 8.7),
    ("The Crown", 2016, 8.6),
]

_SAMPLE_DOCUMENTARIES = [
    ("Planet Earth III", 2023, 9.0),
    ("The Social Dilemma", 2020, 7.6),
    ("My Octopus Teacher", 2020, 8.0),
    ("Free Solo", 2018, 8.2),
    ("Won't You Be My Neighbor?", 2018, 8.4),
    ("The Act of Killing", 2012, 8.2),
    ("Icarus", 2017, 7.9),
    ("The Cove", 2009, 8.4),
    ("An Inconvenient Truth", 2006, 7.4),
    ("March of the Penguins", 2005, 7.5),
]


class FallbackContentProvider:
    """Deterministic sample document shaped like a live one."""

    def __init__(self, items_per_category: int = 10) -> None:
        self.items_per_category = items_per_category

    def get_static_content(self) -> FeaturedContentDocument:
        """Build the static document. Pure, always succeeds."""
        categories = (
            self._category(TRENDING_MOVIES, _SAMPLE_MOVIES, MediaKind.MOVIE, "trending", 100000),
            self._category(POPULAR_TV, _SAMPLE_SHOWS, MediaKind.SERIES, "popular", 200000),
            self._category(NEW_RELEASES, _SAMPLE_MOVIES[::-1], MediaKind.MOVIE, "new", 110000),
            self._category(FOUR_K, _SAMPLE_MOVIES, MediaKind.MOVIE, "4k", 120000),
            self._category(DOCUMENTARIES, _SAMPLE_DOCUMENTARIES, MediaKind.MOVIE, "documentary", 300000),
        )

        return FeaturedContentDocument(
            hero_item=self._hero(),
            categories=categories,
            source=DocumentSource.FALLBACK,
            generated_at=_GENERATED_AT,
        )

    def _hero(self) -> ContentItem:
        return ContentItem(
            source_guid="featured-dune-part-two",
            title="Dune: Part Two",
            media_kind=MediaKind.MOVIE,
            size_bytes=15_000_000_000,
            seeder_count=150,
            leecher_count=15,
            quality_label="4k",
            approximate_year=2024,
            external_id=693134,
            metadata_title="Dune: Part Two",
            overview=(
                "Paul Atreides unites with Chani and the Fremen while seeking revenge "
                "against the conspirators who destroyed his family."
            ),
            vote_average=8.5,
            release_year=2024,
            runtime_minutes=166,
        )

    def _category(
        self,
        category_id: str,
        samples: list[tuple[str, int, float]],
        media_kind: MediaKind,
        label: str,
        id_base: int,
    ) -> ContentCategory:
        items = []
        for index, (title, year, rating) in enumerate(samples[:self.items_per_category]):
            is_series = media_kind == MediaKind.SERIES
            items.append(ContentItem(
                source_guid=f"{label}-{media_kind.value}-{index + 1}",
                title=f"{title} S01 ({year})" if is_series else f"{title} ({year})",
                media_kind=media_kind,
                size_bytes=(2_500_000_000 if is_series else 5_000_000_000) + index * 100_000_000,
                seeder_count=100 - index * 5,
                leecher_count=10 + index,
                quality_label="2160p" if category_id == FOUR_K else "1080p",
                approximate_year=year,
                external_id=id_base + index,
                metadata_title=title,
                overview=self._overview(category_id, label),
                vote_average=rating,
                genre_ids=(18, 53) if is_series else ((99,) if category_id == DOCUMENTARIES else (28, 12)),
                release_year=year,
                season_count=1 if is_series else None,
                runtime_minutes=None if is_series else 120,
            ))

        return ContentCategory(
            category_id=category_id,
            title=CATEGORY_TITLES[category_id],
            items=tuple(items),
        )

    @staticmethod
    def _overview(category_id: str, label: str) -> str:
        if category_id == DOCUMENTARIES:
            return "An eye-opening documentary that explores important topics and changes perspectives."
        if category_id == POPULAR_TV:
            return f"A compelling {label} TV series that keeps viewers on the edge of their seats."
        return f"An exciting {label} movie that captivates audiences worldwide."
