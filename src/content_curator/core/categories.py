"""Fixed featured content categories and their listing strategies."""

from datetime import date
from typing import Optional

from content_curator.core.entities import CategoryQuery, MediaKind

TRENDING_MOVIES = "trending-movies"
POPULAR_TV = "popular-tv"
NEW_RELEASES = "new-releases"
FOUR_K = "4k-content"
DOCUMENTARIES = "documentaries"

# Category id that wraps the hero item as a single-item category
HERO_CATEGORY = "featured"

CATEGORY_ORDER = (TRENDING_MOVIES, POPULAR_TV, NEW_RELEASES, FOUR_K, DOCUMENTARIES)

CATEGORY_TITLES = {
    TRENDING_MOVIES: "Trending Movies",
    POPULAR_TV: "Popular TV Shows",
    NEW_RELEASES: "New Releases",
    FOUR_K: "4K Content",
    DOCUMENTARIES: "Documentaries",
}

# Newznab category ids
MOVIES_CATEGORY = 2000
TV_CATEGORY = 5000


def default_category_queries(
    today: Optional[date] = None,
    limit: int = 20,
    overrides: Optional[dict[str, dict]] = None,
) -> list[CategoryQuery]:
    """
    Build the listing strategy of every category, in display order.
    
    Args:
        today: Reference date for year-based queries (defaults to today)
        limit: Per-category result cap
        overrides: Per category id, values replacing query_terms, min_seeders or limit
    """
    year = (today or date.today()).year
    
    queries = [
        CategoryQuery(
            category_id=TRENDING_MOVIES,
            title=CATEGORY_TITLES[TRENDING_MOVIES],
            query_terms=[f"{year} 2160p", f"{year} 1080p", f"{year - 1} 2160p", f"{year - 1} 1080p"],
            category_filter=[MOVIES_CATEGORY],
            media_kind=MediaKind.MOVIE,
            min_seeders=5,
            limit=limit,
        ),
        CategoryQuery(
            category_id=POPULAR_TV,
            title=CATEGORY_TITLES[POPULAR_TV],
            query_terms=["*"],
            category_filter=[TV_CATEGORY],
            media_kind=MediaKind.SERIES,
            min_seeders=3,
            limit=limit,
        ),
        CategoryQuery(
            category_id=NEW_RELEASES,
            title=CATEGORY_TITLES[NEW_RELEASES],
            query_terms=[str(year)],
            category_filter=[MOVIES_CATEGORY],
            media_kind=MediaKind.MOVIE,
            min_seeders=3,
            limit=limit,
        ),
        CategoryQuery(
            category_id=FOUR_K,
            title=CATEGORY_TITLES[FOUR_K],
            query_terms=["2160p", "4K", "UHD"],
            min_seeders=3,
            limit=limit,
        ),
        CategoryQuery(
            category_id=DOCUMENTARIES,
            title=CATEGORY_TITLES[DOCUMENTARIES],
            query_terms=[
                "documentary",
                "BBC Documentary",
                "National Geographic",
                "Discovery Channel",
                "History Channel",
            ],
            min_seeders=2,
            limit=limit,
        ),
    ]
    
    for query in queries:
        for key, value in (overrides or {}).get(query.category_id, {}).items():
            if key in ("query_terms", "min_seeders", "limit", "title"):
                setattr(query, key, value)
    
    return queries
