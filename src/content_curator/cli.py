"""CLI entry point for content curator."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Awaitable, Callable, TypeVar

import typer

from content_curator.adapters.cache import InMemoryCache, RedisCache
from content_curator.adapters.listings import ProwlarrListingProvider
from content_curator.adapters.metadata import TMDbClient
from content_curator.config import Settings, get_settings
from content_curator.core import CacheBackend, ContentCategory, FallbackContentProvider
from content_curator.enrichment import MetadataEnricher
from content_curator.scheduler import RefreshScheduler
from content_curator.use_cases import CacheOrchestrator, ContentAggregator, FeaturedContentService

T = TypeVar("T")

app = typer.Typer(help="Curate featured movies and TV from Prowlarr and TMDb.", no_args_is_help=True)


def build_service(settings: Settings) -> FeaturedContentService:
    """Wire adapters and services from settings."""
    listing_provider = None
    if settings.listing_enabled:
        listing_provider = ProwlarrListingProvider(
            base_url=settings.prowlarr_url,
            api_key=settings.prowlarr_api_key,
            timeout=settings.aggregation.request_timeout,
        )

    metadata_provider = None
    if settings.metadata_enabled:
        metadata_provider = TMDbClient(
            api_key=settings.tmdb_api_key,
            base_url=settings.tmdb.base_url,
            language=settings.tmdb.language,
            timeout=settings.aggregation.request_timeout,
            max_retries=settings.tmdb.max_retries,
            initial_retry_delay=settings.tmdb.initial_retry_delay,
        )

    enricher = MetadataEnricher(
        metadata_provider,
        image_base_url=settings.tmdb.image_base_url,
        poster_size=settings.tmdb.poster_size,
        backdrop_size=settings.tmdb.backdrop_size,
        timeout=settings.aggregation.enrichment_timeout,
    )

    aggregator = ContentAggregator(
        listing_provider,
        enricher,
        fallback=FallbackContentProvider(),
        max_items_per_category=settings.aggregation.max_items_per_category,
        category_overrides=settings.categories,
        request_timeout=settings.aggregation.request_timeout,
        enrichment_concurrency=settings.aggregation.enrichment_concurrency,
        exclude_adult=settings.aggregation.exclude_adult,
    )

    backend: CacheBackend = RedisCache.from_url(settings.redis_url) if settings.use_redis else InMemoryCache()

    orchestrator = CacheOrchestrator(
        backend,
        aggregator,
        ttl_seconds=settings.cache.ttl_seconds,
        key_prefix=settings.cache.key_prefix,
    )
    scheduler = RefreshScheduler(aggregator, orchestrator)

    return FeaturedContentService(orchestrator, scheduler)


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj["settings"]


def _run(service: FeaturedContentService, operation: Callable[[], Awaitable[T]]) -> T:
    """Run one service call, then release the service's connections."""
    async def run() -> T:
        try:
            return await operation()
        finally:
            await service.close()

    return asyncio.run(run())


def _print_category(category: ContentCategory) -> None:
    print(f"\n{category.title} ({len(category.items)})")
    for item in category.items:
        year = item.display_year or "----"
        quality = f" [{item.quality_label}]" if item.quality_label else ""
        print(f"  • {item.display_title} ({year}) ★ {item.display_rating:.1f}{quality}")


@app.callback()
def main(
    ctx: typer.Context,
    config: Path = typer.Option(Path("config.yaml"), "--config", help="Path to YAML config"),
    debug: bool = typer.Option(False, "--debug", help="Verbose logging"),
) -> None:
    """Curate featured content for the media browser."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="[%(levelname)s] %(asctime)s - %(message)s",
    )
    ctx.obj = {"settings": get_settings(config)}


@app.command()
def featured(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print the document as JSON"),
) -> None:
    """Print the hero item and every category."""
    service = build_service(_settings(ctx))
    document = _run(service, service.get_featured_content)

    if as_json:
        print(json.dumps(document.to_dict(), indent=2, ensure_ascii=False))
        return

    hero = document.hero_item
    print("\n" + "=" * 70)
    print(f"🎬 {hero.display_title} ({hero.display_year or '----'}) ★ {hero.display_rating:.1f}")
    print("=" * 70)
    print(hero.display_overview)
    for category in document.categories:
        _print_category(category)
    print(f"\nSource: {document.source.value}, generated {document.generated_at:%Y-%m-%d %H:%M:%S}")


@app.command()
def category(ctx: typer.Context, category_id: str) -> None:
    """Print one category ("featured" for the hero item)."""
    service = build_service(_settings(ctx))
    result = _run(service, lambda: service.get_category(category_id))

    if result is None:
        print(f"❌ Unknown category: {category_id}")
        raise typer.Exit(code=1)
    _print_category(result)


@app.command()
def refresh(ctx: typer.Context) -> None:
    """Run one refresh pass and store the result."""
    service = build_service(_settings(ctx))
    result = _run(service, service.scheduler.run_once)

    if result.success:
        print(f"✓ Refreshed {result.item_count} items from {result.source.value} in {result.duration_seconds:.1f}s")
    else:
        print(f"❌ Refresh failed: {result.error}")
        raise typer.Exit(code=1)


@app.command()
def invalidate(ctx: typer.Context) -> None:
    """Clear the featured content cache."""
    service = build_service(_settings(ctx))
    if _run(service, service.invalidate_cache):
        print("✓ Cache cleared")
    else:
        print("❌ Cache backend unavailable")
        raise typer.Exit(code=1)


@app.command()
def status(ctx: typer.Context) -> None:
    """Show credentials and cache state."""
    settings = _settings(ctx)
    service = build_service(settings)

    print("\n🔑 Credentials:")
    for name, value in settings.describe_credentials().items():
        print(f"  • {name}: {value}")

    print("\n⚙️  Settings:")
    print(f"  • Cache TTL: {settings.cache.ttl_seconds}s")
    print(f"  • Refresh interval: {settings.refresh.interval_seconds}s")
    print(f"  • Items per category: {settings.aggregation.max_items_per_category}")

    cache = _run(service, service.cache_status)
    print("\n💾 Cache:")
    if cache.populated:
        print(f"  • Populated ({cache.source.value}), expires in {cache.expires_in:.0f}s")
    else:
        print("  • Empty")


@app.command()
def watch(ctx: typer.Context) -> None:
    """Keep the cache warm until interrupted."""
    settings = _settings(ctx)
    service = build_service(settings)

    async def run() -> None:
        service.scheduler.start(
            interval_seconds=settings.refresh.interval_seconds,
            run_on_start=settings.refresh.run_on_start,
        )
        try:
            await asyncio.Event().wait()
        finally:
            await service.scheduler.stop()
            await service.close()

    print(f"👀 Refreshing every {settings.refresh.interval_seconds}s, Ctrl+C to stop")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        print("\n✓ Stopped")


if __name__ == "__main__":
    app()
