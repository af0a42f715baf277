"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


@dataclass
class CacheConfig:
    """Featured content cache settings."""
    ttl_seconds: int = 3600
    key_prefix: str = "featured:"


@dataclass
class RefreshConfig:
    """Background refresh settings."""
    interval_seconds: int = 3600
    run_on_start: bool = True


@dataclass
class AggregationConfig:
    """Fan-out and enrichment settings."""
    max_items_per_category: int = 20
    enrichment_concurrency: int = 8
    request_timeout: float = 10.0
    enrichment_timeout: float = 30.0
    exclude_adult: bool = True


@dataclass
class TMDbConfig:
    """TMDb API settings."""
    base_url: str = "https://api.themoviedb.org/3"
    image_base_url: str = "https://image.tmdb.org/t/p/"
    poster_size: str = "w500"
    backdrop_size: str = "original"
    language: str = "en-US"
    max_retries: int = 3
    initial_retry_delay: float = 1.0


@dataclass
class Settings:
    """Application settings."""

    # Endpoints and API keys (from environment only)
    prowlarr_url: str = ""
    prowlarr_api_key: str = ""
    tmdb_api_key: str = ""
    redis_url: Optional[str] = None

    # Config sections
    cache: CacheConfig = field(default_factory=CacheConfig)
    refresh: RefreshConfig = field(default_factory=RefreshConfig)
    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    tmdb: TMDbConfig = field(default_factory=TMDbConfig)
    categories: dict[str, dict] = field(default_factory=dict)

    @property
    def listing_enabled(self) -> bool:
        return bool(self.prowlarr_url and self.prowlarr_api_key)

    @property
    def metadata_enabled(self) -> bool:
        return bool(self.tmdb_api_key)

    @property
    def use_redis(self) -> bool:
        return bool(self.redis_url)

    def describe_credentials(self) -> dict[str, str]:
        """Credential status safe for display."""
        return {
            "PROWLARR_URL": self.prowlarr_url or "NOT SET",
            "PROWLARR_API_KEY": mask_api_key(self.prowlarr_api_key),
            "TMDB_API_KEY": mask_api_key(self.tmdb_api_key),
            "REDIS_URL": "SET" if self.redis_url else "NOT SET (in-memory cache)",
        }


def mask_api_key(api_key: Optional[str]) -> str:
    """Show only the last characters of a key."""
    if not api_key:
        return "NOT SET"
    if len(api_key) <= 4:
        return "SET"
    return f"SET (ends with: {api_key[-4:]})"


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    # Load YAML config
    config = load_config(config_path)

    # Build settings
    settings = Settings(
        prowlarr_url=os.getenv("PROWLARR_URL", "").rstrip("/"),
        prowlarr_api_key=os.getenv("PROWLARR_API_KEY", ""),
        tmdb_api_key=os.getenv("TMDB_API_KEY", ""),
        redis_url=os.getenv("REDIS_URL") or None,
    )

    # Apply YAML config
    if "cache" in config:
        for key, value in config["cache"].items():
            setattr(settings.cache, key, value)

    if "refresh" in config:
        for key, value in config["refresh"].items():
            setattr(settings.refresh, key, value)

    if "aggregation" in config:
        for key, value in config["aggregation"].items():
            setattr(settings.aggregation, key, value)

    if "tmdb" in config:
        for key, value in config["tmdb"].items():
            setattr(settings.tmdb, key, value)

    if "categories" in config:
        settings.categories = dict(config["categories"] or {})

    # Deployment override for the cache TTL
    ttl_override = os.getenv("FEATURED_CONTENT_TTL_SECONDS")
    if ttl_override:
        settings.cache.ttl_seconds = int(ttl_override)

    return settings
