"""Tests for the command line interface."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from content_curator.adapters.cache import InMemoryCache, RedisCache
from content_curator.cli import app, build_service
from content_curator.config import Settings

runner = CliRunner()

ENV_VARS = ("PROWLARR_URL", "PROWLARR_API_KEY", "TMDB_API_KEY", "REDIS_URL", "FEATURED_CONTENT_TTL_SECONDS")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run without credentials so only static content is served."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Path to a config file that does not exist."""
    return tmp_path / "config.yaml"


def test_build_service_without_credentials() -> None:
    """Test unconfigured providers are left out of the wiring."""
    service = build_service(Settings())

    assert service.orchestrator.aggregator.listing_provider is None
    assert service.orchestrator.aggregator.enricher.provider is None
    assert isinstance(service.orchestrator.backend, InMemoryCache)


def test_featured_json(config_path: Path) -> None:
    """Test the document is printed as JSON."""
    result = runner.invoke(app, ["--config", str(config_path), "featured", "--json"])

    assert result.exit_code == 0
    data = json.loads(result.stdout[result.stdout.index("{"):])
    assert data["source"] == "fallback"
    assert data["hero_item"]["display_title"] == "Dune: Part Two"
    assert len(data["categories"]) == 5


def test_category_command(config_path: Path) -> None:
    """Test a single category is printed."""
    result = runner.invoke(app, ["--config", str(config_path), "category", "documentaries"])

    assert result.exit_code == 0
    assert "Documentaries" in result.stdout
    assert "Planet Earth III" in result.stdout


def test_unknown_category(config_path: Path) -> None:
    """Test an unknown category exits with an error."""
    result = runner.invoke(app, ["--config", str(config_path), "category", "nope"])

    assert result.exit_code == 1


def test_status_command(config_path: Path) -> None:
    """Test status reports credentials and an empty cache."""
    result = runner.invoke(app, ["--config", str(config_path), "status"])

    assert result.exit_code == 0
    assert "PROWLARR_API_KEY: NOT SET" in result.stdout
    assert "Empty" in result.stdout


def test_refresh_command(config_path: Path) -> None:
    """Test a manual refresh succeeds with static content."""
    result = runner.invoke(app, ["--config", str(config_path), "refresh"])

    assert result.exit_code == 0
    assert "Refreshed 50 items from fallback" in result.stdout


def test_command_closes_redis_client(config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test a command releases the Redis connection pool when it finishes."""
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")
    client = AsyncMock()
    client.get.return_value = None

    with patch("content_curator.cli.RedisCache.from_url", return_value=RedisCache(client)):
        result = runner.invoke(app, ["--config", str(config_path), "status"])

    assert result.exit_code == 0
    client.aclose.assert_awaited_once()
