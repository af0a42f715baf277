"""Tests for Prowlarr listing provider."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from content_curator.adapters.listings import ProwlarrListingProvider
from content_curator.core import ListingProviderError, RawListing


@pytest.fixture
def provider() -> ProwlarrListingProvider:
    """Create provider instance."""
    return ProwlarrListingProvider(base_url="http://prowlarr:9696/", api_key="prowlarr-key")


def prowlarr_result(guid: str, title: str, seeders: int = 20, **extra) -> dict:
    """Create a Prowlarr search result payload."""
    result = {
        "guid": guid,
        "title": title,
        "size": 4_500_000_000,
        "seeders": seeders,
        "leechers": 3,
        "publishDate": "2024-03-01T12:00:00Z",
        "categories": [{"id": 2000, "name": "Movies"}, {"id": 2045, "name": "Movies/UHD"}],
        "indexer": "TestIndexer",
        "infoUrl": f"https://indexer.example/{guid}",
        "downloadUrl": f"https://indexer.example/{guid}.torrent",
    }
    result.update(extra)
    return result


def mock_response(status_code: int, payload) -> MagicMock:
    """Create mock HTTP response."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


def mock_http_client(mock_client_class: MagicMock, *responses) -> AsyncMock:
    """Wire a mock httpx.AsyncClient returning responses in order."""
    mock_client = AsyncMock()
    mock_client.__aenter__.return_value = mock_client
    mock_client.get.side_effect = list(responses)
    mock_client_class.return_value = mock_client
    return mock_client


@pytest.mark.asyncio
async def test_search_listings_parses_results(provider: ProwlarrListingProvider) -> None:
    """Test results are mapped onto raw listings."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http_client(
            mock_client_class,
            mock_response(200, [prowlarr_result("g1", "Dune.Part.Two.2024.2160p.BluRay.x265")]),
        )

        listings = await provider.search_listings(["2024 2160p"], [2000], min_seeders=5, limit=20)

    assert len(listings) == 1
    listing = listings[0]
    assert listing.guid == "g1"
    assert listing.title == "Dune.Part.Two.2024.2160p.BluRay.x265"
    assert listing.size == 4_500_000_000
    assert listing.seeders == 20
    assert listing.publish_date == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert listing.categories == ["2000", "Movies", "2045", "Movies/UHD"]
    assert listing.download_url == "https://indexer.example/g1.torrent"

    call = mock_client.get.await_args
    assert call.args[0] == "http://prowlarr:9696/api/v1/search"
    assert call.kwargs["headers"] == {"X-Api-Key": "prowlarr-key"}
    assert call.kwargs["params"] == {
        "query": "2024 2160p",
        "type": "movie",
        "limit": 20,
        "categories": "2000",
    }


@pytest.mark.asyncio
async def test_search_listings_merges_terms(provider: ProwlarrListingProvider) -> None:
    """Test multiple terms are merged without duplicates, filtered and truncated."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_http_client(
            mock_client_class,
            mock_response(200, [prowlarr_result("g1", "A.2024.2160p"), prowlarr_result("g2", "B.2024.2160p", seeders=1)]),
            mock_response(200, [prowlarr_result("g1", "A.2024.2160p"), prowlarr_result("g3", "C.2024.1080p")]),
        )

        listings = await provider.search_listings(["2024 2160p", "2024 1080p"], [2000], min_seeders=5, limit=20)

    assert [listing.guid for listing in listings] == ["g1", "g3"]


@pytest.mark.asyncio
async def test_search_listings_truncates_to_limit(provider: ProwlarrListingProvider) -> None:
    """Test merged results are cut to the limit in term order."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http_client(
            mock_client_class,
            mock_response(200, [prowlarr_result(f"g{i}", f"Movie.{i}.2024") for i in range(5)]),
            mock_response(200, [prowlarr_result("late", "Late.2023")]),
        )

        listings = await provider.search_listings(["2024", "2023"], [], min_seeders=0, limit=3)

    assert [listing.guid for listing in listings] == ["g0", "g1", "g2"]
    assert mock_client.get.await_count == 2
    assert "categories" not in mock_client.get.await_args.kwargs["params"]
    assert mock_client.get.await_args.kwargs["params"]["type"] == "search"


@pytest.mark.asyncio
async def test_search_listings_slow_term_keeps_other_terms() -> None:
    """Test a term that exceeds the timeout only loses its own results."""
    provider = ProwlarrListingProvider(base_url="http://prowlarr:9696", api_key="key", timeout=0.1)

    async def fake_search(client, term, category_filter, limit):
        if term == "slow":
            await asyncio.sleep(5)
        return [RawListing(guid=f"{term}-1", title=f"{term}.2024.1080p")]

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_http_client(mock_client_class)
        with patch.object(provider, "_search", side_effect=fake_search):
            listings = await asyncio.wait_for(
                provider.search_listings(["fast", "slow", "other"], [], min_seeders=0, limit=20),
                timeout=2,
            )

    assert [listing.guid for listing in listings] == ["fast-1", "other-1"]


@pytest.mark.asyncio
async def test_search_listings_terms_run_concurrently() -> None:
    """Test terms share one timeout window instead of adding up."""
    provider = ProwlarrListingProvider(base_url="http://prowlarr:9696", api_key="key", timeout=0.5)

    async def fake_search(client, term, category_filter, limit):
        await asyncio.sleep(0.2)
        return [RawListing(guid=f"{term}-1", title=f"{term}.2024.1080p")]

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_http_client(mock_client_class)
        with patch.object(provider, "_search", side_effect=fake_search):
            listings = await asyncio.wait_for(
                provider.search_listings(["a", "b", "c"], [], min_seeders=0, limit=20),
                timeout=0.5,
            )

    assert len(listings) == 3


@pytest.mark.asyncio
async def test_search_listings_tv_search_type(provider: ProwlarrListingProvider) -> None:
    """Test TV categories use the tvsearch type."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http_client(mock_client_class, mock_response(200, []))

        await provider.search_listings(["*"], [5000], min_seeders=3, limit=20)

    assert mock_client.get.await_args.kwargs["params"]["type"] == "tvsearch"


@pytest.mark.asyncio
async def test_search_listings_skips_malformed_entries(provider: ProwlarrListingProvider) -> None:
    """Test unusable entries are dropped."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_http_client(
            mock_client_class,
            mock_response(200, [
                "not a dict",
                {"title": "No guid"},
                prowlarr_result("g2", ""),
                prowlarr_result("g3", "Bad.Size", size="huge"),
                prowlarr_result("g4", "Good.2024.1080p", publishDate="yesterday", seeders=None),
            ]),
        )

        listings = await provider.search_listings(["*"], [], min_seeders=0, limit=20)

    assert [listing.guid for listing in listings] == ["g4"]
    assert listings[0].publish_date is None
    assert listings[0].seeders is None


@pytest.mark.asyncio
async def test_search_listings_http_error_raises(provider: ProwlarrListingProvider) -> None:
    """Test a failed search surfaces as ListingProviderError."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_http_client(mock_client_class, mock_response(401, {"error": "unauthorized"}))

        with pytest.raises(ListingProviderError, match="401"):
            await provider.search_listings(["*"], [], min_seeders=0, limit=20)


@pytest.mark.asyncio
async def test_search_listings_unexpected_payload_raises(provider: ProwlarrListingProvider) -> None:
    """Test a non-list payload is rejected."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_http_client(mock_client_class, mock_response(200, {"message": "oops"}))

        with pytest.raises(ListingProviderError, match="unexpected response"):
            await provider.search_listings(["*"], [], min_seeders=0, limit=20)


@pytest.mark.asyncio
async def test_search_listings_partial_failure_returns_rest(provider: ProwlarrListingProvider) -> None:
    """Test one failing term does not discard results of the others."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_http_client(
            mock_client_class,
            httpx.ConnectError("connection refused"),
            mock_response(200, [prowlarr_result("g1", "Movie.2024.1080p")]),
        )

        listings = await provider.search_listings(["first", "second"], [], min_seeders=0, limit=20)

    assert [listing.guid for listing in listings] == ["g1"]
