"""TMDb API client for movie and series metadata."""

import asyncio
import logging
from typing import Any, Optional

import httpx

from content_curator.core import MediaKind, MetadataCandidate, MetadataProvider, MetadataProviderError

logger = logging.getLogger(__name__)


class TMDbClient(MetadataProvider):
    """TMDb API client implementation."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.themoviedb.org/3",
        language: str = "en-US",
        timeout: float = 10.0,
        max_retries: int = 3,
        initial_retry_delay: float = 1.0,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.language = language
        self.timeout = timeout
        self.max_retries = max_retries
        self.initial_retry_delay = initial_retry_delay

    async def search_by_title(self, cleaned_title: str, media_kind: MediaKind) -> list[MetadataCandidate]:
        """Search movies or series by title."""
        data = await self._call_api(
            f"/search/{media_kind.value}",
            {"query": cleaned_title, "include_adult": "false"},
        )

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            raise MetadataProviderError("search response has no results list")

        candidates = []
        for result in results:
            candidate = self._parse_candidate(result)
            if candidate:
                candidates.append(candidate)
        return candidates

    async def fetch_details(self, external_id: int, media_kind: MediaKind) -> Optional[MetadataCandidate]:
        """Fetch the full movie or series record, None if TMDb does not know the id."""
        data = await self._call_api(f"/{media_kind.value}/{external_id}", {})
        if data is None:
            return None
        return self._parse_candidate(data)

    async def _call_api(self, path: str, params: dict[str, Any]) -> Optional[Any]:
        """
        Call TMDb API with retry logic.

        Returns:
            Decoded JSON body, or None for 404

        Raises:
            MetadataProviderError: When retries are exhausted or the response is unusable
        """
        query = {"api_key": self.api_key, "language": self.language, **params}
        last_exception: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(f"{self.base_url}{path}", params=query)

                    # Success case
                    if response.status_code == 200:
                        try:
                            return response.json()
                        except ValueError as e:
                            raise MetadataProviderError(f"invalid JSON from {path}") from e

                    if response.status_code == 404:
                        return None

                    # Rate limit - retry with backoff
                    if response.status_code == 429:
                        retry_after = self._get_retry_delay(response, attempt)
                        logger.warning(
                            "TMDb rate limit hit, retrying after %.1fs (attempt %d/%d)",
                            retry_after, attempt + 1, self.max_retries,
                        )
                        last_exception = MetadataProviderError("rate limited")
                        await asyncio.sleep(retry_after)
                        continue

                    # Server errors - retry with backoff
                    if response.status_code >= 500:
                        retry_delay = self.initial_retry_delay * (2 ** attempt)
                        logger.warning("TMDb server error %d, retrying after %.1fs", response.status_code, retry_delay)
                        last_exception = MetadataProviderError(f"HTTP {response.status_code}")
                        await asyncio.sleep(retry_delay)
                        continue

                    # Other errors - raise immediately
                    raise MetadataProviderError(f"HTTP {response.status_code} for {path}")

            except httpx.RequestError as e:
                last_exception = e
                if attempt < self.max_retries - 1:
                    retry_delay = self.initial_retry_delay * (2 ** attempt)
                    logger.warning("TMDb network error, retrying after %.1fs: %s", retry_delay, e)
                    await asyncio.sleep(retry_delay)
                    continue
                raise MetadataProviderError(f"request failed: {e}") from e

        raise MetadataProviderError(f"retries exhausted for {path}: {last_exception}")

    def _get_retry_delay(self, response: httpx.Response, attempt: int) -> float:
        """Get retry delay from Retry-After header or calculate exponential backoff.

        Never longer than the request timeout.
        """
        retry_after = response.headers.get("retry-after")
        if retry_after:
            try:
                return min(float(retry_after), self.timeout)
            except ValueError:
                pass

        return min(self.initial_retry_delay * (2 ** attempt), self.timeout)

    @staticmethod
    def _parse_candidate(data: Any) -> Optional[MetadataCandidate]:
        """Map a movie or series record onto a MetadataCandidate."""
        if not isinstance(data, dict) or data.get("id") is None:
            return None

        title = data.get("title") or data.get("name")
        if not title:
            return None

        genres = [g for g in data.get("genres") or [] if isinstance(g, dict)]
        genre_ids = data.get("genre_ids") or [g["id"] for g in genres if "id" in g]

        runtime = data.get("runtime")
        if runtime is None and data.get("episode_run_time"):
            runtime = data["episode_run_time"][0]

        vote_average = data.get("vote_average")

        return MetadataCandidate(
            external_id=int(data["id"]),
            title=str(title),
            overview=data.get("overview") or None,
            poster_path=data.get("poster_path"),
            backdrop_path=data.get("backdrop_path"),
            vote_average=float(vote_average) if vote_average is not None else None,
            release_date=data.get("release_date") or data.get("first_air_date") or None,
            genre_ids=[int(g) for g in genre_ids],
            genre_names=[str(g["name"]) for g in genres if g.get("name")],
            runtime_minutes=runtime or None,
            season_count=data.get("number_of_seasons"),
        )
