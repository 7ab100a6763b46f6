"""The Movie Database (TMDB) API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class TmdbClient(Protocol):
    """Interface for TMDB API interactions."""

    async def list_movies(
        self, genre_id: int | None = None, page: int = 1
    ) -> dict[str, object]:
        """Return one page of popular (or genre-filtered) movies as raw data."""

    async def get_movie(self, movie_id: str) -> dict[str, object]:
        """Fetch a movie's details and return raw API data."""


@dataclass
class HttpxTmdbClient(TmdbClient):
    """HTTPX-backed TMDB client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    language: str = "en-US"
    timeout_seconds: float = 8.0

    @classmethod
    def create(
        cls,
        api_key: str,
        base_url: str,
        language: str = "en-US",
        timeout_seconds: float = 8.0,
    ) -> "HttpxTmdbClient":
        """Create a TMDB client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(headers={"Accept": "application/json"}),
            language=language,
            timeout_seconds=timeout_seconds,
        )

    async def list_movies(
        self, genre_id: int | None = None, page: int = 1
    ) -> dict[str, object]:
        """List popular movies, or discover by genre when one is given."""
        params: dict[str, object] = {
            "api_key": self.api_key,
            "language": self.language,
            "page": page,
        }
        if genre_id is None:
            url = f"{self.base_url}/movie/popular"
        else:
            url = f"{self.base_url}/discover/movie"
            params["with_genres"] = genre_id
            params["sort_by"] = "popularity.desc"
            params["include_adult"] = "false"
        response = await self.http_client.get(
            url, params=params, timeout=self.timeout_seconds
        )
        response.raise_for_status()
        return response.json()

    async def get_movie(self, movie_id: str) -> dict[str, object]:
        """Fetch a movie by TMDB id."""
        url = f"{self.base_url}/movie/{movie_id}"
        response = await self.http_client.get(
            url,
            params={"api_key": self.api_key, "language": self.language},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
