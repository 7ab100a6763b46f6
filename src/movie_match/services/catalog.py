"""Catalog resolution with cache, TMDB fetch and degraded fallbacks."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TypeVar

import httpx

from movie_match.adapters.tmdb_client import TmdbClient
from movie_match.domain.catalog import CandidateMetadata
from movie_match.domain.errors import CircuitOpenError, TransientStoreError
from movie_match.services.cache import CatalogCache, new_entry
from movie_match.services.circuit_breaker import CircuitBreaker

_logger = logging.getLogger(__name__)

T = TypeVar("T")

# A stage yields a usable result or None to continue down the chain.
Stage = tuple[str, Callable[[], Awaitable[T | None]]]

_GENRE_IDS = {
    "action": 28,
    "adventure": 12,
    "animation": 16,
    "comedy": 35,
    "crime": 80,
    "documentary": 99,
    "drama": 18,
    "family": 10751,
    "fantasy": 14,
    "history": 36,
    "horror": 27,
    "music": 10402,
    "mystery": 9648,
    "romance": 10749,
    "science_fiction": 878,
    "tv_movie": 10770,
    "thriller": 53,
    "war": 10752,
    "western": 37,
}
_GENRE_NAMES = {
    genre_id: name.replace("_", " ").title() for name, genre_id in _GENRE_IDS.items()
}

DEFAULT_CANDIDATES: tuple[CandidateMetadata, ...] = (
    CandidateMetadata(
        id="default_1",
        title="The Godfather",
        overview="The story of an Italian mafia family in New York.",
    ),
    CandidateMetadata(
        id="default_2",
        title="Pulp Fiction",
        overview="Intertwined crime stories in Los Angeles.",
    ),
    CandidateMetadata(
        id="default_3",
        title="The Lord of the Rings",
        overview="An epic fantasy adventure in Middle-earth.",
    ),
    CandidateMetadata(
        id="default_4",
        title="Forrest Gump",
        overview="The extraordinary life of a simple man.",
    ),
    CandidateMetadata(
        id="default_5",
        title="The Matrix",
        overview="A programmer discovers the truth about reality.",
    ),
)
_DEFAULTS_BY_ID = {candidate.id: candidate for candidate in DEFAULT_CANDIDATES}


def candidates_cache_key(genre: str | None) -> str:
    return f"movies_all_{genre or 'popular'}"


def details_cache_key(candidate_id: str) -> str:
    return f"movie_details_{candidate_id}"


def normalize_genre(genre: str | None) -> str | None:
    """Return the TMDB genre key for a user-supplied name, or None."""
    if not genre:
        return None
    normalized = genre.strip().lower().replace(" ", "_").replace("-", "_")
    if normalized in _GENRE_IDS:
        return normalized
    _logger.warning("Unknown genre ignored: %s", genre)
    return None


@dataclass
class CatalogService:
    """Resolves candidate metadata without ever failing the caller.

    Each lookup walks fresh cache, TMDB (through the circuit breaker), stale
    cache and finally a static default; the first stage with a usable result
    wins.
    """

    tmdb_client: TmdbClient
    cache: CatalogCache
    breaker: CircuitBreaker
    image_base_url: str = "https://image.tmdb.org/t/p/w500"
    cache_ttl_days: int = 30
    pages: int = 5
    fetch_timeout_seconds: float = 10.0
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def resolve_candidates(
        self, genre: str | None = None
    ) -> list[CandidateMetadata]:
        """Return an ordered, non-empty candidate list for a genre."""
        genre_key = normalize_genre(genre)
        cache_key = candidates_cache_key(genre_key)
        genre_id = _GENRE_IDS.get(genre_key) if genre_key else None

        result = await self._resolve(
            cache_key,
            [
                (
                    "fresh_cache",
                    lambda: self._read_cache(cache_key, _decode_candidates),
                ),
                (
                    "source",
                    lambda: self._fetch(
                        cache_key,
                        lambda: self._fetch_candidates(genre_id),
                        _encode_candidates,
                    ),
                ),
                (
                    "stale_cache",
                    lambda: self._read_cache(
                        cache_key, _decode_candidates, allow_expired=True
                    ),
                ),
            ],
        )
        if result is None:
            _logger.warning("Catalog degraded to defaults: key=%s", cache_key)
            return list(DEFAULT_CANDIDATES)
        return result

    async def get_candidate(self, candidate_id: str) -> CandidateMetadata:
        """Return metadata for a single candidate."""
        if candidate_id in _DEFAULTS_BY_ID:
            return _DEFAULTS_BY_ID[candidate_id]
        cache_key = details_cache_key(candidate_id)

        result = await self._resolve(
            cache_key,
            [
                ("fresh_cache", lambda: self._read_cache(cache_key, _decode_candidate)),
                (
                    "source",
                    lambda: self._fetch(
                        cache_key,
                        lambda: self._fetch_candidate(candidate_id),
                        CandidateMetadata.to_payload,
                    ),
                ),
                (
                    "stale_cache",
                    lambda: self._read_cache(
                        cache_key, _decode_candidate, allow_expired=True
                    ),
                ),
            ],
        )
        if result is None:
            return _unavailable_candidate(candidate_id)
        return result

    async def refresh_candidates(self, genre: str | None = None) -> int:
        """Force a source fetch for a genre and return how many were cached."""
        genre_key = normalize_genre(genre)
        genre_id = _GENRE_IDS.get(genre_key) if genre_key else None
        result = await self._fetch(
            candidates_cache_key(genre_key),
            lambda: self._fetch_candidates(genre_id),
            _encode_candidates,
        )
        return len(result or [])

    @staticmethod
    def available_genres() -> list[str]:
        """Return the genre names accepted by resolve_candidates."""
        return sorted(_GENRE_NAMES.values())

    async def _resolve(self, cache_key: str, stages: list[Stage[T]]) -> T | None:
        for name, stage in stages:
            result = await stage()
            if result:
                _logger.info("Catalog resolved: key=%s stage=%s", cache_key, name)
                return result
        return None

    async def _read_cache(
        self,
        cache_key: str,
        decode: Callable[[object], T],
        allow_expired: bool = False,
    ) -> T | None:
        try:
            entry = self.cache.get_entry(cache_key)
        except TransientStoreError:
            _logger.warning(
                "Catalog cache read failed: key=%s", cache_key, exc_info=True
            )
            return None
        if entry is None:
            return None
        if not allow_expired and not entry.is_fresh(datetime.now(tz=UTC)):
            return None
        try:
            return decode(entry.payload)
        except (KeyError, TypeError, ValueError):
            _logger.warning("Catalog cache entry unreadable: key=%s", cache_key)
            return None

    async def _fetch(
        self,
        cache_key: str,
        fetch: Callable[[], Awaitable[T | None]],
        encode: Callable[[T], object],
    ) -> T | None:
        try:
            result = await self.breaker.call(
                lambda: asyncio.wait_for(fetch(), timeout=self.fetch_timeout_seconds)
            )
        except CircuitOpenError as exc:
            _logger.warning("Catalog source skipped: %s", exc)
            return None
        except Exception:
            _logger.warning("Catalog source failed: key=%s", cache_key, exc_info=True)
            return None
        if result is None:
            return None

        try:
            self.cache.put_entry(
                new_entry(
                    cache_key, encode(result), timedelta(days=self.cache_ttl_days)
                )
            )
        except TransientStoreError:
            _logger.warning(
                "Catalog cache write failed: key=%s", cache_key, exc_info=True
            )
        return result

    async def _fetch_candidates(self, genre_id: int | None) -> list[CandidateMetadata]:
        pages = await asyncio.gather(
            *(self._fetch_page(genre_id, page) for page in range(1, self.pages + 1))
        )
        seen: set[str] = set()
        candidates: list[CandidateMetadata] = []
        for page_candidates in pages:
            for candidate in page_candidates:
                if candidate.id not in seen:
                    seen.add(candidate.id)
                    candidates.append(candidate)
        if not candidates:
            raise ValueError("TMDB returned no movies")
        _logger.info(
            "Fetched %s movies from TMDB (genre=%s)", len(candidates), genre_id
        )
        return candidates

    async def _fetch_page(
        self, genre_id: int | None, page: int
    ) -> list[CandidateMetadata]:
        try:
            payload = await self._call_with_retry(
                lambda: self.tmdb_client.list_movies(genre_id=genre_id, page=page),
                action=f"list_movies:{page}",
            )
            results = payload.get("results")
            if not isinstance(results, list):
                raise ValueError("TMDB page has no results list")
            return [_candidate_from_tmdb(raw, self.image_base_url) for raw in results]
        except Exception:
            _logger.warning("TMDB page %s failed", page, exc_info=True)
            return []

    async def _fetch_candidate(self, candidate_id: str) -> CandidateMetadata | None:
        try:
            payload = await self._call_with_retry(
                lambda: self.tmdb_client.get_movie(candidate_id),
                action=f"get_movie:{candidate_id}",
            )
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code != 404:
                raise
            _logger.info("TMDB has no movie %s", candidate_id)
            return None
        return _candidate_from_tmdb(payload, self.image_base_url)

    async def _call_with_retry(
        self, func: Callable[[], Awaitable[dict[str, object]]], *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                if _status_code_from_exception(exc) == "404":
                    raise
                attempt += 1
                _logger.warning(
                    "TMDB %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    _status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _candidate_from_tmdb(
    raw: dict[str, object], image_base_url: str
) -> CandidateMetadata:
    """Map a TMDB movie (list item or details) to candidate metadata."""
    movie_id = raw["id"]
    poster_path = raw.get("poster_path")
    detailed = raw.get("genres") or []
    genres = [str(genre["name"]) for genre in detailed if isinstance(genre, dict)]
    if not genres:
        genre_ids = raw.get("genre_ids") or []
        genres = [_GENRE_NAMES[gid] for gid in genre_ids if gid in _GENRE_NAMES]
    runtime = raw.get("runtime")
    return CandidateMetadata(
        id=str(movie_id),
        title=str(raw.get("title") or raw.get("original_title") or "Untitled"),
        overview=str(raw.get("overview") or ""),
        poster_url=f"{image_base_url}{poster_path}" if poster_path else None,
        vote_average=float(raw.get("vote_average") or 0.0),
        release_date=str(raw.get("release_date") or ""),
        genres=tuple(genres),
        runtime=runtime if isinstance(runtime, int) else None,
    )


def _unavailable_candidate(candidate_id: str) -> CandidateMetadata:
    return CandidateMetadata(
        id=candidate_id,
        title=f"Movie {candidate_id}",
        overview="Details for this movie are temporarily unavailable.",
    )


def _encode_candidates(candidates: list[CandidateMetadata]) -> list[dict[str, object]]:
    return [candidate.to_payload() for candidate in candidates]


def _decode_candidates(payload: object) -> list[CandidateMetadata]:
    if not isinstance(payload, list):
        raise TypeError("cached candidate list is not a list")
    return [CandidateMetadata.from_payload(item) for item in payload]


def _decode_candidate(payload: object) -> CandidateMetadata:
    if not isinstance(payload, dict):
        raise TypeError("cached candidate is not a mapping")
    return CandidateMetadata.from_payload(payload)
