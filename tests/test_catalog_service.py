"""Tests for catalog resolution and its degraded paths."""

import asyncio
from datetime import UTC, datetime, timedelta

from movie_match.domain.catalog import CacheEntry, CandidateMetadata
from movie_match.domain.errors import TransientStoreError
from movie_match.services.cache import InMemoryCatalogCache
from movie_match.services.catalog import (
    DEFAULT_CANDIDATES,
    CatalogService,
    candidates_cache_key,
    normalize_genre,
)
from movie_match.services.circuit_breaker import CircuitBreaker, CircuitState
from tests.conftest import FakeClock, FakeTmdbClient, build_catalog_service


class FailingCache(InMemoryCatalogCache):
    def get_entry(self, key: str) -> CacheEntry | None:
        raise TransientStoreError("cache unavailable")

    def put_entry(self, entry: CacheEntry) -> None:
        raise TransientStoreError("cache unavailable")


def _expired_entry(key: str, payload: object) -> CacheEntry:
    cached_at = datetime.now(tz=UTC) - timedelta(days=40)
    return CacheEntry(
        key=key,
        payload=payload,
        cached_at=cached_at,
        expires_at=cached_at + timedelta(days=30),
    )


def test_fetches_pages_deduplicates_and_caches() -> None:
    tmdb = FakeTmdbClient()
    cache = InMemoryCatalogCache()
    service = build_catalog_service(tmdb, cache)

    candidates = asyncio.run(service.resolve_candidates())

    assert [candidate.id for candidate in candidates] == ["550", "603", "680"]
    assert candidates[0].poster_url == "https://image.tmdb.org/t/p/w500/550.jpg"
    assert candidates[1].genres == ("Action", "Science Fiction")
    assert sorted(tmdb.list_calls) == [(None, 1), (None, 2)]
    entry = cache.get_entry("movies_all_popular")
    assert entry is not None
    assert entry.expires_at - entry.cached_at == timedelta(days=30)


def test_fresh_cache_skips_the_source() -> None:
    tmdb = FakeTmdbClient()
    service = build_catalog_service(tmdb)
    asyncio.run(service.resolve_candidates())
    calls = len(tmdb.list_calls)

    cached = asyncio.run(service.resolve_candidates())

    assert len(tmdb.list_calls) == calls
    assert [candidate.title for candidate in cached][0] == "Fight Club"


def test_stale_cache_served_when_source_fails() -> None:
    tmdb = FakeTmdbClient(fail=True)
    cache = InMemoryCatalogCache()
    stale = [CandidateMetadata(id="42", title="Stale Pick", overview="").to_payload()]
    cache.put_entry(_expired_entry("movies_all_popular", stale))
    service = build_catalog_service(tmdb, cache)

    candidates = asyncio.run(service.resolve_candidates())

    assert [candidate.title for candidate in candidates] == ["Stale Pick"]


def test_defaults_served_when_everything_fails() -> None:
    service = build_catalog_service(FakeTmdbClient(fail=True), FailingCache())

    candidates = asyncio.run(service.resolve_candidates())

    assert candidates == list(DEFAULT_CANDIDATES)
    assert [candidate.title for candidate in candidates][:2] == [
        "The Godfather",
        "Pulp Fiction",
    ]


def test_cache_errors_fall_through_to_source() -> None:
    service = build_catalog_service(FakeTmdbClient(), FailingCache())

    candidates = asyncio.run(service.resolve_candidates())

    assert len(candidates) == 3


def test_slow_source_times_out_to_defaults() -> None:
    tmdb = FakeTmdbClient(delay_seconds=0.5)
    service = build_catalog_service(tmdb, fetch_timeout_seconds=0.01)

    candidates = asyncio.run(service.resolve_candidates())

    assert candidates == list(DEFAULT_CANDIDATES)


def test_open_breaker_stops_calling_the_source() -> None:
    clock = FakeClock()
    tmdb = FakeTmdbClient(fail=True)
    breaker = CircuitBreaker(
        "tmdb", failure_threshold=2, reset_timeout_seconds=60, clock=clock
    )
    service = build_catalog_service(tmdb, breaker=breaker)

    asyncio.run(service.resolve_candidates())
    asyncio.run(service.resolve_candidates())
    assert breaker.state == CircuitState.OPEN
    calls = len(tmdb.list_calls)

    candidates = asyncio.run(service.resolve_candidates())

    assert len(tmdb.list_calls) == calls
    assert candidates == list(DEFAULT_CANDIDATES)

    clock.advance(61)
    tmdb.fail = False
    recovered = asyncio.run(service.resolve_candidates())
    assert len(recovered) == 3
    assert breaker.state == CircuitState.HALF_OPEN


def test_genre_filter_uses_discover_and_its_own_key() -> None:
    tmdb = FakeTmdbClient()
    cache = InMemoryCatalogCache()
    service = build_catalog_service(tmdb, cache)

    asyncio.run(service.resolve_candidates("Science Fiction"))

    assert {genre_id for genre_id, _ in tmdb.list_calls} == {878}
    assert cache.get_entry("movies_all_science_fiction") is not None


def test_unknown_genre_uses_popular_list() -> None:
    assert normalize_genre("not-a-genre") is None
    assert normalize_genre("sci-fi") is None
    assert normalize_genre("TV Movie") == "tv_movie"
    assert candidates_cache_key(normalize_genre("bogus")) == "movies_all_popular"


def test_get_candidate_default_needs_no_source() -> None:
    tmdb = FakeTmdbClient(fail=True)
    service = build_catalog_service(tmdb)

    candidate = asyncio.run(service.get_candidate("default_5"))

    assert candidate.title == "The Matrix"
    assert tmdb.detail_calls == []


def test_get_candidate_fetches_and_caches_details() -> None:
    tmdb = FakeTmdbClient()
    cache = InMemoryCatalogCache()
    service = build_catalog_service(tmdb, cache)

    candidate = asyncio.run(service.get_candidate("550"))
    again = asyncio.run(service.get_candidate("550"))

    assert candidate.title == "Fight Club"
    assert candidate.runtime == 139
    assert candidate.genres == ("Drama",)
    assert again == candidate
    assert tmdb.detail_calls == ["550"]
    assert cache.get_entry("movie_details_550") is not None


def test_get_candidate_unknown_returns_placeholder() -> None:
    service = build_catalog_service(FakeTmdbClient())

    candidate = asyncio.run(service.get_candidate("999"))

    assert candidate.id == "999"
    assert candidate.title == "Movie 999"


def test_unknown_candidate_is_not_a_source_failure() -> None:
    tmdb = FakeTmdbClient()
    cache = InMemoryCatalogCache()
    breaker = CircuitBreaker("tmdb", failure_threshold=2, clock=FakeClock())
    service = build_catalog_service(tmdb, cache, breaker, retry_attempts=1)

    for _ in range(3):
        assert asyncio.run(service.get_candidate("999")).title == "Movie 999"

    assert tmdb.detail_calls == ["999", "999", "999"]
    assert breaker.state == CircuitState.CLOSED
    assert breaker.snapshot().failure_count == 0
    assert cache.get_entry("movie_details_999") is None

    candidates = asyncio.run(service.resolve_candidates())
    assert [candidate.title for candidate in candidates][:2] == [
        "Fight Club",
        "The Matrix",
    ]
    assert tmdb.list_calls


def test_refresh_candidates_overwrites_cache() -> None:
    cache = InMemoryCatalogCache()
    cache.put_entry(_expired_entry("movies_all_popular", []))
    service = build_catalog_service(FakeTmdbClient(), cache)

    cached = asyncio.run(service.refresh_candidates())

    assert cached == 3
    entry = cache.get_entry("movies_all_popular")
    assert entry is not None
    assert entry.is_fresh(datetime.now(tz=UTC))


def test_refresh_candidates_reports_zero_on_failure() -> None:
    service = build_catalog_service(FakeTmdbClient(fail=True))

    assert asyncio.run(service.refresh_candidates("drama")) == 0


def test_available_genres() -> None:
    genres = CatalogService.available_genres()

    assert "Science Fiction" in genres
    assert genres == sorted(genres)
