"""Catalog cache abstractions."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from movie_match.domain.catalog import CacheEntry


class CatalogCache(Protocol):
    """Cache interface for catalog payloads.

    Entries are returned even after they expire so callers can fall back to
    stale data.
    """

    def get_entry(self, key: str) -> CacheEntry | None:
        """Return the entry for a key, fresh or expired."""

    def put_entry(self, entry: CacheEntry) -> None:
        """Store or replace the entry for its key."""


def new_entry(key: str, payload: object, ttl: timedelta) -> CacheEntry:
    """Build an entry that stays fresh for ``ttl`` from now."""
    cached_at = datetime.now(tz=UTC)
    return CacheEntry(
        key=key, payload=payload, cached_at=cached_at, expires_at=cached_at + ttl
    )


@dataclass
class InMemoryCatalogCache(CatalogCache):
    """Process-local cache that keeps expired entries for degraded reads."""

    _entries: dict[str, CacheEntry]

    def __init__(self) -> None:
        self._entries = {}

    def get_entry(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def put_entry(self, entry: CacheEntry) -> None:
        self._entries[entry.key] = entry
