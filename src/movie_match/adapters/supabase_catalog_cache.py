"""Supabase-backed catalog cache."""

from dataclasses import dataclass

from supabase import Client

from movie_match.adapters.supabase_errors import parse_timestamp, store_errors
from movie_match.domain.catalog import CacheEntry
from movie_match.services.cache import CatalogCache


@dataclass
class SupabaseCatalogCache(CatalogCache):
    """Catalog cache stored in the ``catalog_cache`` table."""

    client: Client

    def get_entry(self, key: str) -> CacheEntry | None:
        """Return the entry for a key, fresh or expired."""
        with store_errors("get_cache_entry"):
            response = (
                self.client.table("catalog_cache")
                .select("cache_key, payload_json, cached_at, expires_at")
                .eq("cache_key", key)
                .limit(1)
                .execute()
            )
        if not response.data:
            return None
        row = response.data[0]
        return CacheEntry(
            key=row["cache_key"],
            payload=row["payload_json"],
            cached_at=parse_timestamp(row["cached_at"]),
            expires_at=parse_timestamp(row["expires_at"]),
        )

    def put_entry(self, entry: CacheEntry) -> None:
        """Insert or replace the entry for its key."""
        with store_errors("put_cache_entry"):
            self.client.table("catalog_cache").upsert(
                {
                    "cache_key": entry.key,
                    "payload_json": entry.payload,
                    "cached_at": entry.cached_at.isoformat(),
                    "expires_at": entry.expires_at.isoformat(),
                },
                on_conflict="cache_key",
            ).execute()
