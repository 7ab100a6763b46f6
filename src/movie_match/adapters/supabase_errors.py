"""Translation of Supabase client failures into store errors."""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

import httpx
from postgrest.exceptions import APIError

from movie_match.domain.errors import TransientStoreError


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Re-raise PostgREST and transport failures as TransientStoreError."""
    try:
        yield
    except (APIError, httpx.HTTPError) as exc:
        raise TransientStoreError(f"Store operation failed: {action}") from exc


def parse_timestamp(value: str) -> datetime:
    """Parse a Postgres timestamptz string."""
    return datetime.fromisoformat(value)
