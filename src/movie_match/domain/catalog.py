"""Catalog domain models."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class CandidateMetadata:
    """Descriptive metadata for a movie that can be voted on."""

    id: str
    title: str
    overview: str
    poster_url: str | None = None
    vote_average: float = 0.0
    release_date: str = ""
    genres: tuple[str, ...] = field(default_factory=tuple)
    runtime: int | None = None

    def to_payload(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dict for caching."""
        return {
            "id": self.id,
            "title": self.title,
            "overview": self.overview,
            "poster_url": self.poster_url,
            "vote_average": self.vote_average,
            "release_date": self.release_date,
            "genres": list(self.genres),
            "runtime": self.runtime,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> "CandidateMetadata":
        """Rebuild metadata from a cached payload."""
        genres = payload.get("genres") or []
        runtime = payload.get("runtime")
        return cls(
            id=str(payload["id"]),
            title=str(payload.get("title", "")),
            overview=str(payload.get("overview", "")),
            poster_url=payload.get("poster_url"),
            vote_average=float(payload.get("vote_average") or 0.0),
            release_date=str(payload.get("release_date") or ""),
            genres=tuple(str(genre) for genre in genres),
            runtime=int(runtime) if isinstance(runtime, int | float) else None,
        )


@dataclass(frozen=True)
class CacheEntry:
    """A cached catalog payload; kept after expiry for degraded reads."""

    key: str
    payload: object
    cached_at: datetime
    expires_at: datetime

    def is_fresh(self, now: datetime) -> bool:
        return now < self.expires_at
