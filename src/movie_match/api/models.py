"""Pydantic request and response models for the HTTP API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from movie_match.domain.catalog import CandidateMetadata
from movie_match.domain.rooms import RoomRecord, RoomStatus
from movie_match.domain.votes import VoteOutcome, VoteType


class VoteRequest(BaseModel):
    """Body of a vote submission."""

    movie_id: str = Field(min_length=1, max_length=64)
    vote_type: VoteType = VoteType.LIKE


class RoomResponse(BaseModel):
    """Room state returned to clients."""

    id: UUID
    status: RoomStatus
    host_id: str
    result_movie_id: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, room: RoomRecord) -> "RoomResponse":
        return cls(
            id=room.id,
            status=room.status,
            host_id=room.host_id,
            result_movie_id=room.result_candidate_id,
            created_at=room.created_at,
            updated_at=room.updated_at,
        )


class RoomListResponse(BaseModel):
    rooms: list[RoomResponse]


class VoteResponse(BaseModel):
    """Authoritative tally and match flag for a submitted vote."""

    room: RoomResponse
    movie_id: str
    vote_type: VoteType
    vote_count: int
    matched: bool

    @classmethod
    def from_outcome(cls, outcome: VoteOutcome) -> "VoteResponse":
        return cls(
            room=RoomResponse.from_record(outcome.room),
            movie_id=outcome.candidate_id,
            vote_type=outcome.vote_type,
            vote_count=outcome.vote_count,
            matched=outcome.matched,
        )


class MovieResponse(BaseModel):
    """Movie metadata returned to clients."""

    id: str
    title: str
    overview: str
    poster_url: str | None = None
    vote_average: float = 0.0
    release_date: str = ""
    genres: list[str] = Field(default_factory=list)
    runtime: int | None = None

    @classmethod
    def from_candidate(cls, candidate: CandidateMetadata) -> "MovieResponse":
        return cls(
            id=candidate.id,
            title=candidate.title,
            overview=candidate.overview,
            poster_url=candidate.poster_url,
            vote_average=candidate.vote_average,
            release_date=candidate.release_date,
            genres=list(candidate.genres),
            runtime=candidate.runtime,
        )


class MovieListResponse(BaseModel):
    movies: list[MovieResponse]
