"""Domain models for votes and consensus."""

from dataclasses import dataclass
from enum import StrEnum

from movie_match.domain.rooms import RoomRecord


class VoteType(StrEnum):
    """Kinds of vote a member can cast on a candidate."""

    LIKE = "LIKE"
    DISLIKE = "DISLIKE"
    SKIP = "SKIP"


@dataclass(frozen=True)
class ConsensusResult:
    """Outcome of a consensus evaluation.

    ``transitioned`` is true only for the call whose conditional update
    moved the room to MATCHED.
    """

    matched: bool
    room: RoomRecord
    active_members: int
    transitioned: bool = False


@dataclass(frozen=True)
class VoteOutcome:
    """Result of a full vote: authoritative count and match flag together."""

    room: RoomRecord
    candidate_id: str
    vote_type: VoteType
    vote_count: int
    matched: bool
