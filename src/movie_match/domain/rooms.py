"""Domain models for voting rooms and their members."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class RoomStatus(StrEnum):
    """Lifecycle states of a room."""

    OPEN = "OPEN"
    ACTIVE = "ACTIVE"
    MATCHED = "MATCHED"
    CLOSED = "CLOSED"


VOTABLE_STATUSES = frozenset({RoomStatus.OPEN, RoomStatus.ACTIVE})


class MemberRole(StrEnum):
    """Role a user holds inside a room."""

    HOST = "HOST"
    MEMBER = "MEMBER"


@dataclass(frozen=True)
class RoomRecord:
    """Represents a persisted room.

    ``result_candidate_id`` is set exactly when ``status`` is MATCHED.
    """

    id: UUID
    status: RoomStatus
    host_id: str
    result_candidate_id: str | None
    created_at: datetime
    updated_at: datetime

    @property
    def is_votable(self) -> bool:
        return self.status in VOTABLE_STATUSES


@dataclass(frozen=True)
class MembershipRecord:
    """Represents a user's membership in a room."""

    room_id: UUID
    user_id: str
    role: MemberRole
    is_active: bool
    joined_at: datetime
