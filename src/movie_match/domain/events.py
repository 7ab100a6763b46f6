"""Domain event records handed to the notifier."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class EventType(StrEnum):
    """Kinds of room-scoped events."""

    VOTE_UPDATE = "VOTE_UPDATE"
    MATCH_FOUND = "MATCH_FOUND"
    MEMBER_UPDATE = "MEMBER_UPDATE"


class MemberAction(StrEnum):
    """Membership changes reported in MEMBER_UPDATE events."""

    JOINED = "JOINED"
    LEFT = "LEFT"


@dataclass(frozen=True)
class EventRecord:
    """Immutable, timestamped, uniquely identified room event."""

    id: str
    event_type: EventType
    room_id: UUID
    occurred_at: datetime
    payload: Mapping[str, object]

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-compatible representation."""
        return {
            "id": self.id,
            "eventType": self.event_type.value,
            "roomId": str(self.room_id),
            "timestamp": self.occurred_at.isoformat(),
            **_thaw(self.payload),
        }


def _thaw(value: object) -> object:
    if isinstance(value, Mapping):
        return {str(key): _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple | list):
        return [_thaw(item) for item in value]
    return value
