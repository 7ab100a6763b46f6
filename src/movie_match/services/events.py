"""Room event construction and hand-off to the notifier."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Protocol
from uuid import UUID, uuid4

from movie_match.domain.events import EventRecord, EventType, MemberAction
from movie_match.domain.votes import VoteType
from movie_match.services.membership import MembershipService

_logger = logging.getLogger(__name__)


class EventNotifier(Protocol):
    """Delivers room events to subscribers."""

    def publish(self, room_id: UUID, record: EventRecord) -> None:
        """Fan an event out to the room's subscribers."""


def _new_record(
    event_type: EventType, room_id: UUID, payload: dict[str, object]
) -> EventRecord:
    return EventRecord(
        id=f"{event_type.value.lower()}_{uuid4().hex}",
        event_type=event_type,
        room_id=room_id,
        occurred_at=datetime.now(tz=UTC),
        payload=MappingProxyType(payload),
    )


def build_vote_update_event(  # noqa: PLR0913
    room_id: UUID,
    user_id: str,
    candidate_id: str,
    vote_type: VoteType,
    vote_count: int,
    active_members: int,
) -> EventRecord:
    """Build a VOTE_UPDATE event from values returned by the aggregator."""
    percentage = (vote_count / active_members) * 100 if active_members > 0 else 0.0
    progress = MappingProxyType(
        {
            "totalVotes": vote_count,
            "activeMembers": active_members,
            "remainingUsers": max(0, active_members - vote_count),
            "percentage": round(percentage, 1),
        }
    )
    return _new_record(
        EventType.VOTE_UPDATE,
        room_id,
        {
            "userId": user_id,
            "mediaId": candidate_id,
            "voteType": vote_type.value,
            "progress": progress,
        },
    )


def build_match_found_event(
    room_id: UUID, candidate_id: str, title: str, participants: list[str]
) -> EventRecord:
    """Build a MATCH_FOUND event for the winning candidate."""
    return _new_record(
        EventType.MATCH_FOUND,
        room_id,
        {
            "matchId": f"match_{room_id}_{candidate_id}",
            "mediaId": candidate_id,
            "mediaTitle": title,
            "participants": tuple(participants),
            "consensusType": "UNANIMOUS",
        },
    )


def build_member_update_event(
    room_id: UUID, user_id: str, action: MemberAction, active_members: int
) -> EventRecord:
    """Build a MEMBER_UPDATE event for a join or leave."""
    return _new_record(
        EventType.MEMBER_UPDATE,
        room_id,
        {
            "userId": user_id,
            "action": action.value,
            "memberCount": active_members,
        },
    )


@dataclass
class EventPublisher:
    """Hands events to the notifier without waiting on or retrying delivery."""

    notifier: EventNotifier
    membership_service: MembershipService

    def publish(self, record: EventRecord, actor_id: str | None = None) -> bool:
        """Publish a room event and return whether it was handed off.

        When ``actor_id`` is given the event is dropped unless the actor is an
        active member of the room.
        """
        if actor_id is not None and not self.membership_service.is_active_member(
            record.room_id, actor_id
        ):
            _logger.warning(
                "Event rejected for non-member: type=%s room=%s actor=%s",
                record.event_type.value,
                record.room_id,
                actor_id,
            )
            return False
        try:
            self.notifier.publish(record.room_id, record)
        except Exception:
            _logger.exception(
                "Event delivery failed: type=%s room=%s id=%s",
                record.event_type.value,
                record.room_id,
                record.id,
            )
            return False
        return True
