"""Vote aggregation backed by the store's atomic increment."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from movie_match.domain.errors import (
    InvalidStateError,
    NotFoundError,
    TransientStoreError,
)
from movie_match.domain.votes import VoteType
from movie_match.services.membership import MembershipService
from movie_match.services.rooms import RoomRepository

_logger = logging.getLogger(__name__)


class VoteRepository(Protocol):
    """Persistence interface for vote tallies and ballots."""

    def increment_vote(self, room_id: UUID, candidate_id: str) -> int:
        """Atomically add one LIKE, creating the tally at 1 if absent.

        Returns the post-increment count reported by the store.
        """

    def get_vote_count(self, room_id: UUID, candidate_id: str) -> int:
        """Return the current LIKE count, 0 when no tally exists."""

    def record_ballot(
        self, room_id: UUID, candidate_id: str, user_id: str, vote_type: VoteType
    ) -> bool:
        """Insert a ballot if absent; return False when it already existed."""

    def remove_ballot(self, room_id: UUID, candidate_id: str, user_id: str) -> None:
        """Delete a ballot so the voter can cast it again."""


@dataclass
class VoteService:
    """Validates and applies individual votes."""

    room_repository: RoomRepository
    vote_repository: VoteRepository
    membership_service: MembershipService
    distinct_voters: bool = False

    def cast_vote(
        self,
        room_id: UUID,
        user_id: str,
        candidate_id: str,
        vote_type: VoteType = VoteType.LIKE,
    ) -> int:
        """Apply a vote and return the authoritative LIKE count."""
        room = self.room_repository.get_room(room_id)
        if room is None:
            raise NotFoundError(f"Room {room_id} not found")
        if not room.is_votable:
            raise InvalidStateError(
                f"Room {room_id} is not accepting votes (status={room.status})"
            )
        self.membership_service.require_active_member(room_id, user_id)

        claimed = self.distinct_voters and self.vote_repository.record_ballot(
            room_id, candidate_id, user_id, vote_type
        )
        if self.distinct_voters and not claimed:
            _logger.info(
                "Repeat ballot ignored: room=%s user=%s candidate=%s",
                room_id,
                user_id,
                candidate_id,
            )
            return self.vote_repository.get_vote_count(room_id, candidate_id)

        if vote_type is not VoteType.LIKE:
            return self.vote_repository.get_vote_count(room_id, candidate_id)

        try:
            count = self.vote_repository.increment_vote(room_id, candidate_id)
        except TransientStoreError:
            if claimed:
                self._release_ballot(room_id, candidate_id, user_id)
            raise
        _logger.info(
            "Vote counted: room=%s candidate=%s votes=%s", room_id, candidate_id, count
        )
        return count

    def _release_ballot(self, room_id: UUID, candidate_id: str, user_id: str) -> None:
        # The retry must not find this ballot and be ignored as a repeat.
        try:
            self.vote_repository.remove_ballot(room_id, candidate_id, user_id)
        except TransientStoreError:
            _logger.warning(
                "Ballot release failed: room=%s user=%s candidate=%s",
                room_id,
                user_id,
                candidate_id,
                exc_info=True,
            )
