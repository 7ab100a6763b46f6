"""Match detection: compares a tally against the live active membership."""

import logging
from dataclasses import dataclass
from uuid import UUID

from movie_match.domain.errors import NotFoundError
from movie_match.domain.rooms import RoomStatus
from movie_match.domain.votes import ConsensusResult
from movie_match.services.membership import MembershipService
from movie_match.services.rooms import RoomRepository

_logger = logging.getLogger(__name__)


@dataclass
class ConsensusService:
    """Decides whether a candidate has reached unanimous consensus."""

    room_repository: RoomRepository
    membership_service: MembershipService

    def evaluate_consensus(
        self, room_id: UUID, candidate_id: str, current_vote_count: int
    ) -> ConsensusResult:
        """Transition the room to MATCHED when every active member agrees.

        The transition is a single conditional update, so when two
        candidates cross the threshold together only one of them wins; the
        other call sees the already-matched room and is not an error.
        """
        active_members = self.membership_service.count_active_members(room_id)
        transitioned = False
        if active_members > 0 and current_vote_count >= active_members:
            transitioned = self.room_repository.mark_matched(room_id, candidate_id)
            if transitioned:
                _logger.info(
                    "Match found: room=%s candidate=%s votes=%s members=%s",
                    room_id,
                    candidate_id,
                    current_vote_count,
                    active_members,
                )

        room = self.room_repository.get_room(room_id)
        if room is None:
            raise NotFoundError(f"Room {room_id} not found")
        matched = (
            room.status == RoomStatus.MATCHED
            and room.result_candidate_id == candidate_id
        )
        return ConsensusResult(
            matched=matched,
            room=room,
            active_members=active_members,
            transitioned=transitioned,
        )
