"""The single logical vote operation: validate, count, detect, notify."""

import logging
from dataclasses import dataclass
from uuid import UUID

from movie_match.domain.errors import NotFoundError, TransientStoreError
from movie_match.domain.votes import ConsensusResult, VoteOutcome, VoteType
from movie_match.services.catalog import CatalogService
from movie_match.services.consensus import ConsensusService
from movie_match.services.events import (
    EventPublisher,
    build_match_found_event,
    build_vote_update_event,
)
from movie_match.services.membership import MembershipService
from movie_match.services.rooms import RoomRepository
from movie_match.services.votes import VoteService

_logger = logging.getLogger(__name__)


@dataclass
class VotingService:
    """Runs a vote end to end and reports count and match together."""

    vote_service: VoteService
    consensus_service: ConsensusService
    membership_service: MembershipService
    room_repository: RoomRepository
    catalog_service: CatalogService
    event_publisher: EventPublisher

    async def vote(
        self,
        room_id: UUID,
        user_id: str,
        candidate_id: str,
        vote_type: VoteType = VoteType.LIKE,
    ) -> VoteOutcome:
        """Cast a vote and, for LIKEs, evaluate consensus on the new count."""
        count = self.vote_service.cast_vote(room_id, user_id, candidate_id, vote_type)
        if vote_type is VoteType.LIKE:
            result = self.consensus_service.evaluate_consensus(
                room_id, candidate_id, count
            )
        else:
            result = self._current_state(room_id, candidate_id)

        self.event_publisher.publish(
            build_vote_update_event(
                room_id,
                user_id,
                candidate_id,
                vote_type,
                count,
                result.active_members,
            ),
            actor_id=user_id,
        )
        if result.transitioned:
            await self._publish_match(room_id, candidate_id)

        return VoteOutcome(
            room=result.room,
            candidate_id=candidate_id,
            vote_type=vote_type,
            vote_count=count,
            matched=result.matched,
        )

    def _current_state(self, room_id: UUID, candidate_id: str) -> ConsensusResult:
        room = self.room_repository.get_room(room_id)
        if room is None:
            raise NotFoundError(f"Room {room_id} not found")
        return ConsensusResult(
            matched=room.result_candidate_id == candidate_id,
            room=room,
            active_members=self.membership_service.count_active_members(room_id),
        )

    async def _publish_match(self, room_id: UUID, candidate_id: str) -> None:
        """Publish MATCH_FOUND for a committed transition.

        The room is already MATCHED here, so enrichment failures degrade the
        event instead of failing the vote.
        """
        try:
            title = (await self.catalog_service.get_candidate(candidate_id)).title
        except Exception:
            _logger.warning(
                "Match title unavailable: room=%s candidate=%s",
                room_id,
                candidate_id,
                exc_info=True,
            )
            title = f"Movie {candidate_id}"
        try:
            participants = [
                member.user_id
                for member in self.membership_service.list_active_members(room_id)
            ]
        except TransientStoreError:
            _logger.warning(
                "Match participants unavailable: room=%s", room_id, exc_info=True
            )
            participants = []
        self.event_publisher.publish(
            build_match_found_event(room_id, candidate_id, title, participants)
        )
        _logger.info(
            "Match published: room=%s candidate=%s title=%s",
            room_id,
            candidate_id,
            title,
        )
