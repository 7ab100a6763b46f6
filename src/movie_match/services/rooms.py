"""Room lifecycle: create, join, leave, start and history."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from movie_match.domain.errors import (
    InvalidStateError,
    NotFoundError,
    TransientStoreError,
    UnauthorizedError,
)
from movie_match.domain.events import MemberAction
from movie_match.domain.rooms import MemberRole, RoomRecord, RoomStatus
from movie_match.services.events import EventPublisher, build_member_update_event
from movie_match.services.membership import MembershipService

_logger = logging.getLogger(__name__)


class RoomRepository(Protocol):
    """Persistence interface for rooms."""

    def create_room(self, host_id: str) -> RoomRecord:
        """Create an OPEN room and return it."""

    def get_room(self, room_id: UUID) -> RoomRecord | None:
        """Return a room by id, if present."""

    def mark_matched(self, room_id: UUID, candidate_id: str) -> bool:
        """Set MATCHED + result only while the room is OPEN or ACTIVE.

        Returns True when this call applied the update.
        """

    def transition_status(
        self, room_id: UUID, from_statuses: set[RoomStatus], to_status: RoomStatus
    ) -> bool:
        """Conditionally move a room between non-matched states."""

    def touch(self, room_id: UUID) -> None:
        """Refresh the room's updated_at timestamp."""


@dataclass
class RoomService:
    """Application service for room lifecycle actions."""

    repository: RoomRepository
    membership_service: MembershipService
    event_publisher: EventPublisher

    def create_room(self, host_id: str) -> RoomRecord:
        """Create a room and register the host as its first member."""
        room = self.repository.create_room(host_id)
        self.membership_service.join(room.id, host_id, role=MemberRole.HOST)
        _logger.info("Room created: room=%s host=%s", room.id, host_id)
        return room

    def get_room(self, room_id: UUID) -> RoomRecord:
        room = self.repository.get_room(room_id)
        if room is None:
            raise NotFoundError(f"Room {room_id} not found")
        return room

    def join_room(self, room_id: UUID, user_id: str) -> RoomRecord:
        """Join an OPEN room, reactivating a previous membership."""
        room = self.get_room(room_id)
        if room.status != RoomStatus.OPEN:
            raise InvalidStateError(
                f"Room {room_id} is not accepting members (status={room.status})"
            )
        self.membership_service.join(room_id, user_id)
        self.repository.touch(room_id)
        self._publish_member_update(room_id, user_id, MemberAction.JOINED)
        return self.get_room(room_id)

    def leave_room(self, room_id: UUID, user_id: str) -> RoomRecord:
        """Mark the user's membership inactive."""
        self.get_room(room_id)
        self.membership_service.leave(room_id, user_id)
        self.repository.touch(room_id)
        self._publish_member_update(room_id, user_id, MemberAction.LEFT)
        return self.get_room(room_id)

    def start_room(self, room_id: UUID, user_id: str) -> RoomRecord:
        """Move an OPEN room to ACTIVE; host only."""
        room = self.get_room(room_id)
        if room.host_id != user_id:
            raise UnauthorizedError(f"Only the host can start room {room_id}")
        applied = self.repository.transition_status(
            room_id, {RoomStatus.OPEN}, RoomStatus.ACTIVE
        )
        if not applied:
            current = self.get_room(room_id)
            raise InvalidStateError(
                f"Room {room_id} cannot be started (status={current.status})"
            )
        return self.get_room(room_id)

    def list_history(self, user_id: str, limit: int = 50) -> list[RoomRecord]:
        """Return rooms the user has belonged to, most recent first."""
        rooms: list[RoomRecord] = []
        for membership in self.membership_service.list_user_memberships(
            user_id, limit
        ):
            try:
                room = self.repository.get_room(membership.room_id)
            except TransientStoreError:
                _logger.warning(
                    "Skipping room in history: room=%s", membership.room_id
                )
                continue
            if room is not None:
                rooms.append(room)
        return rooms

    def _publish_member_update(
        self, room_id: UUID, user_id: str, action: MemberAction
    ) -> None:
        active_members = self.membership_service.count_active_members(room_id)
        self.event_publisher.publish(
            build_member_update_event(room_id, user_id, action, active_members)
        )
