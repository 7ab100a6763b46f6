"""Room membership checks and changes."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from movie_match.domain.errors import (
    NotFoundError,
    TransientStoreError,
    UnauthorizedError,
)
from movie_match.domain.rooms import MemberRole, MembershipRecord

_logger = logging.getLogger(__name__)


class MembershipRepository(Protocol):
    """Persistence interface for room memberships."""

    def get_membership(self, room_id: UUID, user_id: str) -> MembershipRecord | None:
        """Return the membership row for (room, user), if present."""

    def upsert_membership(
        self, room_id: UUID, user_id: str, role: MemberRole, joined_at: datetime
    ) -> MembershipRecord:
        """Create or reactivate the single row for (room, user)."""

    def set_active(self, room_id: UUID, user_id: str, is_active: bool) -> None:
        """Flip the active flag of an existing membership."""

    def count_active_members(self, room_id: UUID) -> int:
        """Count active members of a room."""

    def list_active_members(self, room_id: UUID) -> list[MembershipRecord]:
        """Return active members of a room."""

    def list_user_memberships(
        self, user_id: str, limit: int
    ) -> list[MembershipRecord]:
        """Return a user's memberships, most recently joined first."""


@dataclass
class MembershipService:
    """Validates and mutates room membership."""

    repository: MembershipRepository

    def is_active_member(self, room_id: UUID, user_id: str) -> bool:
        """Return True only for an existing, active membership.

        Store failures count as "not a member".
        """
        try:
            membership = self.repository.get_membership(room_id, user_id)
        except TransientStoreError:
            _logger.warning(
                "Membership lookup failed, denying: room=%s user=%s",
                room_id,
                user_id,
                exc_info=True,
            )
            return False
        return membership is not None and membership.is_active

    def require_active_member(self, room_id: UUID, user_id: str) -> None:
        """Raise UnauthorizedError unless the user is an active member."""
        if not self.is_active_member(room_id, user_id):
            raise UnauthorizedError(
                f"User {user_id} is not an active member of room {room_id}"
            )

    def count_active_members(self, room_id: UUID) -> int:
        return self.repository.count_active_members(room_id)

    def list_active_members(self, room_id: UUID) -> list[MembershipRecord]:
        return self.repository.list_active_members(room_id)

    def join(
        self, room_id: UUID, user_id: str, role: MemberRole = MemberRole.MEMBER
    ) -> MembershipRecord:
        """Reactivate an existing membership or add a new one."""
        existing = self.repository.get_membership(room_id, user_id)
        if existing is not None:
            role = existing.role
        return self.repository.upsert_membership(
            room_id, user_id, role=role, joined_at=datetime.now(tz=UTC)
        )

    def leave(self, room_id: UUID, user_id: str) -> None:
        """Mark a membership inactive."""
        existing = self.repository.get_membership(room_id, user_id)
        if existing is None:
            raise NotFoundError(f"User {user_id} has no membership in room {room_id}")
        if existing.is_active:
            self.repository.set_active(room_id, user_id, is_active=False)

    def list_user_memberships(
        self, user_id: str, limit: int = 50
    ) -> list[MembershipRecord]:
        return self.repository.list_user_memberships(user_id, limit)
