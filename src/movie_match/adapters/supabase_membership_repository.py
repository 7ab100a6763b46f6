"""Supabase-backed room membership repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from movie_match.adapters.supabase_errors import parse_timestamp, store_errors
from movie_match.domain.errors import TransientStoreError
from movie_match.domain.rooms import MemberRole, MembershipRecord
from movie_match.services.membership import MembershipRepository

_COLUMNS = "room_id, user_id, role, is_active, joined_at"


@dataclass
class SupabaseMembershipRepository(MembershipRepository):
    """Supabase implementation for room memberships.

    Rows are keyed on (room_id, user_id).
    """

    client: Client

    def get_membership(self, room_id: UUID, user_id: str) -> MembershipRecord | None:
        """Return the membership row for (room, user), if present."""
        with store_errors("get_membership"):
            response = (
                self.client.table("room_members")
                .select(_COLUMNS)
                .eq("room_id", str(room_id))
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
        if not response.data:
            return None
        return _membership_from_row(response.data[0])

    def upsert_membership(
        self, room_id: UUID, user_id: str, role: MemberRole, joined_at: datetime
    ) -> MembershipRecord:
        """Create or reactivate the (room, user) row."""
        with store_errors("upsert_membership"):
            response = (
                self.client.table("room_members")
                .upsert(
                    {
                        "room_id": str(room_id),
                        "user_id": user_id,
                        "role": role.value,
                        "is_active": True,
                        "joined_at": joined_at.isoformat(),
                    },
                    on_conflict="room_id,user_id",
                )
                .execute()
            )
        if not response.data:
            raise TransientStoreError("Failed to upsert membership")
        return _membership_from_row(response.data[0])

    def set_active(self, room_id: UUID, user_id: str, is_active: bool) -> None:
        """Flip the active flag of a membership."""
        with store_errors("set_active"):
            self.client.table("room_members").update({"is_active": is_active}).eq(
                "room_id", str(room_id)
            ).eq("user_id", user_id).execute()

    def count_active_members(self, room_id: UUID) -> int:
        """Count active members with an exact count query."""
        with store_errors("count_active_members"):
            response = (
                self.client.table("room_members")
                .select("user_id", count="exact")
                .eq("room_id", str(room_id))
                .eq("is_active", True)
                .execute()
            )
        if response.count is not None:
            return int(response.count)
        return len(response.data or [])

    def list_active_members(self, room_id: UUID) -> list[MembershipRecord]:
        """Return active members of a room."""
        with store_errors("list_active_members"):
            response = (
                self.client.table("room_members")
                .select(_COLUMNS)
                .eq("room_id", str(room_id))
                .eq("is_active", True)
                .execute()
            )
        return [_membership_from_row(row) for row in response.data or []]

    def list_user_memberships(
        self, user_id: str, limit: int
    ) -> list[MembershipRecord]:
        """Return a user's memberships, most recently joined first."""
        with store_errors("list_user_memberships"):
            response = (
                self.client.table("room_members")
                .select(_COLUMNS)
                .eq("user_id", user_id)
                .order("joined_at", desc=True)
                .limit(limit)
                .execute()
            )
        return [_membership_from_row(row) for row in response.data or []]


def _membership_from_row(row: dict[str, object]) -> MembershipRecord:
    return MembershipRecord(
        room_id=UUID(str(row["room_id"])),
        user_id=str(row["user_id"]),
        role=MemberRole(row["role"]),
        is_active=bool(row["is_active"]),
        joined_at=parse_timestamp(str(row["joined_at"])),
    )
