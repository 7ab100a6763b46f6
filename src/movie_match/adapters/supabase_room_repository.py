"""Supabase-backed room repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from movie_match.adapters.supabase_errors import parse_timestamp, store_errors
from movie_match.domain.errors import TransientStoreError
from movie_match.domain.rooms import VOTABLE_STATUSES, RoomRecord, RoomStatus
from movie_match.services.rooms import RoomRepository

_COLUMNS = "id, status, host_id, result_candidate_id, created_at, updated_at"


@dataclass
class SupabaseRoomRepository(RoomRepository):
    """Supabase implementation for rooms.

    Status changes are single ``update ... where status in (...)`` statements,
    so concurrent writers race on the database rather than in this process.
    """

    client: Client

    def create_room(self, host_id: str) -> RoomRecord:
        """Create an OPEN room row and return it."""
        now = datetime.now(tz=UTC).isoformat()
        with store_errors("create_room"):
            response = (
                self.client.table("rooms")
                .insert(
                    {
                        "status": RoomStatus.OPEN.value,
                        "host_id": host_id,
                        "created_at": now,
                        "updated_at": now,
                    }
                )
                .execute()
            )
        if not response.data:
            raise TransientStoreError("Failed to create room")
        return _room_from_row(response.data[0])

    def get_room(self, room_id: UUID) -> RoomRecord | None:
        """Return a room by id, if present."""
        with store_errors("get_room"):
            response = (
                self.client.table("rooms")
                .select(_COLUMNS)
                .eq("id", str(room_id))
                .limit(1)
                .execute()
            )
        if not response.data:
            return None
        return _room_from_row(response.data[0])

    def mark_matched(self, room_id: UUID, candidate_id: str) -> bool:
        """Set MATCHED only while the room is still votable."""
        with store_errors("mark_matched"):
            response = (
                self.client.table("rooms")
                .update(
                    {
                        "status": RoomStatus.MATCHED.value,
                        "result_candidate_id": candidate_id,
                        "updated_at": datetime.now(tz=UTC).isoformat(),
                    }
                )
                .eq("id", str(room_id))
                .in_("status", sorted(status.value for status in VOTABLE_STATUSES))
                .execute()
            )
        return bool(response.data)

    def transition_status(
        self, room_id: UUID, from_statuses: set[RoomStatus], to_status: RoomStatus
    ) -> bool:
        """Move a room to ``to_status`` only from one of ``from_statuses``."""
        with store_errors("transition_status"):
            response = (
                self.client.table("rooms")
                .update(
                    {
                        "status": to_status.value,
                        "updated_at": datetime.now(tz=UTC).isoformat(),
                    }
                )
                .eq("id", str(room_id))
                .in_("status", sorted(status.value for status in from_statuses))
                .execute()
            )
        return bool(response.data)

    def touch(self, room_id: UUID) -> None:
        """Update the room's updated_at timestamp."""
        with store_errors("touch_room"):
            self.client.table("rooms").update(
                {"updated_at": datetime.now(tz=UTC).isoformat()}
            ).eq("id", str(room_id)).execute()


def _room_from_row(row: dict[str, object]) -> RoomRecord:
    return RoomRecord(
        id=UUID(str(row["id"])),
        status=RoomStatus(row["status"]),
        host_id=str(row["host_id"]),
        result_candidate_id=row.get("result_candidate_id"),
        created_at=parse_timestamp(str(row["created_at"])),
        updated_at=parse_timestamp(str(row["updated_at"])),
    )
