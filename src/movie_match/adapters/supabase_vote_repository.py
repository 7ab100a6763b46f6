"""Supabase-backed vote tally repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from movie_match.adapters.supabase_errors import store_errors
from movie_match.domain.errors import TransientStoreError
from movie_match.domain.votes import VoteType
from movie_match.services.votes import VoteRepository


@dataclass
class SupabaseVoteRepository(VoteRepository):
    """Supabase implementation for vote tallies.

    Increments go through the ``increment_vote(p_room_id, p_candidate_id)``
    Postgres function, an ``insert ... on conflict do update set votes =
    votes + 1 returning votes`` statement, so the first vote for a candidate
    and concurrent votes never overwrite each other.
    """

    client: Client

    def increment_vote(self, room_id: UUID, candidate_id: str) -> int:
        """Atomically add one vote and return the stored count."""
        with store_errors("increment_vote"):
            response = self.client.rpc(
                "increment_vote",
                {"p_room_id": str(room_id), "p_candidate_id": candidate_id},
            ).execute()
        return _vote_count(response.data)

    def get_vote_count(self, room_id: UUID, candidate_id: str) -> int:
        """Return the current tally, 0 when absent."""
        with store_errors("get_vote_count"):
            response = (
                self.client.table("room_votes")
                .select("votes")
                .eq("room_id", str(room_id))
                .eq("candidate_id", candidate_id)
                .limit(1)
                .execute()
            )
        if not response.data:
            return 0
        return int(response.data[0]["votes"])

    def record_ballot(
        self, room_id: UUID, candidate_id: str, user_id: str, vote_type: VoteType
    ) -> bool:
        """Insert the ballot unless one exists for (room, candidate, user)."""
        with store_errors("record_ballot"):
            response = (
                self.client.table("vote_ballots")
                .upsert(
                    {
                        "room_id": str(room_id),
                        "candidate_id": candidate_id,
                        "user_id": user_id,
                        "vote_type": vote_type.value,
                        "cast_at": datetime.now(tz=UTC).isoformat(),
                    },
                    on_conflict="room_id,candidate_id,user_id",
                    ignore_duplicates=True,
                )
                .execute()
            )
        return bool(response.data)

    def remove_ballot(self, room_id: UUID, candidate_id: str, user_id: str) -> None:
        """Delete the ballot for (room, candidate, user) if present."""
        with store_errors("remove_ballot"):
            (
                self.client.table("vote_ballots")
                .delete()
                .eq("room_id", str(room_id))
                .eq("candidate_id", candidate_id)
                .eq("user_id", user_id)
                .execute()
            )


def _vote_count(data: object) -> int:
    """Read the count from an RPC response (scalar or single row)."""
    if isinstance(data, int):
        return data
    if isinstance(data, list) and data:
        first = data[0]
        if isinstance(first, dict):
            return int(first["votes"])
        return int(first)
    raise TransientStoreError("increment_vote returned no count")
