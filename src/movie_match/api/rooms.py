"""Room and voting endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from movie_match.api.models import (
    RoomListResponse,
    RoomResponse,
    VoteRequest,
    VoteResponse,
)
from movie_match.containers import AppContainer

router = APIRouter(tags=["rooms"])


async def require_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Return the caller's already-authenticated user id."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return x_user_id.strip()


@router.post("/rooms", status_code=status.HTTP_201_CREATED)
async def create_room(
    request: Request, user_id: str = Depends(require_user_id)
) -> RoomResponse:
    """Create a room hosted by the caller."""
    container: AppContainer = request.app.state.container
    room = container.room_service.create_room(user_id)
    return RoomResponse.from_record(room)


@router.get("/rooms/{room_id}", dependencies=[Depends(require_user_id)])
async def get_room(room_id: UUID, request: Request) -> RoomResponse:
    """Return the current room state."""
    container: AppContainer = request.app.state.container
    return RoomResponse.from_record(container.room_service.get_room(room_id))


@router.post("/rooms/{room_id}/join")
async def join_room(
    room_id: UUID, request: Request, user_id: str = Depends(require_user_id)
) -> RoomResponse:
    """Join an open room."""
    container: AppContainer = request.app.state.container
    return RoomResponse.from_record(container.room_service.join_room(room_id, user_id))


@router.post("/rooms/{room_id}/leave")
async def leave_room(
    room_id: UUID, request: Request, user_id: str = Depends(require_user_id)
) -> RoomResponse:
    """Leave a room; the caller stops counting toward consensus."""
    container: AppContainer = request.app.state.container
    return RoomResponse.from_record(
        container.room_service.leave_room(room_id, user_id)
    )


@router.post("/rooms/{room_id}/start")
async def start_room(
    room_id: UUID, request: Request, user_id: str = Depends(require_user_id)
) -> RoomResponse:
    """Move an open room to active voting."""
    container: AppContainer = request.app.state.container
    return RoomResponse.from_record(
        container.room_service.start_room(room_id, user_id)
    )


@router.post("/rooms/{room_id}/votes")
async def vote(
    room_id: UUID,
    body: VoteRequest,
    request: Request,
    user_id: str = Depends(require_user_id),
) -> VoteResponse:
    """Cast a vote and report the tally and match flag."""
    container: AppContainer = request.app.state.container
    outcome = await container.voting_service.vote(
        room_id, user_id, body.movie_id, body.vote_type
    )
    return VoteResponse.from_outcome(outcome)


@router.get("/me/rooms")
async def my_rooms(
    request: Request,
    user_id: str = Depends(require_user_id),
    limit: int = Query(default=50, ge=1, le=100),
) -> RoomListResponse:
    """Return rooms the caller has joined, most recent first."""
    container: AppContainer = request.app.state.container
    rooms = container.room_service.list_history(user_id, limit=limit)
    return RoomListResponse(rooms=[RoomResponse.from_record(room) for room in rooms])
