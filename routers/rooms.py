from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import ActiveRoomsResponse, RoomParticipantsResponse
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("/", response_model=ActiveRoomsResponse)
async def list_active_rooms(request: Request):
    """Session ids that currently have at least one occupied slot."""
    session_ids = request.app.state.registry.active_session_ids()
    logger.debug(f"Active rooms requested: {len(session_ids)} active")
    return ActiveRoomsResponse(session_ids=session_ids, count=len(session_ids))


@rooms_router.get("/{session_id}", response_model=RoomParticipantsResponse)
async def get_room_participants(session_id: str, request: Request):
    """
    Get the user ids currently occupying a room.

    Returns:
    - session_id: Session the room belongs to
    - therapist_id: User id in the therapist slot, or null if empty
    - client_id: User id in the client slot, or null if empty
    """
    participants = request.app.state.registry.participants(session_id)
    if participants is None:
        logger.info(f"Room participants requested for inactive session {session_id}")
        raise HTTPException(status_code=404, detail="Room not found")

    return RoomParticipantsResponse(session_id=session_id, **participants)
