from pydantic import BaseModel
from typing import Optional


class ActiveRoomsResponse(BaseModel):
    session_ids: list[str]
    count: int

class RoomParticipantsResponse(BaseModel):
    session_id: str
    therapist_id: Optional[str]
    client_id: Optional[str]

class HealthResponse(BaseModel):
    status: str
    active_rooms: int
    session_store: bool
