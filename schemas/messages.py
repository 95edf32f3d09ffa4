from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class Role(str, Enum):
    THERAPIST = "therapist"
    CLIENT = "client"


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# Inbound

class JoinMessage(WireModel):
    type: Literal["join"]
    session_id: str = Field(alias="sessionId", min_length=1)
    user_id: str = Field(alias="userId", min_length=1)
    role: Role


class LeaveMessage(WireModel):
    type: Literal["leave"]
    session_id: str = Field(alias="sessionId", min_length=1)
    role: Role
    user_id: Optional[str] = Field(default=None, alias="userId")


class RelayMessage(WireModel):
    session_id: str = Field(alias="sessionId", min_length=1)
    data: Any

    @field_validator("data")
    @classmethod
    def data_not_null(cls, value):
        if value is None:
            raise ValueError("data must not be null")
        return value


class PartUpdateMessage(RelayMessage):
    type: Literal["part_update"]


class PartDeleteData(WireModel):
    part_id: Union[str, int] = Field(alias="partId")


class PartDeleteMessage(RelayMessage):
    type: Literal["part_delete"]
    data: PartDeleteData


class ProtocolUpdateMessage(RelayMessage):
    type: Literal["protocol_update"]


class ChatMessage(RelayMessage):
    type: Literal["message"]


class NoteUpdateMessage(RelayMessage):
    type: Literal["note_update"]


class CursorMoveMessage(RelayMessage):
    type: Literal["cursor_move"]


INBOUND_MESSAGE_TYPES = frozenset({
    "join",
    "leave",
    "part_update",
    "part_delete",
    "protocol_update",
    "message",
    "note_update",
    "cursor_move",
})


InboundMessage = Annotated[
    Union[
        JoinMessage,
        LeaveMessage,
        PartUpdateMessage,
        PartDeleteMessage,
        ProtocolUpdateMessage,
        ChatMessage,
        NoteUpdateMessage,
        CursorMoveMessage,
    ],
    Field(discriminator="type"),
]

inbound_adapter = TypeAdapter(InboundMessage)

# Outbound

class ErrorMessage(WireModel):
    type: Literal["error"] = "error"
    message: str


class ParticipantsSummary(WireModel):
    therapist: bool
    client: bool


class ParticipantJoined(WireModel):
    type: Literal["participant_joined"] = "participant_joined"
    role: Role
    user_id: str = Field(alias="userId")
    participants: ParticipantsSummary


class ParticipantLeft(WireModel):
    type: Literal["participant_left"] = "participant_left"
    role: Role


class PartUpdated(WireModel):
    type: Literal["part_updated"] = "part_updated"
    part: Any


class PartDeleted(WireModel):
    type: Literal["part_deleted"] = "part_deleted"
    part_id: Union[str, int] = Field(alias="partId")


class ProtocolUpdated(WireModel):
    type: Literal["protocol_updated"] = "protocol_updated"
    protocol: Any


class NewMessage(WireModel):
    type: Literal["new_message"] = "new_message"
    message: Any


class NoteUpdated(WireModel):
    type: Literal["note_updated"] = "note_updated"
    note: Any


class CursorMoved(WireModel):
    type: Literal["cursor_moved"] = "cursor_moved"
    cursor: Any
