"""
Message Router for the collaborative-session relay.
Parses inbound frames, validates them per message type and dispatches to
the handler for that type.
"""
import json

from pydantic import ValidationError

from authorization import AuthorizationGate
from broadcaster import RoomBroadcaster, send_to
from logging_config import get_logger
from rooms import RoomRegistry
from schemas.messages import (
    INBOUND_MESSAGE_TYPES,
    ChatMessage,
    CursorMoved,
    CursorMoveMessage,
    ErrorMessage,
    JoinMessage,
    LeaveMessage,
    NewMessage,
    NoteUpdated,
    NoteUpdateMessage,
    ParticipantJoined,
    ParticipantLeft,
    ParticipantsSummary,
    PartDeleted,
    PartDeleteMessage,
    PartUpdated,
    PartUpdateMessage,
    ProtocolUpdated,
    ProtocolUpdateMessage,
    inbound_adapter,
)

logger = get_logger(__name__)


class MessageRouter:
    """
    Routes each inbound message to its handler.

    Join and leave drive the per-room slot state machine; the payload types
    are forwarded to the other occupant of the room, never back to the sender.
    """

    def __init__(self, registry: RoomRegistry, gate: AuthorizationGate, broadcaster: RoomBroadcaster):
        self.registry = registry
        self.gate = gate
        self.broadcaster = broadcaster
        self.message_handlers = {
            'join': self._handle_join,
            'leave': self._handle_leave,
            'part_update': self._handle_part_update,
            'part_delete': self._handle_part_delete,
            'protocol_update': self._handle_protocol_update,
            'message': self._handle_chat_message,
            'note_update': self._handle_note_update,
            'cursor_move': self._handle_cursor_move,
        }

    async def handle_raw(self, connection, raw: str):
        """Handle one text frame. Never raises; failures are logged and the frame dropped."""
        try:
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError as e:
                logger.warning(f"Dropping malformed JSON frame: {e}")
                return

            if not isinstance(payload, dict):
                logger.warning(f"Dropping non-object frame of type {type(payload).__name__}")
                return

            message_type = payload.get('type')
            if message_type not in INBOUND_MESSAGE_TYPES:
                logger.debug(f"Ignoring unknown message type: {message_type!r}")
                return

            try:
                message = inbound_adapter.validate_python(payload)
            except ValidationError as e:
                logger.warning(f"Dropping invalid {message_type} message: {e.error_count()} validation error(s)")
                return

            await self.message_handlers[message_type](connection, message)
        except Exception as e:
            logger.error(f"Error handling inbound message: {e}", exc_info=True)

    async def _handle_join(self, connection, message: JoinMessage):
        decision = await self.gate.authorize_join(message.session_id, message.user_id, message.role)
        if not decision.authorized:
            await send_to(connection, ErrorMessage(message=decision.reason))
            return

        # occupy() runs without an intervening await
        room = self.registry.occupy(message.session_id, message.role, connection, message.user_id)
        logger.info(f"User {message.user_id} ({message.role.value}) joined session {message.session_id}")

        await self.broadcaster.broadcast(message.session_id, ParticipantJoined(
            role=message.role,
            user_id=message.user_id,
            participants=ParticipantsSummary(**room.participants_summary()),
        ))

    async def _handle_leave(self, connection, message: LeaveMessage):
        if not self.registry.vacate(message.session_id, message.role, connection):
            logger.debug(f"Ignoring leave for session {message.session_id} as {message.role.value}: slot not held")
            return

        logger.info(f"{message.role.value} left session {message.session_id}")
        await self.broadcaster.broadcast(message.session_id, ParticipantLeft(role=message.role), exclude=connection)
        self.registry.remove_if_empty(message.session_id)

    async def _relay(self, connection, session_id: str, outbound):
        room = self.registry.get(session_id)
        if room is None or not room.holds(connection):
            logger.warning(f"Dropping {outbound.type} for session {session_id}: sender does not occupy a slot")
            return
        await self.broadcaster.broadcast(session_id, outbound, exclude=connection)

    async def _handle_part_update(self, connection, message: PartUpdateMessage):
        await self._relay(connection, message.session_id, PartUpdated(part=message.data))

    async def _handle_part_delete(self, connection, message: PartDeleteMessage):
        await self._relay(connection, message.session_id, PartDeleted(part_id=message.data.part_id))

    async def _handle_protocol_update(self, connection, message: ProtocolUpdateMessage):
        await self._relay(connection, message.session_id, ProtocolUpdated(protocol=message.data))

    async def _handle_chat_message(self, connection, message: ChatMessage):
        await self._relay(connection, message.session_id, NewMessage(message=message.data))

    async def _handle_note_update(self, connection, message: NoteUpdateMessage):
        await self._relay(connection, message.session_id, NoteUpdated(note=message.data))

    async def _handle_cursor_move(self, connection, message: CursorMoveMessage):
        await self._relay(connection, message.session_id, CursorMoved(cursor=message.data))
