import asyncio
import json

from pydantic import BaseModel
from starlette.websockets import WebSocketState

from logging_config import get_logger

logger = get_logger(__name__)


def is_open(connection) -> bool:
    return (
        connection.client_state == WebSocketState.CONNECTED
        and connection.application_state == WebSocketState.CONNECTED
    )


def serialize(message: BaseModel) -> str:
    return json.dumps(message.model_dump(mode="json", by_alias=True))


async def send_to(connection, message: BaseModel) -> bool:
    """Send one outbound message to a single connection, skipping it if closed."""
    if not is_open(connection):
        return False
    try:
        await connection.send_text(serialize(message))
        return True
    except Exception as e:
        logger.warning(f"Error sending {message.type} to connection: {e}")
        return False


class RoomBroadcaster:
    """Best-effort fan-out of outbound messages to a room's open occupants."""

    def __init__(self, registry):
        self.registry = registry

    async def broadcast(self, session_id: str, message: BaseModel, exclude=None) -> int:
        room = self.registry.get(session_id)
        if room is None:
            logger.debug(f"No active room for session {session_id}, dropping {message.type}")
            return 0

        payload = serialize(message)
        send_tasks = []
        for role, connection in room.occupants():
            if connection is exclude:
                continue
            if not is_open(connection):
                logger.debug(f"Skipping {role.value} connection in session {session_id}: not open")
                continue
            send_tasks.append(connection.send_text(payload))

        if not send_tasks:
            return 0

        results = await asyncio.gather(*send_tasks, return_exceptions=True)
        delivered = 0
        for result in results:
            if isinstance(result, Exception):
                logger.warning(f"Error sending {message.type} in session {session_id}: {result}")
            else:
                delivered += 1
        logger.debug(f"Broadcasted {message.type} to {delivered} connection(s) in session {session_id}")
        return delivered
