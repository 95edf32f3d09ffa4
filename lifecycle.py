from broadcaster import RoomBroadcaster
from logging_config import get_logger
from rooms import RoomRegistry
from schemas.messages import ParticipantLeft

logger = get_logger(__name__)


class ConnectionLifecycleManager:
    """Releases every slot a closed connection held and tears down emptied rooms."""

    def __init__(self, registry: RoomRegistry, broadcaster: RoomBroadcaster):
        self.registry = registry
        self.broadcaster = broadcaster

    async def disconnect(self, connection) -> int:
        released = 0
        for session_id, role in self.registry.slots_for(connection):
            if not self.registry.vacate(session_id, role, connection):
                continue
            released += 1
            logger.info(f"{role.value} connection closed, released slot in session {session_id}")
            try:
                await self.broadcaster.broadcast(session_id, ParticipantLeft(role=role), exclude=connection)
            except Exception as e:
                logger.error(f"Error notifying session {session_id} of {role.value} departure: {e}", exc_info=True)
            self.registry.remove_if_empty(session_id)
        return released
