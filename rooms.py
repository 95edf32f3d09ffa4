"""In-memory room state for the collaborative-session relay.

One Room per active session id, holding at most one connection per role.
The registry is the only owner of this state; everything else goes through
its methods so the two-slot invariant stays enforceable.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Tuple

from logging_config import get_logger
from schemas.messages import Role

logger = get_logger(__name__)


@dataclass(eq=False)
class Room:
    session_id: str
    therapist_connection: Any = None
    client_connection: Any = None
    therapist_user_id: Optional[str] = None
    client_user_id: Optional[str] = None

    def connection_for(self, role: Role):
        if role == Role.THERAPIST:
            return self.therapist_connection
        return self.client_connection

    def occupy(self, role: Role, connection, user_id: str):
        if role == Role.THERAPIST:
            self.therapist_connection = connection
            self.therapist_user_id = user_id
        else:
            self.client_connection = connection
            self.client_user_id = user_id

    def clear(self, role: Role):
        if role == Role.THERAPIST:
            self.therapist_connection = None
            self.therapist_user_id = None
        else:
            self.client_connection = None
            self.client_user_id = None

    def occupants(self) -> List[Tuple[Role, Any]]:
        return [
            (role, self.connection_for(role))
            for role in Role
            if self.connection_for(role) is not None
        ]

    def holds(self, connection) -> bool:
        return self.therapist_connection is connection or self.client_connection is connection

    def is_empty(self) -> bool:
        return self.therapist_connection is None and self.client_connection is None

    def participants_summary(self) -> Dict[str, bool]:
        return {
            "therapist": self.therapist_connection is not None,
            "client": self.client_connection is not None,
        }


class RoomRegistry:
    """Maps session id -> Room, plus a connection -> {(session id, role)} side index.

    All mutation happens on the event loop thread between awaits, so no lock
    is taken here.
    """

    def __init__(self):
        self.rooms: Dict[str, Room] = {}
        # keyed by id(): Starlette WebSockets are Mappings and not hashable
        self.connection_slots: Dict[int, Set[Tuple[str, Role]]] = {}

    def get(self, session_id: str) -> Optional[Room]:
        return self.rooms.get(session_id)

    def get_or_create(self, session_id: str) -> Room:
        room = self.rooms.get(session_id)
        if room is None:
            room = Room(session_id=session_id)
            self.rooms[session_id] = room
            logger.info(f"Created room for session {session_id} (active rooms: {len(self.rooms)})")
        return room

    def remove_if_empty(self, session_id: str) -> bool:
        room = self.rooms.get(session_id)
        if room is None or not room.is_empty():
            return False
        del self.rooms[session_id]
        logger.info(f"Removed empty room for session {session_id} (active rooms: {len(self.rooms)})")
        return True

    def occupy(self, session_id: str, role: Role, connection, user_id: str) -> Room:
        """Put ``connection`` in the role slot, displacing any previous holder."""
        room = self.get_or_create(session_id)
        previous = room.connection_for(role)
        if previous is not None and previous is not connection:
            self._unindex(previous, session_id, role)
            logger.info(f"Replaced {role.value} connection in session {session_id}")
        room.occupy(role, connection, user_id)
        self.connection_slots.setdefault(id(connection), set()).add((session_id, role))
        return room

    def vacate(self, session_id: str, role: Role, connection) -> bool:
        """Clear the role slot only if ``connection`` currently holds it."""
        room = self.rooms.get(session_id)
        if room is None or room.connection_for(role) is not connection:
            return False
        room.clear(role)
        self._unindex(connection, session_id, role)
        return True

    def slots_for(self, connection) -> List[Tuple[str, Role]]:
        return sorted(self.connection_slots.get(id(connection), ()), key=lambda slot: (slot[0], slot[1].value))

    def active_session_ids(self) -> List[str]:
        return list(self.rooms.keys())

    def participants(self, session_id: str) -> Optional[Dict[str, Optional[str]]]:
        room = self.rooms.get(session_id)
        if room is None:
            return None
        return {
            "therapist_id": room.therapist_user_id,
            "client_id": room.client_user_id,
        }

    def _unindex(self, connection, session_id: str, role: Role):
        slots = self.connection_slots.get(id(connection))
        if not slots:
            return
        slots.discard((session_id, role))
        if not slots:
            del self.connection_slots[id(connection)]
