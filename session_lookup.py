"""Session lookup services consulted by the authorization gate.

The relay only ever asks one question of persistent storage: who are the
recorded therapist and client for a session id.
"""
import asyncio
from dataclasses import dataclass
from typing import Dict, Optional

from backend import RedisBackend
from constants import SESSION_LOOKUP_TIMEOUT
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionRecord:
    session_id: str
    therapist_id: str
    client_id: str


class InMemorySessionLookup:
    """Dictionary-backed session store for local development and tests."""

    def __init__(self, sessions: Optional[Dict[str, SessionRecord]] = None):
        self.sessions: Dict[str, SessionRecord] = dict(sessions or {})

    def add_session(self, session_id: str, therapist_id: str, client_id: str) -> SessionRecord:
        record = SessionRecord(session_id=session_id, therapist_id=therapist_id, client_id=client_id)
        self.sessions[session_id] = record
        return record

    def remove_session(self, session_id: str):
        self.sessions.pop(session_id, None)

    async def get_session_by_id(self, session_id: str) -> Optional[SessionRecord]:
        return self.sessions.get(session_id)

    async def is_available(self) -> bool:
        return True


class RedisSessionLookup:
    """Session store backed by Redis hashes.

    redis-py is blocking, so each lookup runs in the default executor and is
    bounded by ``timeout`` seconds. Timeouts and Redis errors propagate.
    """

    def __init__(self, backend: Optional[RedisBackend] = None, timeout: float = SESSION_LOOKUP_TIMEOUT):
        self.backend = backend or RedisBackend()
        self.timeout = timeout

    async def get_session_by_id(self, session_id: str) -> Optional[SessionRecord]:
        loop = asyncio.get_running_loop()
        session = await asyncio.wait_for(
            loop.run_in_executor(None, self.backend.get_session, session_id),
            timeout=self.timeout,
        )
        if session is None:
            return None
        return SessionRecord(
            session_id=session_id,
            therapist_id=session["therapist_id"],
            client_id=session["client_id"],
        )

    async def is_available(self) -> bool:
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(None, self.backend.ping),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Session store ping timed out after {self.timeout}s")
            return False
