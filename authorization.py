from dataclasses import dataclass
from typing import Optional

from logging_config import get_logger
from schemas.messages import Role

logger = get_logger(__name__)

SESSION_NOT_FOUND = "Session not found"
NOT_A_PARTICIPANT = "Unauthorized: You are not a participant in this session"
AUTHORIZATION_FAILED = "Authorization failed"


@dataclass(frozen=True)
class JoinDecision:
    authorized: bool
    reason: Optional[str] = None


class AuthorizationGate:
    """Checks a claimed (user id, role) against the session's recorded participants.

    Runs on every join, reconnects included. Any failure of the session
    lookup service is treated as a rejection.
    """

    def __init__(self, session_lookup):
        self.session_lookup = session_lookup

    async def authorize_join(self, session_id: str, user_id: str, role: Role) -> JoinDecision:
        try:
            session = await self.session_lookup.get_session_by_id(session_id)
        except Exception as e:
            logger.error(f"Session lookup failed for session {session_id}: {e}", exc_info=True)
            return JoinDecision(authorized=False, reason=AUTHORIZATION_FAILED)

        if session is None:
            logger.info(f"Join rejected: session {session_id} not found")
            return JoinDecision(authorized=False, reason=SESSION_NOT_FOUND)

        expected_user_id = session.therapist_id if role == Role.THERAPIST else session.client_id
        if user_id != expected_user_id:
            logger.warning(
                f"Unauthorized join attempt: user {user_id} tried to join session {session_id} as {role.value}"
            )
            return JoinDecision(authorized=False, reason=NOT_A_PARTICIPANT)

        return JoinDecision(authorized=True)
