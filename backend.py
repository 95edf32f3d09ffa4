import redis
from constants import REDIS_HOST, REDIS_PORT, REDIS_PASSWORD, REDIS_DB
from redis_keys import REDIS_SESSION_KEY
from logging_config import get_logger

logger = get_logger(__name__)


class RedisBackend:
    """Read side of the session store: therapist/client pairings keyed by session id."""

    def __init__(self, redis_client: redis.Redis = None):
        if redis_client is None:
            redis_client = redis.Redis(
                host=REDIS_HOST,
                port=REDIS_PORT,
                password=REDIS_PASSWORD,
                db=REDIS_DB,
                decode_responses=True,
            )
        self.redis_client = redis_client
        logger.info(f"Initializing RedisBackend for session store at {REDIS_HOST}:{REDIS_PORT}")

    def get_session(self, session_id: str):
        """Return {"therapist_id", "client_id"} for a session, or None if unknown."""
        logger.debug(f"Fetching session {session_id}")
        key = REDIS_SESSION_KEY.format(session_id=session_id)
        session_data = self.redis_client.hgetall(key)
        if not session_data:
            logger.debug(f"Session {session_id} not found in Redis")
            return None

        therapist_id = session_data.get("therapist_id")
        client_id = session_data.get("client_id")
        if not therapist_id or not client_id:
            logger.warning(f"Session {session_id} is missing participant ids, treating as not found")
            return None

        return {"therapist_id": therapist_id, "client_id": client_id}

    def ping(self) -> bool:
        try:
            return bool(self.redis_client.ping())
        except redis.RedisError as e:
            logger.error(f"Redis ping failed for {REDIS_HOST}:{REDIS_PORT}: {e}")
            return False
