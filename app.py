from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from routers.rooms import rooms_router
from routers.health import health_router
from authorization import AuthorizationGate
from broadcaster import RoomBroadcaster
from lifecycle import ConnectionLifecycleManager
from message_router import MessageRouter
from rooms import RoomRegistry
from session_lookup import RedisSessionLookup
from constants import WS_PATH
from logging_config import get_logger, setup_logging
import os

# Setup logging
log_level = os.getenv("LOG_LEVEL", "INFO")
log_file = os.getenv("LOG_FILE", None)
setup_logging(log_level=log_level, log_file=log_file)
logger = get_logger(__name__)


def create_app(session_lookup=None) -> FastAPI:
    """Build the relay application with its own room registry.

    ``session_lookup`` is any object with an async ``get_session_by_id`` and
    ``is_available``; defaults to the Redis-backed session store.
    """
    if session_lookup is None:
        session_lookup = RedisSessionLookup()

    app = FastAPI()

    # Configure CORS to allow all origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Allow all origins
        allow_credentials=True,
        allow_methods=["*"],  # Allow all HTTP methods
        allow_headers=["*"],  # Allow all headers
    )

    app.include_router(rooms_router)
    app.include_router(health_router)

    # In-memory room state is per application instance; rooms are never shared
    # across processes.
    registry = RoomRegistry()
    broadcaster = RoomBroadcaster(registry)
    app.state.session_lookup = session_lookup
    app.state.registry = registry
    app.state.broadcaster = broadcaster
    app.state.router = MessageRouter(registry, AuthorizationGate(session_lookup), broadcaster)
    app.state.lifecycle = ConnectionLifecycleManager(registry, broadcaster)

    app.add_api_websocket_route(WS_PATH, session_relay_endpoint)

    logger.info(f"FastAPI application initialized, relay listening on {WS_PATH}")
    return app


async def session_relay_endpoint(websocket: WebSocket):
    """WebSocket endpoint for the collaborative-session relay.

    The connection carries no identity until it sends a ``join``; every frame
    is handed to the message router, and all slots it held are released when
    it closes.
    """
    router = websocket.app.state.router
    lifecycle = websocket.app.state.lifecycle

    await websocket.accept()
    client = f"{websocket.client.host}:{websocket.client.port}" if websocket.client else "unknown"
    logger.info(f"WebSocket connection accepted from {client}")

    message_count = 0
    try:
        while True:
            try:
                message = await websocket.receive()
            except Exception as e:
                logger.error(f"Error receiving message from {client}: {e}", exc_info=True)
                break

            if message["type"] == "websocket.disconnect":
                logger.info(f"WebSocket disconnected normally for {client}")
                break

            data = message.get("text")
            if data is None and message.get("bytes") is not None:
                try:
                    data = message["bytes"].decode("utf-8")
                except UnicodeDecodeError:
                    logger.warning(f"Dropping binary frame from {client}: not valid UTF-8")
                    continue
            if data is None:
                continue

            message_count += 1
            logger.debug(f"Received message #{message_count} from {client}")
            await router.handle_raw(websocket, data)
    finally:
        released = await lifecycle.disconnect(websocket)
        logger.info(f"Connection {client} closed after {message_count} message(s), released {released} slot(s)")


app = create_app()
