from fastapi import APIRouter, Request
from schemas.rooms import HealthResponse
from logging_config import get_logger

logger = get_logger(__name__)

health_router = APIRouter(tags=["health"])


@health_router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    session_store = await request.app.state.session_lookup.is_available()
    if not session_store:
        logger.warning("Health check: session store unavailable")
    return HealthResponse(
        status="ok" if session_store else "degraded",
        active_rooms=len(request.app.state.registry.active_session_ids()),
        session_store=session_store,
    )
