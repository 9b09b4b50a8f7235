"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import settings
from app.core.logging import setup_logging
from app.api import analyze, health, realtime
from app.services.broadcast.hub import BroadcastHub
from app.services.call_session.manager import CallSessionRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    app.state.session_registry = CallSessionRegistry()
    app.state.broadcast_hub = BroadcastHub(send_timeout=settings.broadcast_send_timeout)
    logger.info(f"Realtime server listening on :{settings.port}")
    logger.info(f"- UI WS: ws://localhost:{settings.port}/ui")
    logger.info(f"- Media Stream WS: ws://localhost:{settings.port}/call-stream")
    yield
    # Shutdown
    logger.info(
        f"Realtime server stopping - Active calls: {len(app.state.session_registry)}, "
        f"Observers: {app.state.broadcast_hub.observer_count}"
    )


app = FastAPI(
    title="Call Monitor Relay",
    description="Realtime relay of telephony media stream levels to UI observers",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers (the realtime router ends with a catch-all WebSocket route)
app.include_router(health.router, tags=["health"])
app.include_router(analyze.router, tags=["analyze"])
app.include_router(realtime.router, tags=["realtime"])
