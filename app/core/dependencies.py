"""FastAPI dependencies."""
from starlette.requests import HTTPConnection

from app.services.broadcast.hub import BroadcastHub
from app.services.call_session.manager import CallSessionRegistry


def get_session_registry(connection: HTTPConnection) -> CallSessionRegistry:
    """Get the call session registry owned by the running app."""
    return connection.app.state.session_registry


def get_broadcast_hub(connection: HTTPConnection) -> BroadcastHub:
    """Get the observer broadcast hub owned by the running app."""
    return connection.app.state.broadcast_hub
