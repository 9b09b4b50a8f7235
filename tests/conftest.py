"""Shared test fixtures and configuration."""
import asyncio
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState

from app.main import app
from app.core.config import Settings
from app.services.broadcast.hub import BroadcastHub
from app.services.call_session.manager import CallSessionRegistry


class FakeObserver:
    """Stand-in for an observer WebSocket that records what it is sent."""

    def __init__(self, fail: bool = False):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.fail = fail
        self.closed = False
        self.sent: List[str] = []
        # While set to an unset Event, sends block until it is set
        self.gate: Optional[asyncio.Event] = None

    async def send_text(self, data: str) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("connection reset")
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.closed = True
        self.application_state = WebSocketState.DISCONNECTED

    def disconnect(self) -> None:
        self.client_state = WebSocketState.DISCONNECTED


@pytest.fixture
def test_settings():
    """Override settings for testing."""
    return Settings(
        host="127.0.0.1",
        port=8081,
        log_level="DEBUG",
        broadcast_send_timeout=0.05,
    )


@pytest.fixture
def registry():
    """Empty call session registry."""
    return CallSessionRegistry()


@pytest.fixture
def hub(test_settings):
    """Empty broadcast hub with a short send timeout."""
    return BroadcastHub(send_timeout=test_settings.broadcast_send_timeout)


@pytest.fixture
def observer_factory():
    """Build fake observers."""
    return FakeObserver


@pytest.fixture
def test_client():
    """Create FastAPI test client with the lifespan running."""
    with TestClient(app) as client:
        yield client


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as an asyncio test"
    )
