"""Realtime WebSocket endpoints: observer channel and media-source channel."""
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from app.core.dependencies import get_broadcast_hub, get_session_registry
from app.services.broadcast.hub import BroadcastHub
from app.services.call_session.manager import CallSessionRegistry
from app.services.realtime.events import ErrorEvent, PongEvent
from app.services.realtime.media_stream import MediaStreamHandler

router = APIRouter()
logger = logging.getLogger(__name__)


def _client(ws: WebSocket) -> str:
    return f"{ws.client.host}:{ws.client.port}" if ws.client else "unknown"


@router.websocket("/ui")
async def ui_channel(
    ws: WebSocket,
    hub: BroadcastHub = Depends(get_broadcast_hub),
):
    """
    Observer channel.

    Receives hello, call-start, level and call-stop events. Inbound messages
    are not part of the protocol; a text "ping" is answered with a pong.
    """
    await ws.accept()
    logger.info(f"[UI] Observer connected - Client: {_client(ws)}")

    try:
        await hub.register(ws)
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                break
            if (message.get("text") or "").strip() == "ping":
                await ws.send_text(PongEvent().to_json())
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.debug(f"[UI] Observer connection ended - Error: {type(e).__name__}: {e}")
    finally:
        hub.unregister(ws)
        logger.info(f"[UI] Observer disconnected - Client: {_client(ws)}")


@router.websocket("/call-stream")
async def call_stream(
    ws: WebSocket,
    registry: CallSessionRegistry = Depends(get_session_registry),
    hub: BroadcastHub = Depends(get_broadcast_hub),
):
    """
    Media-source channel (Twilio Media Streams framing).

    Text frames are JSON start/media/stop events; binary frames are ignored.
    The only messages sent back are error events for frames that could not
    be processed.
    """
    await ws.accept()
    logger.info(f"[CALL STREAM] Source connected - Client: {_client(ws)}")

    async def reply(event: ErrorEvent) -> None:
        await ws.send_text(event.to_json())

    handler = MediaStreamHandler(registry, hub, reply)

    try:
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                break
            text = message.get("text")
            if text is not None:
                await handler.handle_text(text)
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(
            f"[CALL STREAM] Error processing stream - CallId: {handler.call_id}, "
            f"Error: {type(e).__name__}: {str(e)}",
            exc_info=True,
        )
    finally:
        await handler.handle_close()
        logger.info(f"[CALL STREAM] Source disconnected - Client: {_client(ws)}")


@router.websocket("/{path:path}")
async def reject_unknown_path(ws: WebSocket, path: str):
    """Refuse upgrades on any other path before the handshake completes."""
    logger.warning(f"[UPGRADE] Rejected unknown path: /{path} - Client: {_client(ws)}")
    await ws.close()
