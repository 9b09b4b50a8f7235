"""Per-connection handling of the inbound media stream protocol."""
import base64
import binascii
import logging
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from app.services.audio.mulaw import decode as decode_mulaw
from app.services.broadcast.hub import BroadcastHub
from app.services.call_session.manager import CallSessionRegistry
from app.services.call_session.models import CallSession
from app.services.realtime.events import (
    INVALID_FRAME,
    INVALID_JSON,
    INVALID_PAYLOAD,
    CallStartEvent,
    CallStopEvent,
    ErrorEvent,
    InvalidJSONError,
    LevelEvent,
    MediaFrame,
    StartFrame,
    StopFrame,
    parse_frame,
)

logger = logging.getLogger(__name__)

Reply = Callable[[ErrorEvent], Awaitable[None]]


def decode_payload(payload: str) -> bytes:
    """
    Decode a base64 media payload.

    Whitespace is ignored and missing padding is restored, so unpadded
    payloads such as "/w" decode. Other non-alphabet characters are rejected.

    Raises:
        binascii.Error: if the payload is not base64
    """
    compact = "".join(payload.split()).rstrip("=")
    return base64.b64decode(compact + "=" * (-len(compact) % 4), validate=True)


class MediaStreamHandler:
    """
    Drives the session registry and broadcast hub from one media-source
    connection.

    Frames must be passed in arrival order; the handler remembers the call id
    established by the connection's start frame so that media, stop and
    connection close can be correlated with it.
    """

    def __init__(
        self,
        registry: CallSessionRegistry,
        hub: BroadcastHub,
        reply: Reply,
    ):
        self.registry = registry
        self.hub = hub
        self.reply = reply
        self.call_id: Optional[str] = None
        self.session: Optional[CallSession] = None

    async def handle_text(self, text: str) -> None:
        """Process one text frame."""
        try:
            frame = parse_frame(text)
        except InvalidJSONError:
            logger.warning(f"[CALL STREAM] Invalid JSON frame - CallId: {self.call_id}")
            await self.reply(INVALID_JSON)
            return
        except ValidationError as e:
            logger.warning(
                f"[CALL STREAM] Malformed frame - CallId: {self.call_id}, Errors: {e.error_count()}"
            )
            await self.reply(INVALID_FRAME)
            return

        if isinstance(frame, StartFrame):
            await self._on_start(frame)
        elif isinstance(frame, MediaFrame):
            await self._on_media(frame)
        elif isinstance(frame, StopFrame):
            await self._on_stop()
        else:
            logger.debug(f"[CALL STREAM] Ignoring event: {frame.event!r}")

    async def _on_start(self, frame: StartFrame) -> None:
        session = self.registry.on_start(
            call_sid=frame.call_sid,
            stream_sid=frame.stream_sid,
            from_number=frame.from_number,
            to_number=frame.to_number,
        )
        self.call_id = session.call_id
        self.session = session
        await self.hub.broadcast(
            CallStartEvent(
                callId=session.call_id,
                from_number=session.from_number,
                to_number=session.to_number,
            )
        )

    async def _on_media(self, frame: MediaFrame) -> None:
        # Some frames carry no audio
        if not frame.payload:
            return

        try:
            mulaw_bytes = decode_payload(frame.payload)
        except (binascii.Error, ValueError):
            logger.warning(f"[CALL STREAM] Undecodable media payload - CallId: {self.call_id}")
            await self.reply(INVALID_PAYLOAD)
            return

        level = self.registry.on_media(self.call_id, decode_mulaw(mulaw_bytes))
        if level is None:
            return
        await self.hub.broadcast(LevelEvent(callId=self.call_id, rms=level))

    async def _on_stop(self) -> None:
        if self.call_id is None:
            logger.debug("[CALL STREAM] Stop before start ignored")
            return

        call_id, session = self.call_id, self.session
        self.call_id = self.session = None
        if self.registry.on_stop(call_id, session) is not None:
            await self.hub.broadcast(CallStopEvent(callId=call_id))

    async def handle_close(self) -> None:
        """Announce an implicit stop if the connection drops mid-call."""
        call_id, session = self.call_id, self.session
        self.call_id = self.session = None
        if self.registry.on_connection_closed(call_id, session):
            await self.hub.broadcast(CallStopEvent(callId=call_id))
