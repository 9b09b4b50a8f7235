"""Wire models for the media-stream and observer channels."""
import json
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter


# Inbound frames (/call-stream)

class StartPayload(BaseModel):
    """Call metadata carried by a start frame."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    call_sid: Optional[str] = Field(None, alias="callSid")
    from_number: Optional[str] = Field(None, alias="from")
    to_number: Optional[str] = Field(None, alias="to")


class StartFrame(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    event: Literal["start"]
    start: Optional[StartPayload] = None
    stream_sid: Optional[str] = Field(None, alias="streamSid")

    @property
    def call_sid(self) -> Optional[str]:
        return self.start.call_sid if self.start else None

    @property
    def from_number(self) -> Optional[str]:
        return self.start.from_number if self.start else None

    @property
    def to_number(self) -> Optional[str]:
        return self.start.to_number if self.start else None


class MediaPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    payload: Optional[str] = None


class MediaFrame(BaseModel):
    model_config = ConfigDict(extra="allow")

    event: Literal["media"]
    media: Optional[MediaPayload] = None

    @property
    def payload(self) -> Optional[str]:
        return self.media.payload if self.media else None


class StopFrame(BaseModel):
    model_config = ConfigDict(extra="allow")

    event: Literal["stop"]


class UnknownFrame(BaseModel):
    """Any frame whose event is not handled; kept for forward compatibility."""

    model_config = ConfigDict(extra="allow")

    event: Any = None


_KNOWN_EVENTS = ("start", "media", "stop")


def _frame_tag(value: Any) -> str:
    event = value.get("event") if isinstance(value, dict) else getattr(value, "event", None)
    return event if event in _KNOWN_EVENTS else "unknown"


InboundFrame = Annotated[
    Union[
        Annotated[StartFrame, Tag("start")],
        Annotated[MediaFrame, Tag("media")],
        Annotated[StopFrame, Tag("stop")],
        Annotated[UnknownFrame, Tag("unknown")],
    ],
    Discriminator(_frame_tag),
]

_frame_adapter = TypeAdapter(InboundFrame)


class InvalidJSONError(ValueError):
    """Frame text is not valid JSON."""


def parse_frame(text: str) -> Union[StartFrame, MediaFrame, StopFrame, UnknownFrame]:
    """
    Decode one text frame into its event variant.

    Raises:
        InvalidJSONError: if the text is not JSON
        pydantic.ValidationError: if a known event has the wrong shape
    """
    try:
        data = json.loads(text)
    except ValueError as e:
        raise InvalidJSONError(str(e)) from e

    if not isinstance(data, dict):
        return UnknownFrame()
    return _frame_adapter.validate_python(data)


# Outbound events

class OutboundEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class HelloEvent(OutboundEvent):
    type: Literal["hello"] = "hello"
    serverTime: int


class PongEvent(OutboundEvent):
    type: Literal["pong"] = "pong"


class CallStartEvent(OutboundEvent):
    type: Literal["call-start"] = "call-start"
    callId: str
    from_number: Optional[str] = Field(None, alias="from")
    to_number: Optional[str] = Field(None, alias="to")


class LevelEvent(OutboundEvent):
    type: Literal["level"] = "level"
    callId: str
    rms: float = Field(ge=0.0, le=1.0)


class CallStopEvent(OutboundEvent):
    type: Literal["call-stop"] = "call-stop"
    callId: str


class ErrorEvent(OutboundEvent):
    type: Literal["error"] = "error"
    message: str


INVALID_JSON = ErrorEvent(message="invalid-json")
INVALID_FRAME = ErrorEvent(message="invalid-frame")
INVALID_PAYLOAD = ErrorEvent(message="invalid-payload")
