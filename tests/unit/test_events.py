"""Unit tests for inbound frame decoding."""
import pytest
from pydantic import ValidationError

from app.services.realtime.events import (
    InvalidJSONError,
    MediaFrame,
    StartFrame,
    StopFrame,
    UnknownFrame,
    parse_frame,
)


class TestParseFrame:
    """Test decoding of media-stream frames."""

    def test_start_frame(self):
        """Test a Twilio-style start frame."""
        frame = parse_frame(
            '{"event": "start", "streamSid": "MZ1", '
            '"start": {"callSid": "CA123", "from": "+1555", "to": "+1999"}}'
        )

        assert isinstance(frame, StartFrame)
        assert frame.stream_sid == "MZ1"
        assert frame.call_sid == "CA123"
        assert frame.from_number == "+1555"
        assert frame.to_number == "+1999"

    def test_start_frame_without_metadata(self):
        """Test that start with no start object gets empty metadata."""
        frame = parse_frame('{"event": "start"}')

        assert isinstance(frame, StartFrame)
        assert frame.call_sid is None
        assert frame.stream_sid is None
        assert parse_frame('{"event": "start", "start": null}').call_sid is None

    def test_media_frame(self):
        """Test a media frame with a payload."""
        frame = parse_frame('{"event": "media", "media": {"payload": "/w==", "track": "inbound"}}')

        assert isinstance(frame, MediaFrame)
        assert frame.payload == "/w=="

    def test_media_frame_without_payload(self):
        """Test that a media frame may omit its payload."""
        assert parse_frame('{"event": "media"}').payload is None
        assert parse_frame('{"event": "media", "media": {}}').payload is None

    def test_stop_frame(self):
        """Test a stop frame."""
        assert isinstance(parse_frame('{"event": "stop", "stop": {}}'), StopFrame)

    @pytest.mark.parametrize(
        "text",
        ['{"event": "mark", "mark": {"name": "x"}}', '{"foo": 1}', "[1, 2]", "42", '{"event": null}'],
    )
    def test_unknown_frames(self, text):
        """Test that unrecognized frames decode to the unknown variant."""
        assert isinstance(parse_frame(text), UnknownFrame)

    def test_invalid_json(self):
        """Test that non-JSON text raises InvalidJSONError."""
        with pytest.raises(InvalidJSONError):
            parse_frame("{not json")

    def test_wrong_shape_for_known_event(self):
        """Test that a known event with a malformed body fails validation."""
        with pytest.raises(ValidationError):
            parse_frame('{"event": "start", "start": "CA123"}')
