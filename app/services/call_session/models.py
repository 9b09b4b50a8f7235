"""Call session models."""
from datetime import datetime, timezone
from typing import Optional


class CallSession:
    """Live state of one monitored call."""

    def __init__(
        self,
        call_id: str,
        from_number: Optional[str] = None,
        to_number: Optional[str] = None,
    ):
        self.call_id = call_id
        self._from_number = from_number
        self._to_number = to_number
        self.current_level = 0.0
        self.started_at = datetime.now(timezone.utc)

    @property
    def from_number(self) -> Optional[str]:
        return self._from_number

    @property
    def to_number(self) -> Optional[str]:
        return self._to_number

    def __repr__(self) -> str:
        return (
            f"CallSession(call_id={self.call_id!r}, from_number={self._from_number!r}, "
            f"to_number={self._to_number!r}, current_level={self.current_level:.3f})"
        )
