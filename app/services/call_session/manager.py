"""Call session registry."""
import logging
import random
import string
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Union

import numpy as np

from app.services.audio.levels import compute_rms
from app.services.call_session.models import CallSession

logger = logging.getLogger(__name__)

_TOKEN_ALPHABET = string.digits + string.ascii_lowercase
_TOKEN_LENGTH = 11


def generate_call_id() -> str:
    """
    Generate a fallback call id of the form ``call-<token>``.

    Uses the non-cryptographic ``random`` module; the id is a display-only
    correlation token.
    """
    token = "".join(random.choices(_TOKEN_ALPHABET, k=_TOKEN_LENGTH))
    return f"call-{token}"


class CallSessionRegistry:
    """Tracks the calls currently streaming media, keyed by call id."""

    def __init__(self):
        self._sessions: Dict[str, CallSession] = {}

    def on_start(
        self,
        call_sid: Optional[str] = None,
        stream_sid: Optional[str] = None,
        from_number: Optional[str] = None,
        to_number: Optional[str] = None,
    ) -> CallSession:
        """
        Create the session for a newly started stream.

        The call id prefers the upstream call SID, then the stream SID, then a
        generated token. An existing session with the same id is replaced.

        Returns:
            The new session; its call_id correlates later frames on the connection
        """
        call_id = call_sid or stream_sid or generate_call_id()
        if call_id in self._sessions:
            logger.info(f"[SESSIONS] Restarting existing call - CallId: {call_id}")

        session = CallSession(call_id, from_number=from_number, to_number=to_number)
        self._sessions[call_id] = session
        logger.info(
            f"[SESSIONS] Call started - CallId: {call_id}, From: {from_number}, To: {to_number}, "
            f"Active calls: {len(self._sessions)}"
        )
        return session

    def on_media(
        self, call_id: Optional[str], samples: Union[np.ndarray, Sequence[int]]
    ) -> Optional[float]:
        """
        Update the session level from a block of decoded samples.

        Returns:
            The new level, or None if no session exists for call_id
        """
        session = self._sessions.get(call_id) if call_id else None
        if session is None:
            logger.debug(f"[SESSIONS] Media for unknown call ignored - CallId: {call_id}")
            return None

        session.current_level = compute_rms(samples)
        return session.current_level

    def on_stop(
        self, call_id: Optional[str], owner: Optional[CallSession] = None
    ) -> Optional[CallSession]:
        """
        Remove a session. Unknown ids are ignored.

        When owner is given, the session is removed only if it is still the
        one owner refers to; a call restarted by another connection is left alone.
        """
        if not call_id:
            return None
        current = self._sessions.get(call_id)
        if owner is not None and current is not owner:
            if current is not None:
                logger.info(f"[SESSIONS] Stop for superseded session ignored - CallId: {call_id}")
            return None

        session = self._sessions.pop(call_id, None)
        if session is not None:
            duration = (datetime.now(timezone.utc) - session.started_at).total_seconds()
            logger.info(
                f"[SESSIONS] Call stopped - CallId: {call_id}, Duration: {duration:.1f}s, "
                f"Active calls: {len(self._sessions)}"
            )
        return session

    def on_connection_closed(
        self, call_id: Optional[str], owner: Optional[CallSession] = None
    ) -> bool:
        """
        Treat a dropped source connection as an implicit stop.

        Returns:
            True if the connection's session was removed, so a call-stop
            should be announced
        """
        if self.on_stop(call_id, owner) is None:
            return False
        logger.info(f"[SESSIONS] Source connection dropped without stop - CallId: {call_id}")
        return True

    def get(self, call_id: str) -> Optional[CallSession]:
        return self._sessions.get(call_id)

    def active_calls(self) -> List[CallSession]:
        return list(self._sessions.values())

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, call_id: object) -> bool:
        return call_id in self._sessions
