"""Fan-out of call events to connected UI observers."""
import asyncio
import functools
import logging
import time
from typing import Dict, Set

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from app.services.realtime.events import HelloEvent, OutboundEvent

logger = logging.getLogger(__name__)


def _is_open(observer: WebSocket) -> bool:
    return (
        observer.client_state == WebSocketState.CONNECTED
        and observer.application_state == WebSocketState.CONNECTED
    )


class BroadcastHub:
    """Owns the set of observer sockets and sends them JSON events."""

    def __init__(self, send_timeout: float = 1.0):
        self.send_timeout = send_timeout
        self._observers: Set[WebSocket] = set()
        # Sends still being written, at most one per observer
        self._pending: Dict[WebSocket, asyncio.Task] = {}

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    async def register(self, observer: WebSocket) -> None:
        """
        Greet an accepted observer and add it to the set.

        The greeting carries the server clock in epoch milliseconds so the
        client can tell a fresh connection apart and estimate skew. It is the
        first message on the socket; broadcasts only reach the observer once
        it has been sent.
        """
        hello = HelloEvent(serverTime=int(time.time() * 1000))
        await observer.send_text(hello.to_json())
        self._observers.add(observer)
        logger.info(f"[BROADCAST] Observer registered - Observers: {len(self._observers)}")

    def unregister(self, observer: WebSocket) -> None:
        """Remove an observer. Safe to call more than once."""
        if observer in self._observers:
            self._observers.discard(observer)
            logger.info(f"[BROADCAST] Observer unregistered - Observers: {len(self._observers)}")

    async def broadcast(self, event: OutboundEvent) -> int:
        """
        Send one event to every open observer.

        Observers that are not open are skipped, and so are observers still
        writing an earlier message. A send that does not finish within
        send_timeout is left to complete in the background; the broadcast
        does not wait for it. An observer whose send fails is dropped and its
        socket closed. Other observers are never affected.

        Returns:
            Number of observers the message was delivered to within the timeout
        """
        payload = event.to_json()

        targets = []
        for observer in self._observers:
            if not _is_open(observer):
                continue
            if observer in self._pending:
                logger.debug("[BROADCAST] Observer still writing previous message, skipping")
                continue
            targets.append(observer)
        if not targets:
            return 0

        tasks = []
        for observer in targets:
            task = asyncio.ensure_future(observer.send_text(payload))
            self._pending[observer] = task
            task.add_done_callback(functools.partial(self._send_done, observer))
            tasks.append(task)

        done, not_done = await asyncio.wait(tasks, timeout=self.send_timeout)
        if not_done:
            logger.warning(
                f"[BROADCAST] {len(not_done)} observer(s) still writing after {self.send_timeout}s, "
                f"not waiting for them"
            )
        return sum(1 for task in done if not task.cancelled() and task.exception() is None)

    def _send_done(self, observer: WebSocket, task: asyncio.Task) -> None:
        if self._pending.get(observer) is task:
            del self._pending[observer]
        if task.cancelled():
            return
        error = task.exception()
        if error is None or observer not in self._observers:
            return

        logger.debug(f"[BROADCAST] Send to observer failed, dropping - Error: {type(error).__name__}: {error}")
        self.unregister(observer)
        asyncio.ensure_future(self._close(observer))

    async def _close(self, observer: WebSocket) -> None:
        try:
            await observer.close()
        except Exception as e:
            logger.debug(f"[BROADCAST] Closing dropped observer failed - Error: {type(e).__name__}: {e}")
