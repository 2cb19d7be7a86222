"""In-process transport.

Keeps emitted events in memory instead of putting them on a network.
Suitable for offline runs and as a drop-in substitute in tests.
"""

from typing import Any
from uuid import uuid4

from ...config import EVENT_JOIN, EVENT_LEAVE, EVENT_MESSAGE
from ..models import ChatEvent
from ..outbox import Outbox
from .base import MessageTransport


class InMemoryTransport(MessageTransport):
    """Loopback transport.

    With ``echo=True`` every emitted message is broadcast back to the
    subscribers of its ticket, the way the server broadcasts to a room,
    stamped with a server id and keeping its ``clientId``.
    """

    def __init__(self, outbox: Outbox | None = None, echo: bool = False):
        super().__init__(outbox)
        self._echo = echo
        self._connected = False
        self._rooms: set[str] = set()
        self.emitted: list[tuple[str, Any]] = []

    @property
    def backend_type(self) -> str:
        return "memory"

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def rooms(self) -> set[str]:
        """Tickets whose room is currently joined."""
        return set(self._rooms)

    async def connect(self) -> None:
        if self._connected:
            return
        self._connected = True
        await self._on_connected()

    async def disconnect(self) -> None:
        await self.flush()
        self._connected = False
        self._rooms.clear()

    def drop(self) -> None:
        """Lose the connection without a clean shutdown."""
        self._connected = False
        self._rooms.clear()

    async def _emit(self, event: str, payload: Any) -> None:
        if not self._connected:
            raise ConnectionError("Transport is not connected")
        self.emitted.append((event, payload))

        if event == EVENT_JOIN:
            self._rooms.add(payload)
        elif event == EVENT_LEAVE:
            self._rooms.discard(payload)
        elif event == EVENT_MESSAGE and self._echo:
            echoed = dict(payload)
            echoed.setdefault("_id", f"mem_{uuid4().hex}")
            self._dispatch_message(echoed)

    def sent_messages(self) -> list[ChatEvent]:
        """Chat messages emitted so far, in order."""
        return [ChatEvent.model_validate(p) for e, p in self.emitted if e == EVENT_MESSAGE]

    def deliver(self, payload: dict[str, Any]) -> int:
        """Inject an inbound ``message`` event. Returns the number of receivers."""
        return self._dispatch_message(payload)

    def deliver_typing(self, payload: dict[str, Any], typing: bool = True) -> int:
        """Inject an inbound ``typing`` (or ``stopTyping``) event."""
        return self._dispatch_typing(payload, typing)
