"""Composer: pending outgoing text and optimistic send."""

import time
from collections.abc import Callable
from datetime import datetime, timezone
from uuid import uuid4

from ..config import OPTIMISTIC_ID_PREFIX, TYPING_EMIT_INTERVAL_SECONDS
from ..debug import DebugEmitter
from ..session import User
from .models import ChatEvent, ChatMessage, MessageOrigin
from .store import MessageStore
from .transport import MessageTransport


def new_optimistic_id() -> str:
    """Client-side id for a message awaiting server confirmation."""
    return f"{OPTIMISTIC_ID_PREFIX}{int(time.time() * 1000)}_{uuid4().hex[:8]}"


class Composer(DebugEmitter):
    """Captures text for one ticket and sends it optimistically.

    ``submit`` appends the message to the store before anything goes over
    the wire and then hands it to the transport without waiting. The
    optimistic entry is neither rolled back nor retried here; queuing while
    offline is the transport's outbox concern.
    """

    def __init__(
        self,
        ticket_id: str,
        user: User,
        store: MessageStore,
        transport: MessageTransport,
        typing_interval: float = TYPING_EMIT_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ticket_id = ticket_id
        self._user = user
        self._store = store
        self._transport = transport
        self._typing_interval = typing_interval
        self._clock = clock
        self._text = ""
        self._last_typing_emit: float | None = None

    @property
    def text(self) -> str:
        """Pending text not yet submitted."""
        return self._text

    @property
    def is_typing(self) -> bool:
        return self._last_typing_emit is not None

    def set_text(self, text: str) -> None:
        """Update the pending text and tell the other side we are typing.

        Typing notifications are throttled to one per interval.
        """
        self._text = text
        if not text.strip():
            return
        now = self._clock()
        if self._last_typing_emit is None or now - self._last_typing_emit >= self._typing_interval:
            self._last_typing_emit = now
            self._transport.send_typing(self._ticket_id, self._user.id, self._user.username)

    def stop_typing(self) -> None:
        if self._last_typing_emit is not None:
            self._last_typing_emit = None
            self._transport.send_stop_typing(self._ticket_id)

    def submit(self, text: str | None = None) -> ChatMessage | None:
        """Send ``text`` (or the pending text) optimistically.

        Returns:
            The optimistic message, or None when the text is blank or the
            store has been discarded
        """
        content = self._text if text is None else text
        if not content.strip():
            return None
        if self._store.discarded:
            self._debug("warning", "Composer", "Submit after teardown ignored")
            return None

        message = ChatMessage(
            id=new_optimistic_id(),
            ticket_id=self._ticket_id,
            author_id=self._user.id,
            author_name=self._user.username,
            text=content,
            created_at=datetime.now(timezone.utc),
            origin=MessageOrigin.LOCAL_OPTIMISTIC,
        )
        self._store.append(message)
        self._transport.send(ChatEvent.from_message(message))
        self.stop_typing()
        self._text = ""
        self._debug("debug", "Composer", f"Sent {message.id} to ticket {self._ticket_id}")
        return message
