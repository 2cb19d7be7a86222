"""Bounded queue of sends made while the transport was disconnected."""

from collections import deque

from ..config import OUTBOX_MAX_SIZE
from ..debug import DebugEmitter
from .models import ChatEvent


class Outbox(DebugEmitter):
    """Finite FIFO of unacknowledged outbound chat events.

    The transport puts events here when it cannot emit them and drains the
    queue from its reconnect hook. When full, the oldest event is dropped.
    """

    def __init__(self, max_size: int = OUTBOX_MAX_SIZE):
        if max_size < 1:
            raise ValueError("Outbox max_size must be at least 1")
        self._max_size = max_size
        self._queue: deque[ChatEvent] = deque()
        self._dropped = 0

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def dropped(self) -> int:
        """Number of events discarded because the queue was full."""
        return self._dropped

    def __len__(self) -> int:
        return len(self._queue)

    def put(self, event: ChatEvent) -> None:
        if len(self._queue) >= self._max_size:
            lost = self._queue.popleft()
            self._dropped += 1
            self._debug(
                "warning",
                "Outbox",
                f"Outbox full ({self._max_size}), dropped oldest message for ticket {lost.ticket_id}",
            )
        self._queue.append(event)

    def drain(self) -> list[ChatEvent]:
        """Remove and return all queued events, oldest first."""
        events = list(self._queue)
        self._queue.clear()
        return events

    def clear(self) -> None:
        self._queue.clear()
