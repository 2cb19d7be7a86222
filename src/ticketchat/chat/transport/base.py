"""Abstract base class for real-time chat transports.

This module defines the interface of the long-lived event channel shared by
every chat view of the application. The abstraction hides:
- The wire library and connection handling
- Room membership (join/leave per ticket)
- Queuing of sends made while disconnected
- Routing of inbound events to per-ticket subscribers
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from ...config import (
    EVENT_JOIN,
    EVENT_LEAVE,
    EVENT_MESSAGE,
    EVENT_STOP_TYPING,
    EVENT_TYPING,
)
from ...debug import DebugCallback, DebugEmitter
from ..models import ChatEvent, TypingEvent
from ..outbox import Outbox

MessageHandler = Callable[[ChatEvent], None]
TypingHandler = Callable[[TypingEvent], None]


class Subscription:
    """Handle for one view's interest in one ticket.

    Release it with ``unsubscribe()`` or by using it as a context manager.
    Once released its callbacks are never invoked again.
    """

    def __init__(
        self,
        transport: "MessageTransport",
        ticket_id: str,
        on_message: MessageHandler,
        on_typing: TypingHandler | None = None,
        on_stop_typing: TypingHandler | None = None,
    ):
        self._transport = transport
        self._ticket_id = ticket_id
        self.on_message = on_message
        self.on_typing = on_typing
        self.on_stop_typing = on_stop_typing
        self._active = True

    @property
    def ticket_id(self) -> str:
        return self._ticket_id

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        self._transport.unsubscribe(self)

    def _deactivate(self) -> None:
        self._active = False
        self.on_message = _ignore
        self.on_typing = None
        self.on_stop_typing = None

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.unsubscribe()


def _ignore(event: ChatEvent) -> None:
    pass


class MessageTransport(DebugEmitter, ABC):
    """Abstract real-time chat transport.

    One instance lives for the whole application session and is passed to
    every chat view. Views subscribe per ticket; inbound events are only
    delivered to subscriptions of the matching ticket.

    ``send`` never blocks and never raises: the emit runs in the background
    and failures are reported through the debug callback. Messages sent
    while disconnected go to the outbox and are flushed on reconnect.

    Supports async context manager protocol:
        async with transport:
            sub = transport.subscribe(ticket_id, on_message)
    """

    def __init__(self, outbox: Outbox | None = None):
        self._outbox = outbox if outbox is not None else Outbox()
        self._subscriptions: list[Subscription] = []
        self._pending_emits: set[asyncio.Task] = set()

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether events can currently be emitted."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the channel."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the channel gracefully."""

    @abstractmethod
    async def _emit(self, event: str, payload: Any) -> None:
        """Put one event on the wire. May raise on failure."""

    @property
    def outbox(self) -> Outbox:
        return self._outbox

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        super().set_debug_callback(callback)
        self._outbox.set_debug_callback(callback)

    def subscribed_tickets(self) -> list[str]:
        """Tickets with at least one active subscription, in subscription order."""
        seen: list[str] = []
        for sub in self._subscriptions:
            if sub.ticket_id not in seen:
                seen.append(sub.ticket_id)
        return seen

    def subscribe(
        self,
        ticket_id: str,
        on_message: MessageHandler,
        on_typing: TypingHandler | None = None,
        on_stop_typing: TypingHandler | None = None,
    ) -> Subscription:
        """Register interest in the events of one ticket.

        Joins the ticket's room when this is its first subscription.

        Raises:
            ValueError: If ticket_id is empty
        """
        if not ticket_id:
            raise ValueError("ticket_id is required to subscribe")

        first = ticket_id not in self.subscribed_tickets()
        subscription = Subscription(self, ticket_id, on_message, on_typing, on_stop_typing)
        self._subscriptions.append(subscription)
        self._debug("debug", "Transport", f"Subscribed to ticket {ticket_id}")

        if first and self.is_connected:
            self._schedule(EVENT_JOIN, ticket_id)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Release a subscription. Releasing twice is a no-op.

        Leaves the ticket's room when no subscription for it remains.
        """
        if not subscription.active:
            return
        subscription._deactivate()
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
        self._debug("debug", "Transport", f"Unsubscribed from ticket {subscription.ticket_id}")

        if subscription.ticket_id not in self.subscribed_tickets() and self.is_connected:
            self._schedule(EVENT_LEAVE, subscription.ticket_id)

    def send(self, event: ChatEvent) -> None:
        """Emit a chat message without waiting for the result."""
        if not self.is_connected:
            self._outbox.put(event)
            self._debug(
                "warning",
                "Transport",
                f"Disconnected, queued message for ticket {event.ticket_id} ({len(self._outbox)} queued)",
            )
            return
        self._schedule(EVENT_MESSAGE, event.to_payload(), requeue=event)

    def send_typing(self, ticket_id: str, user_id: str | None, username: str | None) -> None:
        """Tell the other side that this user is typing. Dropped when offline."""
        if self.is_connected:
            payload = TypingEvent(ticket_id=ticket_id, user_id=user_id, username=username)
            self._schedule(EVENT_TYPING, payload.to_payload())

    def send_stop_typing(self, ticket_id: str) -> None:
        if self.is_connected:
            self._schedule(EVENT_STOP_TYPING, TypingEvent(ticket_id=ticket_id).to_payload())

    async def flush(self) -> None:
        """Wait for all emits started so far to finish."""
        while self._pending_emits:
            await asyncio.gather(*list(self._pending_emits), return_exceptions=True)

    def _schedule(self, event: str, payload: Any, requeue: ChatEvent | None = None) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._debug("error", "Transport", f"No running event loop, cannot emit '{event}'")
            if requeue is not None:
                self._outbox.put(requeue)
            return

        task = loop.create_task(self._emit_safely(event, payload, requeue))
        self._pending_emits.add(task)
        task.add_done_callback(self._pending_emits.discard)

    async def _emit_safely(self, event: str, payload: Any, requeue: ChatEvent | None) -> bool:
        try:
            await self._emit(event, payload)
            return True
        except Exception as e:
            self._debug("error", "Transport", f"Failed to emit '{event}': {e}")
            if requeue is not None and not self.is_connected:
                self._outbox.put(requeue)
            return False

    async def _on_connected(self) -> None:
        """Reconnect hook: re-join rooms, then flush the outbox in order."""
        for ticket_id in self.subscribed_tickets():
            await self._emit_safely(EVENT_JOIN, ticket_id, None)

        queued = self._outbox.drain()
        if queued:
            self._debug("info", "Transport", f"Flushing {len(queued)} queued message(s)")
        for event in queued:
            await self._emit_safely(EVENT_MESSAGE, event.to_payload(), event)

    def _dispatch_message(self, raw: Any) -> int:
        """Deliver an inbound ``message`` event. Returns the number of receivers."""
        try:
            event = ChatEvent.model_validate(raw)
        except ValidationError as e:
            self._debug("warning", "Transport", f"Dropped malformed message event: {e.error_count()} error(s)")
            return 0

        delivered = 0
        for sub in list(self._subscriptions):
            if not sub.active or sub.ticket_id != event.ticket_id:
                continue
            try:
                sub.on_message(event)
            except Exception as e:
                self._debug("error", "Transport", f"Message handler for {sub.ticket_id} failed: {e}")
            delivered += 1
        return delivered

    def _dispatch_typing(self, raw: Any, typing: bool) -> int:
        """Deliver an inbound ``typing``/``stopTyping`` event."""
        try:
            event = TypingEvent.model_validate(raw)
        except ValidationError:
            self._debug("warning", "Transport", "Dropped malformed typing event")
            return 0

        delivered = 0
        for sub in list(self._subscriptions):
            if not sub.active or sub.ticket_id != event.ticket_id:
                continue
            handler = sub.on_typing if typing else sub.on_stop_typing
            if handler is None:
                continue
            try:
                handler(event)
            except Exception as e:
                self._debug("error", "Transport", f"Typing handler for {sub.ticket_id} failed: {e}")
            delivered += 1
        return delivered

    async def __aenter__(self) -> "MessageTransport":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()
