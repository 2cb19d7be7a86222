"""Chat view controller.

Ties the history loader, message store, transport subscription, composer
and typing indicator of one ticket to the lifetime of one chat screen.
"""

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..config import TYPING_INDICATOR_TIMEOUT_SECONDS
from ..debug import DebugCallback, DebugEmitter
from ..errors import HistoryLoadError
from ..session import User
from .composer import Composer
from .history import HistoryLoader
from .models import ChatEvent, ChatMessage
from .store import MessageStore
from .transport import MessageTransport, Subscription
from .typing_indicator import TypingIndicator

if TYPE_CHECKING:
    from ..api.service import ServiceApi

_NEW = "new"
_MOUNTING = "mounting"
_MOUNTED = "mounted"
_UNMOUNTED = "unmounted"


class ChatView(DebugEmitter):
    """State of one mounted chat screen for one ticket.

    Lifecycle:
    1. ``mount()`` subscribes to the ticket (buffering live events), loads
       the history into the store once, then replays the buffer.
    2. Live events are appended as they arrive; ``submit()`` appends
       optimistically and emits.
    3. ``unmount()`` cancels a pending load, releases the subscription and
       discards the store. A view cannot be mounted again.

    Usable as an async context manager:
        async with ChatView(ticket_id, user, service_api, transport) as view:
            view.submit("Hallo")
    """

    def __init__(
        self,
        ticket_id: str,
        user: User,
        service_api: "ServiceApi",
        transport: MessageTransport,
        on_error: Callable[[str], None] | None = None,
        typing_timeout: float = TYPING_INDICATOR_TIMEOUT_SECONDS,
    ):
        if not ticket_id:
            raise ValueError("ticket_id is required")
        self._ticket_id = ticket_id
        self._user = user
        self._transport = transport
        self._on_error = on_error
        self._loader = HistoryLoader(service_api)
        self.store = MessageStore(ticket_id)
        self.composer = Composer(ticket_id, user, self.store, transport)
        self.typing = TypingIndicator(user.id, timeout=typing_timeout)
        self._subscription: Subscription | None = None
        self._buffer: list[ChatEvent] | None = None
        self._load_task: asyncio.Future | None = None
        self._state = _NEW
        self._load_failed = False

    @property
    def ticket_id(self) -> str:
        return self._ticket_id

    @property
    def user(self) -> User:
        return self._user

    @property
    def is_mounted(self) -> bool:
        return self._state == _MOUNTED

    @property
    def is_unmounted(self) -> bool:
        return self._state == _UNMOUNTED

    @property
    def load_failed(self) -> bool:
        return self._load_failed

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        super().set_debug_callback(callback)
        self.store.set_debug_callback(callback)
        self._loader.set_debug_callback(callback)
        self.composer.set_debug_callback(callback)

    def is_own(self, message: ChatMessage) -> bool:
        return message.author_id is not None and message.author_id == self._user.id

    async def mount(self) -> bool:
        """Subscribe and load the history.

        Returns:
            True if the history loaded, False if loading failed or the view
            was unmounted while loading

        Raises:
            RuntimeError: If the view was mounted before
        """
        if self._state != _NEW:
            raise RuntimeError("A chat view can only be mounted once")
        self._state = _MOUNTING
        self._buffer = []
        self._subscription = self._transport.subscribe(
            self._ticket_id,
            self._on_event,
            on_typing=self.typing.handle_typing,
            on_stop_typing=self.typing.handle_stop_typing,
        )

        self._load_task = asyncio.ensure_future(self._loader.load(self._ticket_id))
        try:
            history = await self._load_task
        except asyncio.CancelledError:
            if self._state == _UNMOUNTED:
                return False
            raise
        except HistoryLoadError as e:
            history = []
            self._load_failed = True
            if self._state != _UNMOUNTED:
                self._report_error(f"Messages could not be loaded: {e.cause.message}")
        finally:
            self._load_task = None

        if self._state == _UNMOUNTED:
            self._debug("debug", "Chat", f"Discarded history of ticket {self._ticket_id} after teardown")
            return False

        self.store.extend(history)
        buffered, self._buffer = self._buffer or [], None
        for event in buffered:
            self._apply(event)
        self._state = _MOUNTED
        return not self._load_failed

    def unmount(self) -> None:
        """Tear the view down. Safe to call more than once."""
        if self._state == _UNMOUNTED:
            return
        self._state = _UNMOUNTED

        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self.composer.stop_typing()
        self.typing.close()
        self.store.discard()
        self._buffer = None

    def submit(self, text: str | None = None) -> ChatMessage | None:
        """Send text optimistically. Ignored until the history is in place."""
        if self._state != _MOUNTED:
            self._debug("warning", "Chat", f"Submit ignored while view is {self._state}")
            return None
        return self.composer.submit(text)

    def _on_event(self, event: ChatEvent) -> None:
        if self._state == _UNMOUNTED:
            return
        if self._buffer is not None:
            self._buffer.append(event)
            return
        self._apply(event)

    def _apply(self, event: ChatEvent) -> None:
        try:
            message = event.to_message()
        except ValueError:
            self._debug("warning", "Chat", f"Ignored message event without text for ticket {event.ticket_id}")
            return
        if self.store.contains(message.id):
            return
        if self.store.append_if_matching_ticket(message, client_id=event.client_id):
            if not self.is_own(message):
                self.typing.clear()

    def _report_error(self, message: str) -> None:
        self._debug("error", "Chat", message)
        if self._on_error is not None:
            self._on_error(message)

    async def __aenter__(self) -> "ChatView":
        await self.mount()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.unmount()
