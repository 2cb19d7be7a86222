"""Typing indicator state for one chat view."""

import asyncio
from collections.abc import Callable

from ..config import TYPING_INDICATOR_TIMEOUT_SECONDS
from .models import TypingEvent


class TypingIndicator:
    """Tracks whether the other party is typing.

    Set by inbound ``typing`` events from anyone but the current user,
    cleared by ``stopTyping`` or automatically after a timeout.
    """

    def __init__(
        self,
        own_user_id: str | None,
        timeout: float = TYPING_INDICATOR_TIMEOUT_SECONDS,
        on_change: Callable[[str | None], None] | None = None,
    ):
        self._own_user_id = own_user_id
        self._timeout = timeout
        self._on_change = on_change
        self._typing_user: str | None = None
        self._timer: asyncio.TimerHandle | None = None

    @property
    def typing_user(self) -> str | None:
        """Display name of whoever is typing, or None."""
        return self._typing_user

    @property
    def is_other_typing(self) -> bool:
        return self._typing_user is not None

    def set_listener(self, on_change: Callable[[str | None], None] | None) -> None:
        self._on_change = on_change

    def handle_typing(self, event: TypingEvent) -> None:
        if event.user_id is not None and event.user_id == self._own_user_id:
            return
        self._cancel_timer()
        try:
            loop = asyncio.get_running_loop()
            self._timer = loop.call_later(self._timeout, self.clear)
        except RuntimeError:
            pass  # No loop: stays visible until stopTyping
        self._set(event.username or "Someone")

    def handle_stop_typing(self, event: TypingEvent | None = None) -> None:
        self.clear()

    def clear(self) -> None:
        self._cancel_timer()
        self._set(None)

    def close(self) -> None:
        """Stop timers and detach the listener."""
        self._cancel_timer()
        self._on_change = None
        self._typing_user = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _set(self, name: str | None) -> None:
        if name == self._typing_user:
            return
        self._typing_user = name
        if self._on_change is not None:
            self._on_change(name)
