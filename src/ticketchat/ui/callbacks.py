"""Debug callback bridge between the chat core and the TUI.

Hides the details of how log lines from transport, store and API reach the
on-screen log panel. Lines are routed to the panel of whichever screen is
active, and held back until a panel exists.
"""

import threading
from collections import deque
from typing import TYPE_CHECKING, Any

from .config import LogLevel

if TYPE_CHECKING:
    from textual.app import App

    from .widgets import DebugPanel

_PENDING_MAX = 200


class DebugRouter:
    """Debug callback that writes into the active screen's DebugPanel.

    Matches the ``(level, component, message)`` signature used by every
    component's ``set_debug_callback``. Safe to call from worker threads.
    """

    def __init__(self, app: "App | None" = None) -> None:
        self.app = app
        self._panels: list["DebugPanel"] = []
        self._pending: deque[tuple[int, str, str]] = deque(maxlen=_PENDING_MAX)

    @property
    def panel(self) -> "DebugPanel | None":
        return self._panels[-1] if self._panels else None

    def attach(self, panel: "DebugPanel") -> None:
        """Route further lines into ``panel`` and replay the held-back ones."""
        self._panels.append(panel)
        while self._pending:
            level, component, message = self._pending.popleft()
            panel.log(component, message, level)

    def detach(self, panel: "DebugPanel") -> None:
        """Stop routing into ``panel``; the previously attached one takes over."""
        if panel in self._panels:
            self._panels.remove(panel)

    def __call__(self, level: str, component: str, message: str) -> None:
        numeric = LogLevel.from_string(level)
        self._call_thread_safe(self._write, numeric, component, message)

    def _write(self, level: int, component: str, message: str) -> None:
        panel = self.panel
        if panel is None or not panel.is_attached:
            self._pending.append((level, component, message))
            return
        panel.log(component, message, level)

    def _call_thread_safe(self, func: Any, *args: Any) -> None:
        if self.app is not None and self.app._thread_id != threading.get_ident():
            self.app.call_from_thread(func, *args)
        else:
            func(*args)
