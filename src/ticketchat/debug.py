"""Debug callback plumbing shared by client components.

Components never print or log on their own. They forward
``(level, component, message)`` triples to whatever callback the
front end installed (the TUI log panel, the CLI console, a test list).
"""

from collections.abc import Callable

DebugCallback = Callable[[str, str, str], None]


class DebugEmitter:
    """Mixin holding an optional debug callback."""

    _debug_callback: DebugCallback | None = None

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set debug callback for logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, component: str, message: str) -> None:
        """Send debug message if callback is set."""
        if self._debug_callback:
            self._debug_callback(level, component, message)
