"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Chat bubble rendering (own vs. other party, pending state)
- Input history and typing notifications of the composer bar
- Log rendering, level filtering and scrolling
- The floating entry point for an open ticket
"""

from datetime import datetime

from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message
from textual.widgets import Button, RichLog, Static, TextArea

from ..chat.models import ChatMessage
from .config import (
    CHAT_EMPTY_TEXT,
    INPUT_HISTORY_MAX_SIZE,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    LogLevel,
)
from .formatting import message_header, typing_label


class ClickableMessage(Vertical):
    """A chat bubble that copies its text when clicked."""

    def __init__(self, content: str, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._content = content

    def on_click(self, event: Click) -> None:
        event.stop()
        self.app.copy_to_clipboard(self._content)
        self.app.notify("Copied to clipboard", timeout=2)


class ChatInputBar(Horizontal):
    """Composer bar with TextArea and Send button."""

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    class Changed(Message):
        """Message sent whenever the pending text changes."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Send message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.highlight_cursor_line = False
        text_area.focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            event.stop()
            self._submit()

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        event.stop()
        self.post_message(self.Changed(event.text_area.text))

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        return text_area.cursor_location == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text
        if not value.strip():
            return
        if not self._history or self._history[-1] != value:
            self._history.append(value)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        text_area.text = ""
        self.post_message(self.Submitted(value))

    def focus_input(self) -> None:
        self.query_one("#chat-input", TextArea).focus()

    def set_disabled(self, disabled: bool) -> None:
        self.query_one("#chat-input", TextArea).disabled = disabled
        self.query_one("#send-btn", Button).disabled = disabled


class ChatHistoryWidget(VerticalScroll):
    """Scrollable list of chat bubbles mirroring a message store."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Loading..."
    ALLOW_MAXIMIZE = True
    ALLOW_SELECT = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._bubbles: list[ClickableMessage] = []
        self._messages: list[ChatMessage] = []

    @property
    def message_count(self) -> int:
        return len(self._messages)

    def add_message(self, message: ChatMessage, own: bool) -> None:
        """Append a bubble and scroll to the end."""
        self._remove_placeholder()
        bubble = self._build_bubble(message, own)
        self._messages.append(message)
        self._bubbles.append(bubble)
        self.mount(bubble)
        self._update_subtitle()
        self.scroll_end(animate=False)

    def replace_message(self, index: int, message: ChatMessage, own: bool) -> None:
        """Re-render the bubble at ``index`` (optimistic entry confirmed)."""
        if not 0 <= index < len(self._bubbles):
            return
        old = self._bubbles[index]
        bubble = self._build_bubble(message, own)
        self._messages[index] = message
        self._bubbles[index] = bubble
        self.mount(bubble, after=old)
        old.remove()

    def show_empty(self) -> None:
        if not self._messages and not self.query(".chat-empty"):
            self.mount(Static(CHAT_EMPTY_TEXT, classes="chat-empty"))
        self._update_subtitle()

    def get_last_message(self) -> str | None:
        return self._messages[-1].text if self._messages else None

    def _remove_placeholder(self) -> None:
        for placeholder in self.query(".chat-empty"):
            placeholder.remove()

    def _update_subtitle(self) -> None:
        self.border_subtitle = f"{len(self._messages)} messages"

    def _build_bubble(self, message: ChatMessage, own: bool) -> ClickableMessage:
        border_class = "own-message" if own else "other-message"
        classes = f"chat-message {border_class}"
        if message.is_optimistic:
            classes += " -pending"
        bubble = ClickableMessage(content=message.text, classes=classes)
        bubble.compose_add_child(Static(message_header(message, own), classes="message-header", markup=False))
        bubble.compose_add_child(Static(message.text, classes="message-content", markup=False))
        return bubble


class TypingIndicatorBar(Static):
    """One-line "<name> is typing..." hint above the composer."""

    def set_typing(self, name: str | None) -> None:
        self.update(typing_label(name))
        self.set_class(name is not None, "-active")


class OpenChatButton(Button):
    """Floating entry point shown while the user has an open ticket."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__("Open chat", *args, variant="success", **kwargs)
        self.ticket_id: str | None = None

    def on_mount(self) -> None:
        self.display = False

    def set_ticket(self, ticket_id: str | None) -> None:
        self.ticket_id = ticket_id
        self.display = ticket_id is not None
        if ticket_id is not None:
            self.tooltip = f"Continue the chat for ticket {ticket_id}"


class DebugPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Shows timestamped log messages from all components.
    Supports standard log levels: DEBUG < INFO < WARNING < ERROR.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def log(
        self,
        component: str,
        message: str,
        level: int = LogLevel.DEBUG
    ) -> None:
        """Add a log entry if it meets the current level threshold.

        Args:
            component: Component name (Transport, Store, History, ...)
            message: Log message
            level: Log level (LogLevel.DEBUG, INFO, WARNING, ERROR)
        """
        if level < self._log_level:
            return

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."

        level_colors = {
            LogLevel.DEBUG: "dim white",
            LogLevel.INFO: "cyan",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red",
        }
        component_colors = {
            "TUI": "cyan",
            "API": "magenta",
            "Transport": "green",
            "Outbox": "yellow",
            "Store": "bright_blue",
            "History": "bright_green",
            "Composer": "bright_cyan",
            "Chat": "bright_magenta",
        }
        level_color = level_colors.get(level, "white")
        comp_color = component_colors.get(component, "white")

        self.write(
            f"[dim]{timestamp}[/] "
            f"[{level_color}]{LogLevel.name(level):<5}[/] "
            f"[{comp_color}]\\[{component}][/] {message}"
        )

    def debug(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.DEBUG)

    def info(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.INFO)

    def warning(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.WARNING)

    def error(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.ERROR)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True
