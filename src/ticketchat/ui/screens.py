"""Screens for the TUI.

This module hides the design decisions about:
- How a chat screen owns and tears down its chat view
- Which staff actions are offered, and when
- Confirmation dialog appearance (CSS, layout)
"""

from typing import TYPE_CHECKING

from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, Footer, Header, Static

from ..chat.models import ChatMessage
from ..chat.view import ChatView
from ..errors import ApiError
from ..session import Capability, has_capability
from .config import LogLevel
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, TypingIndicatorBar

if TYPE_CHECKING:
    from ..api.service import ServiceApi
    from .callbacks import DebugRouter


class ConfirmationScreen(ModalScreen[bool]):
    """Modal yes/no dialog. Dismisses with True on confirmation."""

    CSS = """
    ConfirmationScreen {
        align: center middle;
        background: $background 70%;
    }

    #confirmation-dialog {
        width: 60;
        height: auto;
        max-height: 20;
        border: tall $accent;
        background: $surface;
        padding: 1 2;
    }

    #confirmation-title {
        width: 100%;
        height: auto;
        text-align: center;
        text-style: bold;
        color: $accent;
        padding: 0 0 1 0;
        border-bottom: solid $border;
        margin-bottom: 1;
    }

    #confirmation-prompt {
        width: 100%;
        height: auto;
        text-align: center;
        padding: 1 2;
        color: $foreground;
    }

    #confirmation-buttons {
        width: 100%;
        height: 3;
        align: center middle;
        margin-top: 1;
    }

    #confirmation-buttons Button {
        margin: 0 1;
        min-width: 10;
    }
    """

    BINDINGS = [
        Binding("y", "confirm_yes", "Yes", show=False),
        Binding("n", "confirm_no", "No", show=False),
        Binding("escape", "confirm_no", "Cancel", show=False),
    ]

    def __init__(self, title: str, prompt: str) -> None:
        super().__init__()
        self._title = title
        self._prompt = prompt

    def compose(self) -> ComposeResult:
        with Vertical(id="confirmation-dialog"):
            yield Static(self._title, id="confirmation-title")
            yield Static(self._prompt, id="confirmation-prompt")
            with Horizontal(id="confirmation-buttons"):
                yield Button("Yes", id="btn-yes", variant="success")
                yield Button("No", id="btn-no", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "btn-yes")

    def action_confirm_yes(self) -> None:
        self.dismiss(True)

    def action_confirm_no(self) -> None:
        self.dismiss(False)


class ChatScreen(Screen):
    """Conversation screen for one ticket.

    The screen owns one ChatView: the view is mounted when the screen is
    mounted and torn down when the screen is removed, so leaving and
    reopening a chat always starts from a fresh history load.
    """

    BINDINGS = [
        Binding("escape", "leave", "Back"),
        Binding("ctrl+d", "toggle_debug", "Log"),
        Binding("ctrl+y", "copy_last", "Copy"),
        Binding("ctrl+x", "close_ticket", "Close ticket"),
    ]

    def __init__(
        self,
        view: ChatView,
        service_api: "ServiceApi",
        debug_router: "DebugRouter | None" = None,
        log_level: int | None = None,
    ) -> None:
        super().__init__()
        self._view = view
        self._service_api = service_api
        self._debug_router = debug_router
        self._log_level = log_level
        self._panel: DebugPanel | None = None

    @property
    def view(self) -> ChatView:
        return self._view

    def compose(self) -> ComposeResult:
        yield Header()
        yield ChatHistoryWidget(id="chat-history")
        yield TypingIndicatorBar(id="typing-indicator")
        yield ChatInputBar(id="chat-input-bar")
        yield DebugPanel(
            id="debug-panel",
            log_level=self._log_level if self._log_level is not None else LogLevel.DEBUG,
        )
        yield Footer()

    def on_mount(self) -> None:
        self.title = f"Ticket {self._view.ticket_id}"
        self.sub_title = self._view.user.display_name

        panel = self._panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            panel.show()
        if self._debug_router is not None:
            self._debug_router.attach(panel)

        self._view.store.add_listener(
            on_append=self._render_appended,
            on_replace=self._render_replaced,
        )
        self._view.typing.set_listener(self._render_typing)
        self.query_one("#chat-input-bar", ChatInputBar).set_disabled(True)
        self._mount_view()

    def on_unmount(self) -> None:
        self._view.unmount()
        if self._debug_router is not None and self._panel is not None:
            self._debug_router.detach(self._panel)

    @work(exclusive=True, group="chat-mount")
    async def _mount_view(self) -> None:
        await self._view.mount()
        if not self._view.is_mounted:
            return
        history = self.query_one("#chat-history", ChatHistoryWidget)
        if not len(self._view.store):
            history.show_empty()
        input_bar = self.query_one("#chat-input-bar", ChatInputBar)
        input_bar.set_disabled(False)
        input_bar.focus_input()

    def _render_appended(self, message: ChatMessage) -> None:
        history = self.query_one("#chat-history", ChatHistoryWidget)
        history.add_message(message, own=self._view.is_own(message))

    def _render_replaced(self, index: int, message: ChatMessage) -> None:
        history = self.query_one("#chat-history", ChatHistoryWidget)
        history.replace_message(index, message, own=self._view.is_own(message))

    def _render_typing(self, name: str | None) -> None:
        self.query_one("#typing-indicator", TypingIndicatorBar).set_typing(name)

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        event.stop()
        self._view.submit(event.value)

    def on_chat_input_bar_changed(self, event: ChatInputBar.Changed) -> None:
        event.stop()
        if self._view.is_mounted:
            self._view.composer.set_text(event.value)

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        if action == "close_ticket":
            return has_capability(self._view.user, Capability.CLOSE_TICKET)
        return True

    def action_leave(self) -> None:
        self.app.pop_screen()

    def action_toggle_debug(self) -> None:
        panel = self.query_one("#debug-panel", DebugPanel)
        visible = panel.toggle()
        self.notify("Log visible" if visible else "Log hidden", timeout=1)

    def action_copy_last(self) -> None:
        history = self.query_one("#chat-history", ChatHistoryWidget)
        last = history.get_last_message()
        if last:
            self.app.copy_to_clipboard(last)
            self.notify("Copied last message", timeout=2)
        else:
            self.notify("No message to copy", severity="warning", timeout=2)

    def action_close_ticket(self) -> None:
        def on_result(confirmed: bool | None) -> None:
            if confirmed:
                self._close_ticket()

        self.app.push_screen(
            ConfirmationScreen(
                "Close ticket",
                f"Close ticket {self._view.ticket_id}? The customer can no longer reply.",
            ),
            on_result,
        )

    @work(exclusive=True, group="chat-close")
    async def _close_ticket(self) -> None:
        try:
            msg = await self._service_api.close_ticket(self._view.ticket_id)
        except ApiError as e:
            self.notify(f"Ticket could not be closed: {e.message}", severity="error")
            return
        self.notify(msg or "Ticket closed")
        self.app.pop_screen()
