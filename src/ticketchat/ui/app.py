"""Main Textual TUI application.

Orchestrates the home screen, the open-ticket check and the chat screens.
"""

import asyncio
import contextlib

from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Center, Vertical
from textual.widgets import Button, Footer, Header, Input, Static

from ..api import ApiClient, ServiceApi
from ..chat.transport import MessageTransport
from ..chat.view import ChatView
from ..errors import ApiError, TransportError
from ..session import Capability, Session, resolve_capabilities
from .callbacks import DebugRouter
from .config import LogLevel
from .screens import ChatScreen
from .styles import APP_CSS
from .themes import WORKSHOP_GREEN
from .widgets import DebugPanel, OpenChatButton


class TicketChatApp(App):
    """Textual TUI for ticket chats."""

    CSS = APP_CSS
    TITLE = "Ticketchat"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+o", "open_chat", "Open Chat"),
        Binding("ctrl+r", "refresh_ticket", "Refresh"),
        Binding("ctrl+d", "toggle_debug", "Debug"),
    ]

    def __init__(
        self,
        client: ApiClient,
        transport: MessageTransport,
        session: Session,
        ticket_id: str | None = None,
        log_level: str | None = None,
    ) -> None:
        super().__init__()
        self._client = client
        self._service_api = ServiceApi(client)
        self._transport = transport
        self._session = session
        self._initial_ticket_id = ticket_id
        self._log_level = log_level
        self._debug_router = DebugRouter(app=self)
        self._capabilities = resolve_capabilities(session.user)

    @property
    def session(self) -> Session:
        return self._session

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Center(id="home"):
            with Vertical(id="home-card"):
                yield Static(
                    f"Hello {self._session.user.display_name}",
                    id="home-greeting",
                )
                yield Input(placeholder="Ticket number", id="ticket-input")
                yield Button("Open chat", id="open-ticket-btn", variant="primary")
        yield OpenChatButton(id="open-chat-btn")
        yield DebugPanel(id="debug-panel", log_level=self._panel_level())
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(WORKSHOP_GREEN)
        self.theme = "workshop-green"

        role = "staff" if Capability.CLOSE_TICKET in self._capabilities else "customer"
        self.sub_title = f"{self._session.user.username} | {role} | {self._transport.backend_type}"

        panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            panel.show()
            panel.info("TUI", f"Log panel enabled with level: {self._log_level.upper()}")
        self._debug_router.attach(panel)
        self._client.set_debug_callback(self._debug_router)
        self._transport.set_debug_callback(self._debug_router)

        self._connect_transport()
        self._check_open_ticket()

    def on_app_focus(self, event: events.AppFocus) -> None:
        self._check_open_ticket()

    def _panel_level(self) -> int:
        if self._log_level is None:
            return LogLevel.DEBUG
        return LogLevel.from_string(self._log_level)

    @work(exclusive=True, group="transport")
    async def _connect_transport(self) -> None:
        if self._initial_ticket_id:
            self.open_chat(self._initial_ticket_id)
            self._initial_ticket_id = None
        try:
            await self._transport.connect()
        except TransportError as e:
            self._debug_router("error", "TUI", str(e))
            self.notify(
                "Live chat unavailable. Press Ctrl+R to reconnect.",
                severity="warning",
            )

    @work(exclusive=True, group="open-ticket")
    async def _check_open_ticket(self) -> None:
        button = self.query_one("#open-chat-btn", OpenChatButton)
        try:
            status = await self._service_api.get_open_ticket()
        except ApiError as e:
            self._debug_router("warning", "TUI", f"Open-ticket check failed: {e.message}")
            return
        button.set_ticket(status.ticket_id if status.has_open else None)

    def open_chat(self, ticket_id: str) -> None:
        """Push a chat screen with a fresh view for ``ticket_id``."""
        ticket_id = ticket_id.strip()
        if not ticket_id:
            self.notify("Enter a ticket number", severity="warning")
            return
        if isinstance(self.screen, ChatScreen) and self.screen.view.ticket_id == ticket_id:
            return
        view = ChatView(
            ticket_id,
            self._session.user,
            self._service_api,
            self._transport,
            on_error=lambda message: self.notify(message, severity="error"),
        )
        view.set_debug_callback(self._debug_router)
        self.push_screen(
            ChatScreen(
                view,
                self._service_api,
                debug_router=self._debug_router,
                log_level=self._panel_level() if self._log_level is not None else None,
            )
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "open-chat-btn":
            event.stop()
            self.action_open_chat()
        elif event.button.id == "open-ticket-btn":
            event.stop()
            self.open_chat(self.query_one("#ticket-input", Input).value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "ticket-input":
            event.stop()
            self.open_chat(event.value)

    def action_open_chat(self) -> None:
        button = self.query_one("#open-chat-btn", OpenChatButton)
        if button.ticket_id is None:
            self.notify("No open ticket", severity="warning")
            return
        self.open_chat(button.ticket_id)

    def action_refresh_ticket(self) -> None:
        if not self._transport.is_connected:
            self._connect_transport()
        self._check_open_ticket()

    def action_toggle_debug(self) -> None:
        panel = self.query_one("#debug-panel", DebugPanel)
        visible = panel.toggle()
        self.notify("Log visible" if visible else "Log hidden", timeout=1)


async def run_textual_tui(
    client: ApiClient,
    transport: MessageTransport,
    session: Session,
    ticket_id: str | None = None,
    log_level: str | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        client: Authenticated API client
        transport: Real-time transport (connected by the app)
        session: Current session
        ticket_id: Ticket to open right away, None to start on the home screen
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = TicketChatApp(
        client=client,
        transport=transport,
        session=session,
        ticket_id=ticket_id,
        log_level=log_level,
    )
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        with contextlib.suppress(TransportError, ConnectionError):
            await transport.disconnect()
        await client.close()
