"""Provider factory functions for CLI.

Centralizes creation of the session store, API client and real-time
transport from environment variables. Hides configuration details from
command implementations.
"""

import os

import typer
from rich.console import Console

from ..api import ApiClient
from ..chat.transport import MessageTransport, create_message_transport
from ..config import (
    DEFAULT_SERVER_URL,
    DEFAULT_SESSION_PATH,
    SESSION_BACKEND_FILE,
    TRANSPORT_SOCKETIO,
)
from ..debug import DebugCallback
from ..errors import SessionError
from ..session import Session, SessionStore, create_session_store
from ..ui.config import LogLevel

# Default console for output
_console = Console()


def get_server_url() -> str:
    """Backend URL without the /api prefix.

    Environment variables:
        TICKETCHAT_SERVER_URL: Backend base URL (default: development server)
    """
    return os.getenv("TICKETCHAT_SERVER_URL", DEFAULT_SERVER_URL).rstrip("/")


def get_session_store() -> SessionStore:
    """Create the session store from environment variables.

    Environment variables:
        TICKETCHAT_SESSION_BACKEND: "file" (default) or "memory"
        TICKETCHAT_SESSION_PATH: Session file (default: ~/.ticketchat/session.json)
    """
    backend = os.getenv("TICKETCHAT_SESSION_BACKEND", SESSION_BACKEND_FILE).lower()
    if backend == SESSION_BACKEND_FILE:
        path = os.getenv("TICKETCHAT_SESSION_PATH") or str(DEFAULT_SESSION_PATH)
        return create_session_store(backend, path=path)
    return create_session_store(backend)


def get_api_client(session_store: SessionStore | None = None) -> ApiClient:
    """Create the HTTP client from environment variables.

    Environment variables:
        TICKETCHAT_SERVER_URL: Backend base URL
        TICKETCHAT_AUTH_SCHEME: Authorization scheme, e.g. "Bearer"
            (default: raw token, as the legacy backend expects)
    """
    return ApiClient(
        get_server_url(),
        session_store or get_session_store(),
        auth_scheme=os.getenv("TICKETCHAT_AUTH_SCHEME") or None,
    )


def get_transport() -> MessageTransport:
    """Create the real-time transport from environment variables.

    Environment variables:
        TICKETCHAT_TRANSPORT: "socketio" (default) or "memory" (offline)
    """
    backend = os.getenv("TICKETCHAT_TRANSPORT", TRANSPORT_SOCKETIO).lower()
    if backend == TRANSPORT_SOCKETIO:
        return create_message_transport(backend, url=get_server_url())
    # Offline mode echoes own sends so the conversation stays readable
    return create_message_transport(backend, echo=True)


async def require_session(
    session_store: SessionStore,
    console: Console | None = None,
) -> Session:
    """Return the stored session or exit with a hint to log in.

    Raises:
        typer.Exit: If nobody is logged in or the session file is unreadable
    """
    con = console or _console
    try:
        session = await session_store.load()
    except SessionError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
    if session is None:
        con.print("[red]Error: not logged in. Run 'ticketchat login' first.[/red]")
        raise typer.Exit(code=1)
    return session


def console_debug_callback(
    level: str,
    console: Console | None = None,
) -> DebugCallback:
    """Debug callback printing to the console at or above ``level``.

    Args:
        level: Threshold (debug, info, warning, error)
        console: Optional Rich console for output
    """
    con = console or _console
    threshold = LogLevel.from_string(level)
    colors = {"debug": "dim", "info": "cyan", "warning": "yellow", "error": "red"}

    def callback(msg_level: str, component: str, message: str) -> None:
        if LogLevel.from_string(msg_level) < threshold:
            return
        color = colors.get(msg_level, "white")
        con.print(f"[{color}]{msg_level.upper():<7}[/] [bold]\\[{component}][/] {message}")

    return callback
