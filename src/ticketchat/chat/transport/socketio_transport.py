"""Socket.IO transport backed by python-socketio's asyncio client."""

from typing import Any

import socketio
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from ...config import (
    EVENT_MESSAGE,
    EVENT_STOP_TYPING,
    EVENT_TYPING,
    RECONNECTION_ATTEMPTS,
    RECONNECTION_DELAY_SECONDS,
)
from ...errors import TransportError
from ..outbox import Outbox
from .base import MessageTransport


class SocketIOTransport(MessageTransport):
    """Real-time transport speaking to the shop backend's Socket.IO server.

    Hidden design decisions:
    - websocket-only engine transport
    - reconnection policy (attempts and delay)
    - room re-join and outbox flush on every (re)connect
    """

    def __init__(
        self,
        url: str,
        outbox: Outbox | None = None,
        reconnection_attempts: int = RECONNECTION_ATTEMPTS,
        reconnection_delay: float = RECONNECTION_DELAY_SECONDS,
        transports: list[str] | None = None,
        auth: dict[str, Any] | None = None,
        client: Any | None = None,
    ):
        """Initialize the Socket.IO transport.

        Args:
            url: Server URL (without the /api prefix)
            outbox: Queue for sends made while disconnected
            reconnection_attempts: Automatic reconnect attempts before giving up
            reconnection_delay: Initial delay between reconnect attempts
            transports: Engine.IO transports to allow (default: websocket)
            auth: Optional auth payload sent with the connect packet
            client: Preconfigured AsyncClient (mainly for tests)
        """
        super().__init__(outbox)
        self._url = url
        self._transports = transports or ["websocket"]
        self._auth = auth
        self._client = client or socketio.AsyncClient(
            reconnection=True,
            reconnection_attempts=reconnection_attempts,
            reconnection_delay=reconnection_delay,
        )
        self._client.on("connect", self._handle_connect)
        self._client.on("disconnect", self._handle_disconnect)
        self._client.on(EVENT_MESSAGE, self._handle_message)
        self._client.on(EVENT_TYPING, self._handle_typing)
        self._client.on(EVENT_STOP_TYPING, self._handle_stop_typing)

    @property
    def backend_type(self) -> str:
        return "socketio"

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_connected(self) -> bool:
        return bool(self._client.connected)

    async def connect(self) -> None:
        """Connect to the server.

        A failed first attempt runs the same reconnection policy as a lost
        connection. Rooms are joined and the outbox is flushed once an
        attempt succeeds.

        Raises:
            TransportError: If no attempt reaches the server
        """
        if self.is_connected:
            return
        self._debug("info", "Transport", f"Connecting to {self._url}")
        try:
            await self._client.connect(
                self._url,
                transports=self._transports,
                auth=self._auth,
                retry=True,
            )
        except SocketIOConnectionError as e:
            raise TransportError(f"Could not connect to {self._url}: {e}") from e

    async def disconnect(self) -> None:
        await self.flush()
        if self.is_connected:
            await self._client.disconnect()
        self._debug("info", "Transport", "Disconnected")

    async def _emit(self, event: str, payload: Any) -> None:
        await self._client.emit(event, payload)

    async def _handle_connect(self) -> None:
        self._debug("info", "Transport", f"Connected to {self._url}")
        await self._on_connected()

    async def _handle_disconnect(self, *args: Any) -> None:
        reason = f" ({args[0]})" if args else ""
        self._debug("warning", "Transport", f"Connection lost{reason}")

    async def _handle_message(self, data: Any) -> None:
        self._dispatch_message(data)

    async def _handle_typing(self, data: Any) -> None:
        self._dispatch_typing(data, typing=True)

    async def _handle_stop_typing(self, data: Any) -> None:
        self._dispatch_typing(data, typing=False)
