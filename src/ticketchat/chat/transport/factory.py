"""Factory for creating message transports."""

from typing import Any

from .base import MessageTransport


def create_message_transport(
    backend: str = "socketio",
    **config: Any
) -> MessageTransport:
    """Create a real-time message transport.

    Args:
        backend: Transport type ("socketio" or "memory")
        **config: Backend-specific configuration
            For socketio:
                - url: str (required)
                - outbox: Outbox | None
                - reconnection_attempts: int (default: 5)
                - reconnection_delay: float (default: 1.0)
            For memory:
                - outbox: Outbox | None
                - echo: bool (default: False)

    Returns:
        MessageTransport instance

    Raises:
        ValueError: If backend type is not supported
        TypeError: If required configuration is missing
    """
    backend_lower = backend.lower()

    if backend_lower == "socketio":
        if "url" not in config:
            raise TypeError("Socket.IO transport requires 'url' in config")
        from .socketio_transport import SocketIOTransport
        return SocketIOTransport(**config)

    if backend_lower == "memory":
        from .memory import InMemoryTransport
        return InMemoryTransport(**config)

    raise ValueError(
        f"Unsupported transport backend: {backend}. "
        f"Supported backends: socketio, memory"
    )
