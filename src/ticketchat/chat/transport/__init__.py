"""Real-time transport module.

Provides the shared event channel that chat views subscribe to.
"""

from .base import MessageTransport, Subscription
from .factory import create_message_transport
from .memory import InMemoryTransport

__all__ = [
    "InMemoryTransport",
    "MessageTransport",
    "Subscription",
    "create_message_transport",
]
