"""Ticket chat module.

Provides the client side of the real-time support chat: message store,
history loading, optimistic sending, typing indicator and the transport
the views share.
"""

from .composer import Composer
from .history import HistoryLoader
from .models import ChatEvent, ChatMessage, MessageOrigin, TypingEvent
from .outbox import Outbox
from .store import MessageStore
from .transport import (
    InMemoryTransport,
    MessageTransport,
    Subscription,
    create_message_transport,
)
from .typing_indicator import TypingIndicator
from .view import ChatView

__all__ = [
    "ChatEvent",
    "ChatMessage",
    "ChatView",
    "Composer",
    "HistoryLoader",
    "InMemoryTransport",
    "MessageOrigin",
    "MessageStore",
    "MessageTransport",
    "Outbox",
    "Subscription",
    "TypingEvent",
    "TypingIndicator",
    "create_message_transport",
]
