"""
Ticketchat: a support ticket chat client for the shop backend.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .chat import ChatMessage, ChatView, MessageStore, MessageTransport
from .errors import ApiError, HistoryLoadError, SessionError, TicketChatError, TransportError
from .session import Session, User

__all__ = [
    "ApiError",
    "ChatMessage",
    "ChatView",
    "HistoryLoadError",
    "MessageStore",
    "MessageTransport",
    "Session",
    "SessionError",
    "TicketChatError",
    "TransportError",
    "User",
]
