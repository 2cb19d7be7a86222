"""Text formatting for chat messages.

Hides how timestamps, sender names and delivery state are rendered.
"""

from datetime import datetime

from ..chat.models import ChatMessage
from .config import CHAT_TIME_FORMAT, SUPPORT_FALLBACK_NAME


def format_time(value: datetime) -> str:
    """Render a timestamp in local time, e.g. ``14:05``."""
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime(CHAT_TIME_FORMAT)


def sender_label(message: ChatMessage, own: bool) -> str:
    if own:
        return "You"
    return message.author_name or SUPPORT_FALLBACK_NAME


def message_header(message: ChatMessage, own: bool) -> str:
    """Header line of a chat bubble: icon, sender, time, delivery state."""
    icon = ">" if own else "<"
    header = f"{icon} {sender_label(message, own)} [{format_time(message.created_at)}]"
    if message.is_optimistic:
        header += " (sending)"
    return header


def typing_label(name: str | None) -> str:
    return f"{name} is typing..." if name else ""
