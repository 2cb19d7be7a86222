"""Data models for ticket chat.

These models define chat messages as the client holds them and the event
payloads exchanged over the real-time channel, independent of the
transport used to carry them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _now() -> datetime:
    return datetime.now(timezone.utc)


def as_id(value: Any) -> str | None:
    """Extract an identifier from a plain id or a populated document."""
    if value is None:
        return None
    if isinstance(value, dict):
        return as_id(value.get("_id") or value.get("id"))
    if isinstance(value, (str, int)):
        text = str(value)
        return text or None
    return None


class MessageOrigin(str, Enum):
    """Where a message in the store came from."""

    LOCAL_OPTIMISTIC = "local-optimistic"    # Inserted by the composer, not yet echoed
    SERVER_CONFIRMED = "server-confirmed"    # Loaded from history or received live


class ChatMessage(BaseModel):
    """A single chat message belonging to one ticket."""

    id: str = Field(description="Server id, or client-generated id while optimistic")
    ticket_id: str = Field(description="Ticket (conversation) the message belongs to")
    author_id: str | None = Field(default=None, description="Sender user id")
    author_name: str | None = Field(default=None, description="Sender display name")
    text: str = Field(min_length=1, description="Message content")
    created_at: datetime = Field(default_factory=_now)
    origin: MessageOrigin = Field(default=MessageOrigin.SERVER_CONFIRMED)

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message text must not be blank")
        return value

    @property
    def is_optimistic(self) -> bool:
        return self.origin == MessageOrigin.LOCAL_OPTIMISTIC

    @classmethod
    def from_record(
        cls,
        raw: dict[str, Any],
        ticket_id: str | None = None,
        origin: MessageOrigin = MessageOrigin.SERVER_CONFIRMED,
    ) -> "ChatMessage":
        """Build a message from a server record.

        Accepts the shapes the backend produces: ``_id`` or ``id``,
        ``message`` or ``text``, ``userId`` as a plain id or a populated
        ``{_id, username}`` document, and ``user``/``sender`` objects.

        Args:
            raw: Record as decoded from JSON
            ticket_id: Fallback ticket id when the record omits it
            origin: Origin tag for the resulting message

        Returns:
            Parsed ChatMessage

        Raises:
            ValueError: If the record has no text or no ticket id
        """
        if not isinstance(raw, dict):
            raise ValueError("Chat record must be an object")

        text = raw.get("message")
        if text is None:
            text = raw.get("text")
        if not isinstance(text, str) or not text.strip():
            raise ValueError("Chat record has no text")

        record_ticket = as_id(raw.get("ticketId")) or ticket_id
        if not record_ticket:
            raise ValueError("Chat record has no ticket id")

        author_id, author_name = _author_of(raw)
        message_id = as_id(raw.get("_id")) or as_id(raw.get("id")) or f"srv_{uuid4().hex}"

        return cls(
            id=message_id,
            ticket_id=record_ticket,
            author_id=author_id,
            author_name=author_name,
            text=text,
            created_at=raw.get("createdAt") or _now(),
            origin=origin,
        )


def _author_of(raw: dict[str, Any]) -> tuple[str | None, str | None]:
    user_field = raw.get("userId")
    author_id = as_id(user_field)
    author_name = user_field.get("username") if isinstance(user_field, dict) else None

    for key in ("user", "sender"):
        obj = raw.get(key)
        if isinstance(obj, dict):
            author_id = author_id or as_id(obj)
            author_name = author_name or obj.get("username") or obj.get("firstName")

    return author_id, raw.get("username") or author_name


class ChatEvent(BaseModel):
    """Payload of the ``message`` event, in both directions.

    The client emits the same shape it receives. ``clientId`` carries the
    optimistic id so a server that echoes it lets the store confirm the
    pending entry instead of appending a duplicate.
    """

    model_config = ConfigDict(populate_by_name=True)

    ticket_id: str = Field(alias="ticketId")
    message: str
    user_id: str | None = Field(default=None, alias="userId")
    username: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")
    client_id: str | None = Field(default=None, alias="clientId")
    id: str | None = Field(default=None, alias="_id")

    @field_validator("ticket_id", "user_id", "id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, (dict, int)):
            return as_id(value)
        return value

    @classmethod
    def from_message(cls, message: ChatMessage) -> "ChatEvent":
        """Outbound event for a locally composed message."""
        return cls(
            ticket_id=message.ticket_id,
            message=message.text,
            user_id=message.author_id,
            username=message.author_name,
            created_at=message.created_at,
            client_id=message.id if message.is_optimistic else None,
        )

    def to_payload(self) -> dict[str, Any]:
        """Render the camelCase wire payload."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    def to_message(self) -> ChatMessage:
        """Convert an inbound event to a server-confirmed message.

        Raises:
            ValueError: If the event carries no usable text
        """
        return ChatMessage.from_record(self.to_payload())


class TypingEvent(BaseModel):
    """Payload of the ``typing`` and ``stopTyping`` events."""

    model_config = ConfigDict(populate_by_name=True)

    ticket_id: str = Field(alias="ticketId")
    user_id: str | None = Field(default=None, alias="userId")
    username: str | None = None

    @field_validator("ticket_id", "user_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, (dict, int)):
            return as_id(value)
        return value

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
