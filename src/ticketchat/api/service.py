"""Service ticket endpoints used by the chat."""

from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..chat.models import as_id
from ..errors import ApiError
from .client import ApiClient


class OpenTicketStatus(BaseModel):
    """Answer of the open-ticket probe behind the floating chat entry point."""

    model_config = ConfigDict(populate_by_name=True)

    has_open: bool = Field(default=False, alias="hasOpen")
    ticket_id: str | None = Field(default=None, alias="ticketId")

    @field_validator("ticket_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return as_id(value)


class ServiceApi:
    """Thin wrapper over the /api/service endpoints."""

    def __init__(self, client: ApiClient):
        self._client = client

    async def get_chat_messages(self, ticket_id: str) -> list[dict[str, Any]]:
        """Fetch the stored messages of a ticket, oldest first.

        Raises:
            ApiError: On request failure or an unrecognized body
        """
        data = await self._client.get(f"/service/chat/{quote(ticket_id, safe='')}")
        return _unwrap_messages(data)

    async def get_open_ticket(self) -> OpenTicketStatus:
        """Ask whether the current user has an open ticket."""
        data = await self._client.get("/service/openTickets")
        if not isinstance(data, dict):
            raise ApiError("Unexpected open ticket response", code="INVALID_RESPONSE")
        status = OpenTicketStatus.model_validate(data)
        if status.has_open and not status.ticket_id:
            return OpenTicketStatus(has_open=False)
        return status

    async def close_ticket(self, ticket_id: str) -> str | None:
        """Close a ticket (staff only). Returns the server's confirmation text."""
        data = await self._client.put("/service/closeTicket", json={"ticketId": ticket_id})
        return data.get("msg") if isinstance(data, dict) else None


def _unwrap_messages(data: Any) -> list[dict[str, Any]]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        inner = data.get("data", data)
        if isinstance(inner, list):
            return inner
        if isinstance(inner, dict):
            for key in ("messages", "items"):
                if isinstance(inner.get(key), list):
                    return inner[key]
    raise ApiError("Unexpected chat history response", code="INVALID_RESPONSE")
