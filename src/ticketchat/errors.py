"""Exception hierarchy for the ticket chat client."""

from typing import Any


class TicketChatError(Exception):
    """Base class for client errors."""


class ApiError(TicketChatError):
    """Normalized failure of a backend request.

    Mirrors the shape every screen shows to the user: a message, a
    machine code, the HTTP status (0 when the server was never reached)
    and optional details from the error body.
    """

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        status: int = 0,
        details: Any | None = None,
        is_network_error: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.details = details
        self.is_network_error = is_network_error

    @property
    def is_auth_error(self) -> bool:
        return self.status in (401, 403)

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class HistoryLoadError(TicketChatError):
    """Chat history for a ticket could not be fetched."""

    def __init__(self, ticket_id: str, cause: ApiError):
        super().__init__(f"Could not load messages for ticket {ticket_id}: {cause.message}")
        self.ticket_id = ticket_id
        self.cause = cause


class SessionError(TicketChatError):
    """No usable session (not logged in or unreadable credentials)."""


class TransportError(TicketChatError):
    """The real-time channel could not be opened."""
