"""History loader: fetches the stored messages of a ticket."""

from typing import TYPE_CHECKING

from ..debug import DebugEmitter
from ..errors import ApiError, HistoryLoadError
from .models import ChatMessage

if TYPE_CHECKING:
    from ..api.service import ServiceApi


class HistoryLoader(DebugEmitter):
    """Loads a ticket's prior messages once per chat view. Never retries."""

    def __init__(self, service_api: "ServiceApi"):
        self._service = service_api

    async def load(self, ticket_id: str) -> list[ChatMessage]:
        """Fetch and parse the message history of a ticket.

        Records that cannot be parsed, or that belong to another ticket,
        are skipped and reported through the debug callback.

        Args:
            ticket_id: Ticket to load

        Returns:
            Server-confirmed messages in server order

        Raises:
            HistoryLoadError: On network failure, auth rejection or unknown ticket
        """
        try:
            records = await self._service.get_chat_messages(ticket_id)
        except ApiError as e:
            self._debug("error", "History", f"Loading ticket {ticket_id} failed: {e.message}")
            raise HistoryLoadError(ticket_id, e) from e

        messages: list[ChatMessage] = []
        skipped = 0
        for raw in records:
            try:
                message = ChatMessage.from_record(raw, ticket_id=ticket_id)
            except ValueError:
                skipped += 1
                continue
            if message.ticket_id != ticket_id:
                skipped += 1
                continue
            messages.append(message)

        if skipped:
            self._debug("warning", "History", f"Skipped {skipped} unusable record(s) for ticket {ticket_id}")
        self._debug("info", "History", f"Loaded {len(messages)} message(s) for ticket {ticket_id}")
        return messages
