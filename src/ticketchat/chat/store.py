"""In-memory message store for one chat view.

Hides how the ordered message list is kept and how optimistic entries are
confirmed. Order is append order; messages are never re-sorted by
``created_at``.
"""

from collections.abc import Callable, Iterable, Iterator

from ..debug import DebugEmitter
from .models import ChatMessage, MessageOrigin

AppendListener = Callable[[ChatMessage], None]
ReplaceListener = Callable[[int, ChatMessage], None]


class MessageStore(DebugEmitter):
    """Append-only ordered sequence of chat messages for a single ticket.

    Created empty when a chat view mounts and discarded when it unmounts.
    After ``discard()`` every mutation is ignored.
    """

    def __init__(self, ticket_id: str):
        self._ticket_id = ticket_id
        self._messages: list[ChatMessage] = []
        self._index_by_id: dict[str, int] = {}
        self._append_listeners: list[AppendListener] = []
        self._replace_listeners: list[ReplaceListener] = []
        self._discarded = False

    @property
    def ticket_id(self) -> str:
        return self._ticket_id

    @property
    def messages(self) -> list[ChatMessage]:
        """Snapshot of the messages in append order."""
        return list(self._messages)

    @property
    def discarded(self) -> bool:
        return self._discarded

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(list(self._messages))

    def contains(self, message_id: str) -> bool:
        return message_id in self._index_by_id

    def pending(self) -> list[ChatMessage]:
        """Optimistic entries that have not been confirmed."""
        return [m for m in self._messages if m.is_optimistic]

    def add_listener(
        self,
        on_append: AppendListener | None = None,
        on_replace: ReplaceListener | None = None,
    ) -> None:
        """Register view callbacks (scroll-to-end, re-render)."""
        if on_append is not None:
            self._append_listeners.append(on_append)
        if on_replace is not None:
            self._replace_listeners.append(on_replace)

    def append(self, message: ChatMessage) -> bool:
        """Insert a message at the end.

        Returns:
            True if the message was stored, False if the store is discarded
        """
        if self._discarded:
            self._debug("debug", "Store", f"Ignored append to discarded store {self._ticket_id}")
            return False
        self._index_by_id[message.id] = len(self._messages)
        self._messages.append(message)
        for listener in list(self._append_listeners):
            listener(message)
        return True

    def extend(self, messages: Iterable[ChatMessage]) -> int:
        """Append several messages in order. Returns how many were stored."""
        count = 0
        for message in messages:
            if self.append(message):
                count += 1
        return count

    def append_if_matching_ticket(
        self,
        message: ChatMessage,
        client_id: str | None = None,
    ) -> bool:
        """Store an inbound message if it belongs to this store's ticket.

        When ``client_id`` names a pending optimistic entry, that entry is
        replaced in place instead of appending the echo a second time.

        Returns:
            True if the store changed
        """
        if message.ticket_id != self._ticket_id:
            self._debug(
                "debug",
                "Store",
                f"Dropped message for ticket {message.ticket_id} (store is {self._ticket_id})",
            )
            return False
        if client_id and self.confirm(client_id, message):
            return True
        return self.append(message)

    def confirm(self, client_id: str, message: ChatMessage) -> bool:
        """Replace the optimistic entry ``client_id`` with its server copy.

        Returns:
            False if no pending optimistic entry has that id
        """
        if self._discarded:
            return False
        index = self._index_by_id.get(client_id)
        if index is None or not self._messages[index].is_optimistic:
            return False

        confirmed = message.model_copy(update={"origin": MessageOrigin.SERVER_CONFIRMED})
        del self._index_by_id[client_id]
        self._index_by_id[confirmed.id] = index
        self._messages[index] = confirmed
        for listener in list(self._replace_listeners):
            listener(index, confirmed)
        return True

    def discard(self) -> None:
        """Tear the store down; later mutations become no-ops."""
        self._discarded = True
        self._append_listeners.clear()
        self._replace_listeners.clear()
