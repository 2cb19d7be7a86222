"""In-memory session store. The session is lost when the app exits."""

from .base import SessionStore
from .models import Session


class InMemorySessionStore(SessionStore):

    def __init__(self, session: Session | None = None):
        self._session = session

    async def load(self) -> Session | None:
        return self._session

    async def save(self, session: Session) -> None:
        self._session = session

    async def clear(self) -> None:
        self._session = None

    @property
    def backend_type(self) -> str:
        return "memory"
