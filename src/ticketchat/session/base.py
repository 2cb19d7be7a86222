"""Abstract base class for session storage backends.

The abstraction hides where the credential lives (process memory, a file
in the user's home directory) and how it is serialized.
"""

from abc import ABC, abstractmethod

from ..errors import SessionError
from .models import Session


class SessionStore(ABC):
    """Abstract session store holding at most one session."""

    @abstractmethod
    async def load(self) -> Session | None:
        """Return the stored session, or None when logged out."""

    @abstractmethod
    async def save(self, session: Session) -> None:
        """Persist the session, replacing any previous one."""

    @abstractmethod
    async def clear(self) -> None:
        """Forget the stored session."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def require(self) -> Session:
        """Return the stored session.

        Raises:
            SessionError: If nobody is logged in
        """
        session = await self.load()
        if session is None:
            raise SessionError("Not logged in")
        return session
