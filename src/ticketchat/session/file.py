"""File-backed session store.

Keeps the session as JSON in a file readable only by the current user,
so a CLI login survives between invocations.
"""

import os
from pathlib import Path

from pydantic import ValidationError

from ..config import DEFAULT_SESSION_PATH
from ..errors import SessionError
from .base import SessionStore
from .models import Session


class FileSessionStore(SessionStore):
    """Session store persisting to a JSON file (mode 0600)."""

    def __init__(self, path: str | Path = DEFAULT_SESSION_PATH):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> Session | None:
        """Read the session file.

        Raises:
            SessionError: If the file exists but cannot be parsed
        """
        if not self._path.exists():
            return None
        try:
            return Session.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            raise SessionError(f"Unreadable session file {self._path}: {e}") from e

    async def save(self, session: Session) -> None:
        self._path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        # O_CREAT leaves the mode of an existing file alone
        os.chmod(self._path, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(session.model_dump_json())

    async def clear(self) -> None:
        self._path.unlink(missing_ok=True)

    @property
    def backend_type(self) -> str:
        return "file"
