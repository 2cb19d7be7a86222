"""Login and logout against the backend."""

from typing import Any

from pydantic import ValidationError

from ..errors import ApiError
from ..session import Session, SessionStore, User
from .client import ApiClient


class AuthApi:
    """Creates and destroys the application session."""

    def __init__(self, client: ApiClient, session_store: SessionStore | None = None):
        self._client = client
        self._sessions = session_store or client.session_store

    async def login(
        self,
        email: str,
        password: str,
        customer_number: str | None = None,
    ) -> Session:
        """Log in and persist the resulting session.

        Args:
            email: Last name or e-mail address
            password: Account password
            customer_number: Shop customer number, when the account has one

        Returns:
            The new session

        Raises:
            ApiError: If the credentials are rejected or the response is unusable
        """
        body: dict[str, Any] = {"email": email, "password": password}
        if customer_number:
            body["customerNumber"] = customer_number

        data = await self._client.post("/auth/login", json=body, authenticated=False)
        session = _session_from_login(data)
        await self._sessions.save(session)
        return session

    async def logout(self) -> None:
        """Forget the local session. Never fails."""
        await self._sessions.clear()

    async def current_session(self) -> Session | None:
        return await self._sessions.load()


def _session_from_login(data: Any) -> Session:
    # Legacy backend: {token, user}; newer backend: {data: {accessToken, user}}
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        data = data["data"]
    if not isinstance(data, dict):
        raise ApiError("Unexpected login response", code="INVALID_RESPONSE")

    token = data.get("token") or data.get("accessToken")
    if not token:
        raise ApiError("Login response did not contain a token", code="INVALID_RESPONSE")
    try:
        return Session(token=token, user=User.model_validate(data.get("user")))
    except ValidationError as e:
        raise ApiError(
            "Login response did not contain a valid user", code="INVALID_RESPONSE"
        ) from e
