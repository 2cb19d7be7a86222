"""HTTP client for the shop backend.

Hides the design decisions about:
- Base URL composition and request timeout
- How the session token is attached to requests
- How failures of every kind are normalized into ApiError
"""

from typing import Any

import httpx

from ..config import API_PREFIX, REQUEST_TIMEOUT_SECONDS
from ..debug import DebugEmitter
from ..errors import ApiError
from ..session import SessionStore


class ApiClient(DebugEmitter):
    """Async JSON client over httpx.

    Every request reads the current token from the session store, the way
    the mobile app reads it from secure storage before each call.

    Supports async context manager protocol:
        async with ApiClient(url, sessions) as api:
            data = await api.get("/service/openTickets")
    """

    def __init__(
        self,
        server_url: str,
        session_store: SessionStore,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        auth_scheme: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the API client.

        Args:
            server_url: Backend root URL, e.g. http://host:5000
            session_store: Where the current session token is read from
            timeout: Request timeout in seconds
            auth_scheme: Prefix for the Authorization header (None sends the raw token)
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
        """
        self._server_url = server_url.rstrip("/")
        self._sessions = session_store
        self._auth_scheme = auth_scheme
        self._client = httpx.AsyncClient(
            base_url=f"{self._server_url}{API_PREFIX}",
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    @property
    def server_url(self) -> str:
        return self._server_url

    @property
    def session_store(self) -> SessionStore:
        return self._sessions

    def _authorization(self, token: str) -> str:
        return f"{self._auth_scheme} {token}" if self._auth_scheme else token

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        params: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path below the /api prefix
            json: Optional JSON body
            params: Optional query parameters
            authenticated: Attach the session token if one is stored

        Returns:
            Decoded JSON body, or None for an empty body

        Raises:
            ApiError: On network failure, timeout, error status or invalid JSON
        """
        headers: dict[str, str] = {}
        if authenticated:
            session = await self._sessions.load()
            if session is not None:
                headers["Authorization"] = self._authorization(session.token)

        self._debug("debug", "API", f"{method} {path}")
        try:
            response = await self._client.request(
                method, path, json=json, params=params, headers=headers
            )
        except httpx.TimeoutException as e:
            raise ApiError("Request timed out", code="TIMEOUT", is_network_error=True) from e
        except httpx.HTTPError as e:
            raise ApiError(
                str(e) or "Network error", code="NETWORK_ERROR", is_network_error=True
            ) from e

        if response.is_error:
            error = self._normalize_error(response)
            self._debug("warning", "API", f"{method} {path} failed: {error.status} {error.message}")
            raise error

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                "Invalid JSON in response", code="INVALID_RESPONSE", status=response.status_code
            ) from e

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)

    @staticmethod
    def _normalize_error(response: httpx.Response) -> ApiError:
        """Map an error response onto ApiError.

        Understands ``{error: {message, code, details}}``, ``{error: "..."}``,
        ``{message}`` and ``{msg}`` bodies.
        """
        status = response.status_code
        message: str | None = None
        code: str | None = None
        details: Any | None = None

        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict):
                message = error.get("message")
                code = error.get("code")
                details = error.get("details")
            elif isinstance(error, str):
                message = error
            message = message or body.get("message") or body.get("msg")

        return ApiError(
            message or f"Request failed with status {status}",
            code=code or f"HTTP_{status}",
            status=status,
            details=details,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
