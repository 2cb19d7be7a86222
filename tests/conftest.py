"""Pytest configuration and shared fixtures."""
import asyncio
import json
from typing import Any

import httpx
import pytest

from ticketchat.api import ApiClient, ServiceApi
from ticketchat.chat import InMemoryTransport
from ticketchat.errors import ApiError
from ticketchat.session import Session, User
from ticketchat.session.in_memory import InMemorySessionStore


@pytest.fixture
def customer():
    """Return a plain customer identity."""
    return User(id="u1", username="mueller", email="mueller@example.com", role="customer")


@pytest.fixture
def staff():
    """Return a workshop staff identity."""
    return User(id="s1", username="werkstatt", role="service_manager", permissions=["service"])


@pytest.fixture
def session(customer):
    """Return a session for the customer."""
    return Session(token="tok123", user=customer)


@pytest.fixture
def session_store(session):
    """Return an in-memory store holding the customer session."""
    return InMemorySessionStore(session)


@pytest.fixture
def transport():
    """Return a disconnected in-memory transport."""
    return InMemoryTransport()


@pytest.fixture
async def connected_transport():
    """Return a connected in-memory transport."""
    transport = InMemoryTransport()
    await transport.connect()
    yield transport
    await transport.disconnect()


@pytest.fixture
def debug_log():
    """Collect debug callback triples in a list."""
    entries: list[tuple[str, str, str]] = []

    def callback(level: str, component: str, message: str) -> None:
        entries.append((level, component, message))

    callback.entries = entries
    return callback


def chat_record(
    message_id: str,
    ticket_id: str,
    text: str,
    user_id: str = "s1",
    username: str = "werkstatt",
    created_at: str = "2024-05-02T09:30:00Z",
) -> dict[str, Any]:
    """Build a chat record the way the backend returns it (populated userId)."""
    return {
        "_id": message_id,
        "ticketId": ticket_id,
        "userId": {"_id": user_id, "username": username},
        "message": text,
        "createdAt": created_at,
    }


class FakeServiceApi:
    """Stand-in for ServiceApi serving canned chat histories.

    Set ``gate`` to an asyncio.Event to hold history requests until it is set,
    or ``error`` to make every request fail with that ApiError.
    """

    def __init__(self, histories: dict[str, list[dict[str, Any]]] | None = None):
        self.histories = histories or {}
        self.requests: list[str] = []
        self.gate: asyncio.Event | None = None
        self.error: ApiError | None = None

    async def get_chat_messages(self, ticket_id: str) -> list[dict[str, Any]]:
        self.requests.append(ticket_id)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.histories.get(ticket_id, []))


@pytest.fixture
def service_api():
    """Return a fake service API with histories for two tickets."""
    return FakeServiceApi({
        "abc123": [
            chat_record("m1", "abc123", "Ihr Fahrrad ist angekommen"),
            chat_record("m2", "abc123", "Danke!", user_id="u1", username="mueller"),
        ],
        "xyz789": [
            chat_record("m9", "xyz789", "Termin bestaetigt"),
        ],
    })


class FakeBackend:
    """Routes httpx requests to canned JSON responses and records them."""

    def __init__(self):
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, body: Any, status: int = 200) -> None:
        self.routes[(method, path)] = (status, body)

    def add_error(self, method: str, path: str, exc: type[httpx.HTTPError]) -> None:
        self.routes[(method, path)] = exc

    def body_of(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"msg": "Not found"})
        if isinstance(route, type):
            raise route("simulated failure", request=request)
        status, body = route
        return httpx.Response(status, json=body)


@pytest.fixture
def backend():
    """Return an empty fake backend."""
    return FakeBackend()


@pytest.fixture
async def api_client(backend, session_store):
    """Return an ApiClient talking to the fake backend."""
    client = ApiClient(
        "http://backend.test",
        session_store,
        transport=httpx.MockTransport(backend),
    )
    yield client
    await client.close()


@pytest.fixture
def real_service_api(api_client):
    """Return a ServiceApi over the fake backend."""
    return ServiceApi(api_client)
