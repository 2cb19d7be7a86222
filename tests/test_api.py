"""Unit tests for the HTTP API layer."""
import httpx
import pytest

from conftest import chat_record
from ticketchat.api import ApiClient, AuthApi, ServiceApi
from ticketchat.chat import HistoryLoader
from ticketchat.errors import ApiError, HistoryLoadError
from ticketchat.session.in_memory import InMemorySessionStore

LOGIN_USER = {
    "_id": "u1",
    "username": "mueller",
    "email": "mueller@example.com",
    "role": "customer",
    "permissions": [],
}


class TestApiClient:
    """Tests for request handling and error normalization."""

    async def test_raw_token_header(self, backend, api_client):
        """Test that the token is sent without a scheme by default."""
        backend.add("GET", "/api/service/openTickets", {"hasOpen": False})

        await api_client.get("/service/openTickets")

        assert backend.requests[-1].headers["Authorization"] == "tok123"

    async def test_bearer_scheme(self, backend, session_store):
        """Test that a configured scheme prefixes the token."""
        backend.add("GET", "/api/service/openTickets", {"hasOpen": False})
        async with ApiClient(
            "http://backend.test", session_store,
            auth_scheme="Bearer", transport=httpx.MockTransport(backend),
        ) as client:
            await client.get("/service/openTickets")

        assert backend.requests[-1].headers["Authorization"] == "Bearer tok123"

    async def test_no_header_without_session(self, backend):
        """Test that logged-out requests carry no Authorization header."""
        backend.add("GET", "/api/service/openTickets", {"hasOpen": False})
        async with ApiClient(
            "http://backend.test", InMemorySessionStore(), transport=httpx.MockTransport(backend)
        ) as client:
            await client.get("/service/openTickets")

        assert "Authorization" not in backend.requests[-1].headers

    async def test_msg_body_is_normalized(self, backend, api_client):
        """Test the legacy ``{msg}`` error body."""
        backend.add("GET", "/api/service/openTickets", {"msg": "Token is not valid"}, status=401)

        with pytest.raises(ApiError) as exc_info:
            await api_client.get("/service/openTickets")

        error = exc_info.value
        assert error.message == "Token is not valid"
        assert error.code == "HTTP_401"
        assert error.status == 401
        assert error.is_auth_error
        assert not error.is_network_error

    async def test_nested_error_body_is_normalized(self, backend, api_client):
        """Test the ``{error: {message, code, details}}`` body."""
        backend.add(
            "GET", "/api/service/openTickets",
            {"error": {"message": "Kaputt", "code": "SERVER_ERROR", "details": {"id": 1}}},
            status=500,
        )

        with pytest.raises(ApiError) as exc_info:
            await api_client.get("/service/openTickets")

        assert exc_info.value.code == "SERVER_ERROR"
        assert exc_info.value.details == {"id": 1}

    async def test_unknown_route_is_not_found(self, api_client):
        """Test the 404 helper."""
        with pytest.raises(ApiError) as exc_info:
            await api_client.get("/service/nowhere")

        assert exc_info.value.is_not_found

    async def test_network_error(self, backend, api_client):
        """Test that connection failures become NETWORK_ERROR."""
        backend.add_error("GET", "/api/service/openTickets", httpx.ConnectError)

        with pytest.raises(ApiError) as exc_info:
            await api_client.get("/service/openTickets")

        assert exc_info.value.code == "NETWORK_ERROR"
        assert exc_info.value.is_network_error
        assert exc_info.value.status == 0

    async def test_timeout(self, backend, api_client):
        """Test that timeouts become TIMEOUT."""
        backend.add_error("GET", "/api/service/openTickets", httpx.ReadTimeout)

        with pytest.raises(ApiError) as exc_info:
            await api_client.get("/service/openTickets")

        assert exc_info.value.code == "TIMEOUT"


class TestAuthApi:
    """Tests for login and logout."""

    async def test_login_stores_session(self, backend, api_client):
        """Test a legacy ``{token, user}`` login."""
        store = InMemorySessionStore()
        backend.add("POST", "/api/auth/login", {"token": "neu", "user": LOGIN_USER})

        session = await AuthApi(api_client, store).login("mueller", "geheim")

        assert session.token == "neu"
        assert session.user.id == "u1"
        assert await store.load() == session
        assert backend.body_of() == {"email": "mueller", "password": "geheim"}
        assert "Authorization" not in backend.requests[-1].headers

    async def test_login_with_customer_number(self, backend, api_client):
        """Test that the customer number is sent when given."""
        backend.add("POST", "/api/auth/login", {"token": "neu", "user": LOGIN_USER})

        await AuthApi(api_client, InMemorySessionStore()).login("mueller", "geheim", "K-1001")

        assert backend.body_of()["customerNumber"] == "K-1001"

    async def test_login_with_wrapped_response(self, backend, api_client):
        """Test the ``{data: {accessToken, user}}`` login shape."""
        backend.add("POST", "/api/auth/login", {"data": {"accessToken": "neu", "user": LOGIN_USER}})

        session = await AuthApi(api_client, InMemorySessionStore()).login("mueller", "geheim")

        assert session.token == "neu"

    async def test_login_without_token_fails(self, backend, api_client):
        """Test that a response without a token is rejected."""
        backend.add("POST", "/api/auth/login", {"user": LOGIN_USER})

        with pytest.raises(ApiError) as exc_info:
            await AuthApi(api_client, InMemorySessionStore()).login("mueller", "geheim")

        assert exc_info.value.code == "INVALID_RESPONSE"

    async def test_rejected_login(self, backend, api_client):
        """Test that rejected credentials raise and store nothing."""
        store = InMemorySessionStore()
        backend.add("POST", "/api/auth/login", {"msg": "Invalid credentials"}, status=400)

        with pytest.raises(ApiError):
            await AuthApi(api_client, store).login("mueller", "falsch")

        assert await store.load() is None

    async def test_logout_clears_session(self, api_client, session_store):
        """Test that logout forgets the session."""
        auth = AuthApi(api_client)

        await auth.logout()

        assert await auth.current_session() is None


class TestServiceApi:
    """Tests for the service endpoints."""

    async def test_get_chat_messages(self, backend, real_service_api):
        """Test fetching a ticket history."""
        backend.add("GET", "/api/service/chat/abc123", [chat_record("m1", "abc123", "Hallo")])

        records = await real_service_api.get_chat_messages("abc123")

        assert records[0]["_id"] == "m1"

    @pytest.mark.parametrize(
        "body",
        [
            {"data": [{"_id": "m1"}]},
            {"data": {"messages": [{"_id": "m1"}]}},
            {"items": [{"_id": "m1"}]},
        ],
    )
    async def test_wrapped_histories(self, backend, real_service_api, body):
        """Test that wrapped history bodies are unwrapped."""
        backend.add("GET", "/api/service/chat/abc123", body)

        records = await real_service_api.get_chat_messages("abc123")

        assert records == [{"_id": "m1"}]

    async def test_unrecognized_history_fails(self, backend, real_service_api):
        """Test that an unusable body raises INVALID_RESPONSE."""
        backend.add("GET", "/api/service/chat/abc123", {"msg": "ok"})

        with pytest.raises(ApiError) as exc_info:
            await real_service_api.get_chat_messages("abc123")

        assert exc_info.value.code == "INVALID_RESPONSE"

    async def test_open_ticket(self, backend, real_service_api):
        """Test the open-ticket probe."""
        backend.add("GET", "/api/service/openTickets", {"hasOpen": True, "ticketId": "abc123"})

        status = await real_service_api.get_open_ticket()

        assert status.has_open
        assert status.ticket_id == "abc123"

    async def test_open_ticket_without_id(self, backend, real_service_api):
        """Test that an open flag without a ticket id counts as none."""
        backend.add("GET", "/api/service/openTickets", {"hasOpen": True})

        status = await real_service_api.get_open_ticket()

        assert not status.has_open

    async def test_close_ticket(self, backend, real_service_api):
        """Test closing a ticket."""
        backend.add("PUT", "/api/service/closeTicket", {"msg": "Ticket closed"})

        msg = await real_service_api.close_ticket("abc123")

        assert msg == "Ticket closed"
        assert backend.body_of() == {"ticketId": "abc123"}


class TestHistoryLoader:
    """Tests for HistoryLoader over the HTTP layer."""

    async def test_load_parses_and_skips(self, backend, real_service_api, debug_log):
        """Test that unusable records are skipped with a warning."""
        backend.add("GET", "/api/service/chat/abc123", [
            chat_record("m1", "abc123", "Hallo"),
            {"_id": "m2", "ticketId": "abc123"},
            chat_record("m3", "xyz789", "falsches Ticket"),
            {"_id": "m4", "message": "ohne ticketId"},
        ])
        loader = HistoryLoader(real_service_api)
        loader.set_debug_callback(debug_log)

        messages = await loader.load("abc123")

        assert [m.id for m in messages] == ["m1", "m4"]
        assert messages[1].ticket_id == "abc123"
        assert ("warning", "History", "Skipped 2 unusable record(s) for ticket abc123") in debug_log.entries

    async def test_load_failure(self, real_service_api):
        """Test that request failures become HistoryLoadError."""
        loader = HistoryLoader(real_service_api)

        with pytest.raises(HistoryLoadError) as exc_info:
            await loader.load("unbekannt")

        assert exc_info.value.ticket_id == "unbekannt"
        assert exc_info.value.cause.is_not_found

    async def test_ticket_id_is_escaped(self, backend, api_client):
        """Test that the ticket id is URL-escaped in the path."""
        backend.add("GET", "/api/service/chat/a/b", [])

        await ServiceApi(api_client).get_chat_messages("a/b")

        assert backend.requests[-1].url.raw_path == b"/api/service/chat/a%2Fb"
