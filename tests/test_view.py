"""Unit tests for the chat view lifecycle."""
import asyncio

import pytest

from conftest import FakeServiceApi
from ticketchat.chat import ChatView, InMemoryTransport, MessageOrigin
from ticketchat.errors import ApiError


def live(ticket_id: str, text: str, message_id: str, user_id: str = "s1", **extra) -> dict:
    payload = {"_id": message_id, "ticketId": ticket_id, "userId": user_id, "username": "werkstatt", "message": text}
    payload.update(extra)
    return payload


class TestMount:
    """Tests for mounting and history loading."""

    async def test_mount_loads_history(self, customer, service_api, connected_transport):
        """Test that the store holds the server history after mount."""
        view = ChatView("abc123", customer, service_api, connected_transport)

        assert await view.mount() is True

        assert view.is_mounted
        assert [m.id for m in view.store] == ["m1", "m2"]
        assert all(m.origin == MessageOrigin.SERVER_CONFIRMED for m in view.store)
        assert service_api.requests == ["abc123"]
        view.unmount()

    async def test_events_during_load_follow_history(self, customer, service_api, connected_transport):
        """Test that live events arriving during the load land after the history."""
        service_api.gate = asyncio.Event()
        view = ChatView("abc123", customer, service_api, connected_transport)

        task = asyncio.create_task(view.mount())
        await asyncio.sleep(0)
        connected_transport.deliver(live("abc123", "Fertig!", "m3"))
        assert len(view.store) == 0

        service_api.gate.set()
        await task

        assert [m.id for m in view.store] == ["m1", "m2", "m3"]
        view.unmount()

    async def test_buffered_duplicate_of_history_is_skipped(self, customer, service_api, connected_transport):
        """Test that an event also present in the history is stored once."""
        service_api.gate = asyncio.Event()
        view = ChatView("abc123", customer, service_api, connected_transport)

        task = asyncio.create_task(view.mount())
        await asyncio.sleep(0)
        connected_transport.deliver(live("abc123", "Danke!", "m2", user_id="u1"))
        service_api.gate.set()
        await task

        assert [m.id for m in view.store] == ["m1", "m2"]
        view.unmount()

    async def test_mount_twice_fails(self, customer, service_api, connected_transport):
        """Test that a view cannot be mounted again."""
        view = ChatView("abc123", customer, service_api, connected_transport)
        await view.mount()

        with pytest.raises(RuntimeError):
            await view.mount()
        view.unmount()

    def test_empty_ticket_fails(self, customer, service_api, transport):
        """Test that a view needs a ticket id."""
        with pytest.raises(ValueError):
            ChatView("", customer, service_api, transport)


class TestLoadFailure:
    """Tests for a failing history request."""

    async def test_failure_reports_one_error(self, customer, service_api, connected_transport):
        """Test that a failed load reports exactly once and leaves the store empty."""
        service_api.error = ApiError("Ticket not found", code="HTTP_404", status=404)
        errors: list[str] = []
        view = ChatView("abc123", customer, service_api, connected_transport, on_error=errors.append)

        assert await view.mount() is False

        assert errors == ["Messages could not be loaded: Ticket not found"]
        assert view.load_failed
        assert len(view.store) == 0

    async def test_live_messages_still_arrive(self, customer, service_api, connected_transport):
        """Test that the view keeps working after a failed load."""
        service_api.error = ApiError("offline", code="NETWORK_ERROR", is_network_error=True)
        view = ChatView("abc123", customer, service_api, connected_transport, on_error=lambda m: None)
        await view.mount()

        connected_transport.deliver(live("abc123", "Fertig!", "m3"))

        assert [m.text for m in view.store] == ["Fertig!"]
        view.unmount()


class TestUnmount:
    """Tests for teardown."""

    async def test_unmount_during_load_discards_result(self, customer, service_api, connected_transport):
        """Test that a load finishing after teardown changes nothing."""
        service_api.gate = asyncio.Event()
        errors: list[str] = []
        view = ChatView("abc123", customer, service_api, connected_transport, on_error=errors.append)

        task = asyncio.create_task(view.mount())
        await asyncio.sleep(0)
        view.unmount()
        service_api.gate.set()

        assert await task is False
        assert view.is_unmounted
        assert view.store.discarded
        assert len(view.store) == 0
        assert errors == []
        assert connected_transport.subscribed_tickets() == []

    async def test_unmount_releases_subscription(self, customer, service_api, connected_transport):
        """Test that a torn-down view no longer receives events."""
        view = ChatView("abc123", customer, service_api, connected_transport)
        await view.mount()

        view.unmount()
        delivered = connected_transport.deliver(live("abc123", "zu spaet", "m4"))

        assert delivered == 0
        assert [m.id for m in view.store] == ["m1", "m2"]

    async def test_unmount_twice_is_safe(self, customer, service_api, connected_transport):
        """Test that unmount can be called more than once."""
        view = ChatView("abc123", customer, service_api, connected_transport)
        await view.mount()

        view.unmount()
        view.unmount()

        assert view.is_unmounted

    async def test_unmount_stops_typing(self, customer, service_api, connected_transport):
        """Test that leaving the chat tells the other side typing stopped."""
        view = ChatView("abc123", customer, service_api, connected_transport)
        await view.mount()
        view.composer.set_text("Hal")

        view.unmount()
        await connected_transport.flush()

        assert connected_transport.emitted[-1] == ("stopTyping", {"ticketId": "abc123"})

    async def test_context_manager(self, customer, service_api, connected_transport):
        """Test mounting and unmounting through async with."""
        async with ChatView("abc123", customer, service_api, connected_transport) as view:
            assert view.is_mounted

        assert view.is_unmounted


class TestSubmit:
    """Tests for sending from a view."""

    async def test_submit_appends_optimistic(self, customer, service_api, connected_transport):
        """Test that a submitted message appears at the end before any echo."""
        view = ChatView("abc123", customer, service_api, connected_transport)
        await view.mount()

        message = view.submit("Wie lange dauert es?")

        assert view.store.messages[-1] == message
        assert message.is_optimistic
        assert view.is_own(message)
        view.unmount()

    async def test_submit_before_mount_is_ignored(self, customer, service_api, transport):
        """Test that nothing is sent before the history is in place."""
        view = ChatView("abc123", customer, service_api, transport)

        assert view.submit("Hallo") is None
        assert len(transport.outbox) == 0

    async def test_echo_confirms_in_place(self, customer, service_api):
        """Test that the server echo replaces the optimistic entry."""
        transport = InMemoryTransport(echo=True)
        await transport.connect()
        view = ChatView("abc123", customer, service_api, transport)
        await view.mount()

        message = view.submit("Hallo")
        await transport.flush()

        assert len(view.store) == 3
        confirmed = view.store.messages[-1]
        assert confirmed.origin == MessageOrigin.SERVER_CONFIRMED
        assert confirmed.id != message.id
        assert confirmed.text == "Hallo"
        assert view.store.pending() == []
        view.unmount()

    async def test_echo_without_client_id_is_appended(self, customer, service_api, connected_transport):
        """Test that a server not echoing clientId yields a second entry."""
        view = ChatView("abc123", customer, service_api, connected_transport)
        await view.mount()

        view.submit("Hallo")
        connected_transport.deliver(live("abc123", "Hallo", "m5", user_id="u1"))

        assert [m.origin for m in view.store.messages[-2:]] == [
            MessageOrigin.LOCAL_OPTIMISTIC,
            MessageOrigin.SERVER_CONFIRMED,
        ]
        view.unmount()


class TestIsolation:
    """Tests for several views sharing one transport."""

    async def test_views_only_see_their_ticket(self, customer, service_api, connected_transport):
        """Test that a message for one ticket never reaches another ticket's view."""
        first = ChatView("abc123", customer, service_api, connected_transport)
        second = ChatView("xyz789", customer, service_api, connected_transport)
        await first.mount()
        await second.mount()

        connected_transport.deliver(live("xyz789", "Termin bestaetigt", "m10"))

        assert [m.id for m in first.store] == ["m1", "m2"]
        assert [m.id for m in second.store] == ["m9", "m10"]
        first.unmount()
        second.unmount()

    async def test_remounted_view_starts_fresh(self, customer, service_api, connected_transport):
        """Test that reopening a chat reloads the history into a new store."""
        first = ChatView("abc123", customer, service_api, connected_transport)
        await first.mount()
        first.submit("Hallo")
        first.unmount()

        second = ChatView("abc123", customer, service_api, connected_transport)
        await second.mount()

        assert [m.id for m in second.store] == ["m1", "m2"]
        assert service_api.requests == ["abc123", "abc123"]
        second.unmount()


class TestTyping:
    """Tests for the typing indicator inside a view."""

    async def test_other_party_typing_then_message(self, customer, service_api, connected_transport):
        """Test that a message from the typist clears the indicator."""
        view = ChatView("abc123", customer, service_api, connected_transport)
        await view.mount()

        connected_transport.deliver_typing({"ticketId": "abc123", "userId": "s1", "username": "werkstatt"})
        assert view.typing.typing_user == "werkstatt"

        connected_transport.deliver(live("abc123", "Fertig!", "m3"))
        assert view.typing.typing_user is None
        view.unmount()


class TestConversation:
    """End-to-end conversations on a single ticket."""

    async def test_history_then_optimistic_question(self, customer, connected_transport):
        """Test that a question lands after the greeting and is sent once."""
        api = FakeServiceApi({
            "abc123": [{"_id": "1", "ticketId": "abc123", "message": "Hallo", "createdAt": "2024-05-02T09:00:00Z"}],
        })
        view = ChatView("abc123", customer, api, connected_transport)
        await view.mount()

        view.submit("Wie lange dauert es?")

        messages = view.store.messages
        assert len(messages) == 2
        assert messages[0].id == "1"
        assert messages[1].text == "Wie lange dauert es?"
        assert messages[1].origin == MessageOrigin.LOCAL_OPTIMISTIC

        await connected_transport.flush()
        sent = connected_transport.sent_messages()
        assert len(sent) == 1
        assert sent[0].message == "Wie lange dauert es?"
        assert sent[0].ticket_id == "abc123"
        view.unmount()

    async def test_live_message_reaches_only_its_ticket(self, customer, connected_transport):
        """Test that "Fertig!" for abc123 grows abc123 and leaves xyz789 alone."""
        api = FakeServiceApi()
        abc = ChatView("abc123", customer, api, connected_transport)
        xyz = ChatView("xyz789", customer, api, connected_transport)
        await abc.mount()
        await xyz.mount()

        connected_transport.deliver({"ticketId": "abc123", "message": "Fertig!", "userId": "s1", "username": "werkstatt"})

        assert len(abc.store) == 1
        assert len(xyz.store) == 0
        abc.unmount()
        xyz.unmount()
