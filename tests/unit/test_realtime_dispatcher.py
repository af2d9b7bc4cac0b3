"""
Unit tests for RealtimeEventDispatcher: client frames are routed through the
chat service and failures come back to the sender as error frames.
"""

import json

import pytest

from conftest import FakeWebSocket
from studynotes_chat.core.auth import IdentityResolver
from studynotes_chat.services.chat_service import ChatService
from studynotes_chat.services.message_store import MessageStore
from studynotes_chat.services.realtime import RealtimeHub
from studynotes_chat.services.realtime_events import RealtimeEventDispatcher


@pytest.fixture
def hub(settings) -> RealtimeHub:
    return RealtimeHub(IdentityResolver(settings))


@pytest.fixture
def dispatcher(init_test_db, hub, clock) -> RealtimeEventDispatcher:
    service = ChatService(MessageStore(clock=clock), publisher=hub)
    return RealtimeEventDispatcher(hub, service)


def _frame(event, **data) -> str:
    return json.dumps({"event": event, "data": data})


@pytest.mark.asyncio
class TestRealtimeEventDispatcher:

    async def test_send_message_acks_sender_and_broadcasts_to_others(self, dispatcher, hub, alice, bob):
        ws_a, ws_b = FakeWebSocket(), FakeWebSocket()
        await hub.connect(ws_a, alice)
        await hub.connect(ws_b, bob)

        await dispatcher.handle_text(ws_a, alice, _frame("sendMessage", content=" hi "))

        assert ws_a.events() == ["onlineUsersUpdate", "onlineUsersUpdate", "messageSent"]
        assert ws_b.events() == ["onlineUsersUpdate", "newMessage"]
        assert ws_b.sent[-1]["data"]["content"] == "hi"
        assert ws_a.sent[-1]["data"]["id"] == ws_b.sent[-1]["data"]["id"]

    async def test_invalid_content_reported_to_sender_only(self, dispatcher, hub, alice, bob):
        ws_a, ws_b = FakeWebSocket(), FakeWebSocket()
        await hub.connect(ws_a, alice)
        await hub.connect(ws_b, bob)

        await dispatcher.handle_text(ws_a, alice, _frame("sendMessage", content="x" * 1001))

        assert ws_a.sent[-1]["event"] == "error"
        assert ws_a.sent[-1]["data"]["event"] == "sendMessage"
        assert ws_a.sent[-1]["data"]["status"] == 400
        assert ws_b.events() == ["onlineUsersUpdate"]

    async def test_edit_by_non_author_is_rejected(self, dispatcher, hub, alice, bob):
        ws_a, ws_b = FakeWebSocket(), FakeWebSocket()
        await hub.connect(ws_a, alice)
        await hub.connect(ws_b, bob)
        await dispatcher.handle_text(ws_a, alice, _frame("sendMessage", content="mine"))
        message_id = ws_a.sent[-1]["data"]["id"]

        await dispatcher.handle_text(ws_b, bob, _frame("editMessage", messageId=message_id, content="hijack"))

        error = ws_b.sent[-1]
        assert error["event"] == "error"
        assert error["data"]["status"] == 403
        assert "messageEdited" not in ws_a.events()

    async def test_reaction_broadcasts_to_everyone(self, dispatcher, hub, alice, bob):
        ws_a, ws_b = FakeWebSocket(), FakeWebSocket()
        await hub.connect(ws_a, alice)
        await hub.connect(ws_b, bob)
        await dispatcher.handle_text(ws_a, alice, _frame("sendMessage", content="react to me"))
        message_id = ws_a.sent[-1]["data"]["id"]

        await dispatcher.handle_text(ws_b, bob, _frame("addReaction", messageId=message_id, emoji="👍"))

        for ws in (ws_a, ws_b):
            assert ws.sent[-1]["event"] == "reactionAdded"
            assert ws.sent[-1]["data"]["reactions"] == [{"user": bob.id, "emoji": "👍"}]

    async def test_delete_broadcasts_message_id(self, dispatcher, hub, alice, bob):
        ws_a, ws_b = FakeWebSocket(), FakeWebSocket()
        await hub.connect(ws_a, alice)
        await hub.connect(ws_b, bob)
        await dispatcher.handle_text(ws_a, alice, _frame("sendMessage", content="temporary"))
        message_id = ws_a.sent[-1]["data"]["id"]

        await dispatcher.handle_text(ws_a, alice, _frame("deleteMessage", messageId=message_id))

        assert ws_b.sent[-1] == {"event": "messageDeleted", "data": {"messageId": message_id}}

    async def test_typing_skips_sender(self, dispatcher, hub, alice, bob):
        ws_a, ws_b = FakeWebSocket(), FakeWebSocket()
        await hub.connect(ws_a, alice)
        await hub.connect(ws_b, bob)

        await dispatcher.handle_text(ws_a, alice, _frame("typing", isTyping=True))

        assert "userTyping" not in ws_a.events()
        assert ws_b.sent[-1] == {
            "event": "userTyping",
            "data": {"userId": alice.id, "userName": "Alice", "isTyping": True},
        }

    @pytest.mark.parametrize("raw", ["not json", "[]", '{"data": {}}', '{"event": ""}'])
    async def test_malformed_frames(self, dispatcher, hub, alice, raw):
        ws = FakeWebSocket()
        await hub.connect(ws, alice)

        await dispatcher.handle_text(ws, alice, raw)

        assert ws.sent[-1] == {
            "event": "error",
            "data": {"event": None, "status": 400, "detail": "Malformed frame"},
        }

    async def test_unknown_event(self, dispatcher, hub, alice):
        ws = FakeWebSocket()
        await hub.connect(ws, alice)

        await dispatcher.handle_text(ws, alice, _frame("shout", text="hey"))

        assert ws.sent[-1]["data"] == {"event": "shout", "status": 400, "detail": "Unknown event"}

    async def test_missing_payload_field(self, dispatcher, hub, alice):
        ws = FakeWebSocket()
        await hub.connect(ws, alice)

        await dispatcher.handle_text(ws, alice, _frame("deleteMessage"))

        error = ws.sent[-1]["data"]
        assert error["event"] == "deleteMessage"
        assert error["status"] == 400
        assert isinstance(error["detail"], list)
