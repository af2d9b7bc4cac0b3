"""
Unit tests for MessageStore: live-window filtering and expiry purge.
"""

from datetime import timedelta

import pytest

from studynotes_chat.models.message import ChatMessage
from studynotes_chat.services.message_store import MessageStore


def _message(clock, content: str, age: timedelta = timedelta(0), reply_to=None) -> ChatMessage:
    created = clock() - age
    return ChatMessage(
        content=content,
        user_id="user-alice",
        user_name="Alice",
        created_at=created,
        updated_at=created,
        reply_to=reply_to,
    )


@pytest.mark.asyncio
async def test_get_returns_live_message(init_test_db, clock):
    store = MessageStore(clock=clock)
    message = await store.insert(_message(clock, "hello"))

    found = await store.get(message.id)

    assert found is not None
    assert found.content == "hello"


@pytest.mark.asyncio
async def test_get_ignores_message_past_ttl(init_test_db, clock):
    store = MessageStore(clock=clock)
    message = await store.insert(_message(clock, "old", age=timedelta(hours=25)))

    assert await store.get(message.id) is None


@pytest.mark.asyncio
async def test_message_expires_after_clock_advances(init_test_db, clock):
    store = MessageStore(clock=clock)
    message = await store.insert(_message(clock, "soon gone"))

    clock.advance(hours=23, minutes=59)
    assert await store.get(message.id) is not None

    clock.advance(minutes=2)
    assert await store.get(message.id) is None


@pytest.mark.asyncio
async def test_get_unknown_or_empty_id(init_test_db, clock):
    store = MessageStore(clock=clock)
    assert await store.get("missing") is None
    assert await store.get("") is None


@pytest.mark.asyncio
async def test_find_recent_is_newest_first_and_windowed(init_test_db, clock):
    store = MessageStore(clock=clock)
    await store.insert(_message(clock, "expired", age=timedelta(hours=30)))
    await store.insert(_message(clock, "first", age=timedelta(minutes=10)))
    await store.insert(_message(clock, "second", age=timedelta(minutes=5)))
    await store.insert(_message(clock, "third", age=timedelta(minutes=1)))

    recent = await store.find_recent(skip=0, limit=10)

    assert [m.content for m in recent] == ["third", "second", "first"]
    assert await store.count_recent() == 3


@pytest.mark.asyncio
async def test_get_many_skips_expired(init_test_db, clock):
    store = MessageStore(clock=clock)
    live = await store.insert(_message(clock, "live"))
    old = await store.insert(_message(clock, "old", age=timedelta(days=2)))

    found = await store.get_many([live.id, old.id, live.id, ""])

    assert [m.id for m in found] == [live.id]


@pytest.mark.asyncio
async def test_delete(init_test_db, clock):
    store = MessageStore(clock=clock)
    message = await store.insert(_message(clock, "bye"))

    assert await store.delete(message.id) is True
    assert await store.get(message.id) is None
    assert await store.delete(message.id) is False


@pytest.mark.asyncio
async def test_purge_expired_removes_only_old_messages(init_test_db, clock):
    store = MessageStore(clock=clock)
    await store.insert(_message(clock, "old-1", age=timedelta(hours=25)))
    await store.insert(_message(clock, "old-2", age=timedelta(days=3)))
    keep = await store.insert(_message(clock, "fresh", age=timedelta(hours=1)))

    deleted = await store.purge_expired()

    assert deleted == 2
    remaining = await ChatMessage.find_all().to_list()
    assert [m.id for m in remaining] == [keep.id]


def test_model_declares_ttl_index():
    ttl_indexes = [
        index.document for index in ChatMessage.Settings.indexes
        if "expireAfterSeconds" in index.document
    ]
    assert len(ttl_indexes) == 1
    assert ttl_indexes[0]["expireAfterSeconds"] == 24 * 60 * 60
    assert list(ttl_indexes[0]["key"].keys()) == ["created_at"]
