from datetime import datetime, timedelta

import pytest

from wellbeing_chat.errors import InvalidRequest
from wellbeing_chat.repositories import message_repository


def test_save_message_stamps_time_and_returns_record(db):
    before = datetime.utcnow()
    saved = message_repository.save_message(db, "u1", "c1", "user", "hello")

    assert saved["id"]
    assert saved["userId"] == "u1"
    assert saved["conversationId"] == "c1"
    assert saved["role"] == "user"
    assert saved["text"] == "hello"
    assert datetime.fromisoformat(saved["timestamp"]) >= before


def test_save_message_keeps_given_timestamp(db):
    ts = datetime(2024, 1, 2, 3, 4, 5)
    saved = message_repository.save_message(db, "u1", "c1", "user", "hello", timestamp=ts)
    assert saved["timestamp"] == ts.isoformat()


def test_messages_come_back_in_timestamp_order(db):
    base = datetime(2024, 1, 1)
    # inserted out of order on purpose
    message_repository.save_message(db, "u1", "c1", "assistant", "second", timestamp=base + timedelta(seconds=2))
    message_repository.save_message(db, "u1", "c1", "user", "first", timestamp=base + timedelta(seconds=1))
    message_repository.save_message(db, "u1", "c1", "user", "third", timestamp=base + timedelta(seconds=3))

    texts = [m["text"] for m in message_repository.get_messages_by_user(db, "u1", "c1")]
    assert texts == ["first", "second", "third"]


def test_sequential_saves_preserve_insertion_order(db):
    for i in range(5):
        message_repository.save_message(db, "u1", "c1", "user", f"m{i}")

    texts = [m["text"] for m in message_repository.get_messages_by_user(db, "u1")]
    assert texts == [f"m{i}" for i in range(5)]


def test_filter_by_user_and_conversation(db):
    message_repository.save_message(db, "u1", "c1", "user", "u1 c1")
    message_repository.save_message(db, "u1", "c2", "user", "u1 c2")
    message_repository.save_message(db, "u2", "c1", "user", "u2 c1")

    assert [m["text"] for m in message_repository.get_messages_by_user(db, "u1")] == ["u1 c1", "u1 c2"]
    assert [m["text"] for m in message_repository.get_messages_by_user(db, "u1", "c2")] == ["u1 c2"]
    assert [m["text"] for m in message_repository.get_messages_by_user(db, "u2")] == ["u2 c1"]


def test_no_messages_is_empty_list(db):
    assert message_repository.get_messages_by_user(db, "nobody") == []
    assert message_repository.get_latest_message(db, "nobody") is None


def test_legacy_ai_role_is_normalized(db):
    saved = message_repository.save_message(db, "u1", "c1", "ai", "hi there")
    assert saved["role"] == "assistant"


@pytest.mark.parametrize("role,text", [("system", "x"), ("bot", "x"), ("user", ""), ("user", "   ")])
def test_invalid_records_are_rejected(db, role, text):
    with pytest.raises(InvalidRequest):
        message_repository.save_message(db, "u1", "c1", role, text)
    assert message_repository.get_messages_by_user(db, "u1") == []


def test_latest_message_spans_conversations(db):
    base = datetime(2024, 1, 1)
    message_repository.save_message(db, "u1", "old", "user", "a", timestamp=base)
    message_repository.save_message(db, "u1", "new", "user", "b", timestamp=base + timedelta(minutes=1))

    assert message_repository.get_latest_message(db, "u1")["conversationId"] == "new"
