import asyncio

import pytest

from tests.conftest import StubLLM
from wellbeing_chat.errors import InvalidRequest, UpstreamFailure
from wellbeing_chat.repositories import message_repository
from wellbeing_chat.services.chat_service import DEFAULT_REPLY, SYSTEM_PROMPT, ChatService


def run(coro):
    return asyncio.run(coro)


def test_turn_is_saved_on_both_sides(db, llm):
    result = run(ChatService(llm).handle_message(db, "u1", "I feel anxious"))

    assert result["response"] == "Tell me more"
    assert result["conversationId"].startswith("conv_u1_")
    stored = message_repository.get_messages_by_user(db, "u1")
    assert [(m["role"], m["text"]) for m in stored] == [
        ("user", "I feel anxious"),
        ("assistant", "Tell me more"),
    ]
    assert {m["conversationId"] for m in stored} == {result["conversationId"]}


def test_prompt_is_system_turn_plus_history(db, llm):
    service = ChatService(llm)
    first = run(service.handle_message(db, "u1", "hello"))
    run(service.handle_message(db, "u1", "still here", conversation_id=first["conversationId"]))

    prompt = llm.calls[-1]
    assert prompt[0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert prompt[1:] == [
        {"role": "user", "content": "hello"},
        {"role": "assistant", "content": "Tell me more"},
        {"role": "user", "content": "still here"},
    ]


def test_second_message_continues_latest_conversation(db, llm):
    service = ChatService(llm)
    first = run(service.handle_message(db, "u1", "one"))
    second = run(service.handle_message(db, "u1", "two"))

    assert second["conversationId"] == first["conversationId"]
    assert len(message_repository.get_messages_by_user(db, "u1", first["conversationId"])) == 4


def test_supplied_conversation_id_is_used(db, llm):
    result = run(ChatService(llm).handle_message(db, "u1", "hi", conversation_id="conv_custom"))
    assert result["conversationId"] == "conv_custom"
    assert len(message_repository.get_messages_by_user(db, "u1", "conv_custom")) == 2


def test_guest_turn_is_never_stored_and_sees_no_history(db, llm):
    message_repository.save_message(db, "u1", "c1", "user", "private history")

    result = run(ChatService(llm).handle_message(db, "u1", "just passing by", guest=True))

    assert result["response"] == "Tell me more"
    assert result["conversationId"].startswith("conv_u1_")
    assert llm.calls[-1][1:] == [{"role": "user", "content": "just passing by"}]
    assert [m["text"] for m in message_repository.get_messages_by_user(db, "u1")] == ["private history"]


@pytest.mark.parametrize("body", [{}, {"choices": []}, {"choices": [{"message": {}}]}, None, []])
def test_malformed_reply_uses_default(db, body):
    llm = StubLLM(body=body)
    result = run(ChatService(llm).handle_message(db, "u1", "hi"))

    assert result["response"] == DEFAULT_REPLY
    assert message_repository.get_messages_by_user(db, "u1")[-1]["text"] == DEFAULT_REPLY


def test_upstream_failure_keeps_user_turn(db):
    llm = StubLLM(fail=True)
    with pytest.raises(UpstreamFailure):
        run(ChatService(llm).handle_message(db, "u1", "hello?"))

    stored = message_repository.get_messages_by_user(db, "u1")
    assert [(m["role"], m["text"]) for m in stored] == [("user", "hello?")]


@pytest.mark.parametrize(
    "user_id,message",
    [("u1", None), ("u1", ""), ("u1", "   \n"), (None, "hi"), ("", "hi"), ("  ", "hi")],
)
def test_missing_input_is_rejected(db, llm, user_id, message):
    with pytest.raises(InvalidRequest):
        run(ChatService(llm).handle_message(db, user_id, message))
    assert llm.calls == []


def test_list_messages_requires_user(db, llm):
    with pytest.raises(InvalidRequest):
        run(ChatService(llm).list_messages(db, None))
