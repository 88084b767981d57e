"""
Chat orchestration for one inbound turn:
validate -> resolve conversation -> save user turn -> load history -> build prompt
-> call LLM -> save assistant turn -> reply.
No state is kept between requests; history is rebuilt from the message store each call.
Guest turns are never stored and never see history.
"""
import asyncio
import logging

from sqlalchemy.orm import Session

from wellbeing_chat.errors import InvalidRequest
from wellbeing_chat.models.message import MessageRole
from wellbeing_chat.repositories.message_repository import MessageRepository
from wellbeing_chat.services.conversation_resolver import ConversationResolver, LatestMessageResolver
from wellbeing_chat.services.llm_client import LLMClient, extract_reply

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a compassionate and empathetic well-being assistant.

Your role:
- Provide supportive, non-judgmental responses that help people explore their feelings.
- Use active listening techniques and ask thoughtful follow-up questions.
- Always be warm and understanding.

Rules:
- Only discuss emotional and mental well-being. If the user asks about unrelated topics (coding, homework, news, etc.), politely decline and steer the conversation back to how they are feeling.
- You are not a replacement for a licensed professional; suggest professional help when appropriate.
- If the user mentions self-harm, suicide, or being in danger, respond with care and urge them to contact local emergency services or a crisis hotline immediately."""

DEFAULT_REPLY = "I'm here for you. Could you tell me a little more about how you're feeling?"


def build_prompt(history: list[dict]) -> list[dict]:
    """System persona turn followed by every history turn, role for role."""
    prompt = [{"role": "system", "content": SYSTEM_PROMPT}]
    for m in history:
        role = "user" if m["role"] == MessageRole.USER.value else "assistant"
        prompt.append({"role": role, "content": m["text"]})
    return prompt


class ChatService:
    """Orchestrates one chat turn over the message store and the LLM client."""

    def __init__(
        self,
        llm_client: LLMClient,
        repository: MessageRepository | None = None,
        resolver: ConversationResolver | None = None,
    ):
        self._llm = llm_client
        self._repo = repository or MessageRepository()
        self._resolver = resolver or LatestMessageResolver(self._repo)

    async def handle_message(
        self,
        db: Session,
        user_id: str | None,
        message: str | None,
        conversation_id: str | None = None,
        guest: bool = False,
    ) -> dict:
        """
        Returns {"response": reply_text, "conversationId": id}.
        If the LLM call fails the user turn stays saved (no rollback); UpstreamFailure propagates.
        """
        if not message or not message.strip():
            raise InvalidRequest("Message is required")
        if not user_id or not user_id.strip():
            raise InvalidRequest("userId is required")

        loop = asyncio.get_event_loop()
        store = None if guest else db

        conversation_id = await loop.run_in_executor(
            None,
            lambda: self._resolver.resolve(store, user_id, conversation_id),
        )

        history: list[dict] = []
        if not guest:
            def _save_and_load():
                self._repo.save_message(db, user_id, conversation_id, MessageRole.USER.value, message)
                return self._repo.get_messages_by_user(db, user_id, conversation_id)

            history = await loop.run_in_executor(None, _save_and_load)
        if not history:
            history = [{"role": MessageRole.USER.value, "text": message}]

        data = await self._llm.chat_completion(build_prompt(history))
        reply = extract_reply(data)
        if reply is None:
            logger.warning("Unexpected LLM response shape; using default reply")
            reply = DEFAULT_REPLY

        if not guest:
            await loop.run_in_executor(
                None,
                lambda: self._repo.save_message(
                    db, user_id, conversation_id, MessageRole.ASSISTANT.value, reply
                ),
            )

        return {"response": reply, "conversationId": conversation_id}

    async def list_messages(self, db: Session, user_id: str | None, conversation_id: str | None = None) -> list[dict]:
        if not user_id or not user_id.strip():
            raise InvalidRequest("userId is required")
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            None,
            lambda: self._repo.get_messages_by_user(db, user_id, conversation_id),
        )
