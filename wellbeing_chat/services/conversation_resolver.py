"""
Conversation id resolution. Conversations are not stored as records; an id is
either supplied by the caller, inherited from the user's latest message, or
minted as conv_<userId>_<epoch-millis>.

LatestMessageResolver is last-writer-wins: a user with several open threads who
omits conversationId is appended to whichever thread has the newest message.
Swap in ExplicitConversationResolver to require ids instead.
"""
import logging
import time

from sqlalchemy.orm import Session

from wellbeing_chat.errors import InvalidRequest
from wellbeing_chat.repositories.message_repository import MessageRepository

logger = logging.getLogger(__name__)


def mint_conversation_id(user_id: str, now_ms: int | None = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"conv_{user_id}_{now_ms}"


class ConversationResolver:
    def resolve(self, db: Session | None, user_id: str, requested_id: str | None) -> str:
        raise NotImplementedError


class LatestMessageResolver(ConversationResolver):
    def __init__(self, repository: MessageRepository | None = None):
        self._repo = repository or MessageRepository()

    def resolve(self, db: Session | None, user_id: str, requested_id: str | None) -> str:
        if requested_id:
            return requested_id
        # guests have no session and no history to continue
        if db is not None:
            latest = self._repo.get_latest_message(db, user_id)
            if latest:
                logger.debug("Continuing conversation %s for user %s", latest["conversationId"], user_id)
                return latest["conversationId"]
        conversation_id = mint_conversation_id(user_id)
        logger.debug("Minted conversation %s", conversation_id)
        return conversation_id


class ExplicitConversationResolver(ConversationResolver):
    def resolve(self, db: Session | None, user_id: str, requested_id: str | None) -> str:
        if not requested_id:
            raise InvalidRequest("conversationId is required")
        return requested_id
