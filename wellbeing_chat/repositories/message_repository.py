"""
Message store: chat turns keyed by (user_id, conversation_id). DB is the only
source of history; nothing is cached.
Isolation between users is by equality filter on user_id. Each call is a single
insert or read, so no extra transaction wrapping is needed.
"""
import logging
from datetime import datetime

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wellbeing_chat.errors import InvalidRequest, StoreFailure
from wellbeing_chat.models.message import Message, MessageRole

logger = logging.getLogger(__name__)

# Older clients stored assistant turns as "ai"
ROLE_ALIASES = {"ai": MessageRole.ASSISTANT.value}


def normalize_role(role: str) -> str:
    value = (role or "").strip().lower()
    value = ROLE_ALIASES.get(value, value)
    if value not in (MessageRole.USER.value, MessageRole.ASSISTANT.value):
        raise InvalidRequest(f"Unsupported message role: {role!r}")
    return value


def save_message(
    db: Session,
    user_id: str,
    conversation_id: str,
    role: str,
    text: str,
    *,
    timestamp: datetime | None = None,
) -> dict:
    """Persist one turn. Stamps the current time unless a timestamp is given. Returns the stored record."""
    if not user_id or not conversation_id:
        raise InvalidRequest("user_id and conversation_id are required")
    if not text or not text.strip():
        raise InvalidRequest("Message text is required")

    msg = Message(
        user_id=user_id,
        conversation_id=conversation_id,
        role=normalize_role(role),
        text=text,
        timestamp=timestamp or datetime.utcnow(),
    )
    db.add(msg)
    try:
        db.commit()
        db.refresh(msg)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Message insert failed for user %s", user_id)
        raise StoreFailure() from e
    return msg.to_dict()


def get_messages_by_user(
    db: Session,
    user_id: str,
    conversation_id: str | None = None,
) -> list[dict]:
    """All turns for a user (optionally one conversation), oldest first. Empty list when none match."""
    try:
        q = db.query(Message).filter(Message.user_id == user_id)
        if conversation_id:
            q = q.filter(Message.conversation_id == conversation_id)
        rows = q.order_by(Message.timestamp).all()
    except SQLAlchemyError as e:
        logger.exception("Message query failed for user %s", user_id)
        raise StoreFailure() from e
    return [r.to_dict() for r in rows]


def get_latest_message(db: Session, user_id: str) -> dict | None:
    """Most recent turn for a user across all conversations, or None."""
    try:
        row = (
            db.query(Message)
            .filter(Message.user_id == user_id)
            .order_by(desc(Message.timestamp))
            .first()
        )
    except SQLAlchemyError as e:
        logger.exception("Latest message query failed for user %s", user_id)
        raise StoreFailure() from e
    return row.to_dict() if row else None


class MessageRepository:
    """Thin wrapper for dependency injection; delegates to module functions."""

    @staticmethod
    def save_message(
        db: Session,
        user_id: str,
        conversation_id: str,
        role: str,
        text: str,
        *,
        timestamp: datetime | None = None,
    ) -> dict:
        return save_message(db, user_id, conversation_id, role, text, timestamp=timestamp)

    @staticmethod
    def get_messages_by_user(db: Session, user_id: str, conversation_id: str | None = None) -> list[dict]:
        return get_messages_by_user(db, user_id, conversation_id)

    @staticmethod
    def get_latest_message(db: Session, user_id: str) -> dict | None:
        return get_latest_message(db, user_id)
