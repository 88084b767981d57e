"""One chat turn. Conversations are not stored separately; they are the set of
messages sharing a conversation_id for one user."""
import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Index
from wellbeing_chat.database import Base


class MessageRole(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False, index=True)  # opaque caller-supplied id, not a FK
    conversation_id = Column(String(128), nullable=False, index=True)
    role = Column(String(16), nullable=False)  # "user" | "assistant"
    text = Column(Text, nullable=False)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "conversationId": self.conversation_id,
            "role": self.role,
            "text": self.text,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


Index("ix_messages_user_conversation_ts", Message.user_id, Message.conversation_id, Message.timestamp)
