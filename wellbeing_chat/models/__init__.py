from wellbeing_chat.models.user import User
from wellbeing_chat.models.message import Message, MessageRole

__all__ = ["User", "Message", "MessageRole"]
