# app/models/__init__.py
from app.models.chat_message import Message, MessageMetadata, Role
from app.models.chat_session import ChatSession

__all__ = ["ChatSession", "Message", "MessageMetadata", "Role"]
