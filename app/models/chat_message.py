# app/models/chat_message.py
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import ConfigDict

from app.models.base import CamelModel


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class MessageMetadata(CamelModel):
    # which backend produced an assistant message, or why it failed
    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    model: Optional[str] = None
    tokens: Optional[int] = None
    error: Optional[str] = None


class Message(CamelModel):
    # messages are never updated after creation
    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    role: Role
    timestamp: datetime
    session_id: str
    metadata: Optional[MessageMetadata] = None
