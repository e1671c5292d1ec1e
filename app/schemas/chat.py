# app/schemas/chat.py
from typing import Literal, Optional

from pydantic import ConfigDict, Field, field_validator

from app.models import Message
from app.models.base import CamelModel
from app.schemas.completion import ProviderName, Usage


class SessionCreate(CamelModel):
    title: Optional[str] = None


class ChatMessageRequest(CamelModel):
    model_config = ConfigDict(protected_namespaces=())

    content: str
    role: Literal["user"] = "user"
    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0, le=1)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    provider: Optional[ProviderName] = None
    api_key: Optional[str] = None

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message content is required")
        return v


class ChatMessageResponse(CamelModel):
    user_message: Message
    ai_message: Message
    usage: Optional[Usage] = None
    error: Optional[str] = None
    superseded: Optional[bool] = None


class GenerateTitleRequest(CamelModel):
    first_message: str
    api_key: Optional[str] = None

    @field_validator("first_message")
    @classmethod
    def first_message_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("First message is required")
        return v


class GenerateTitleResponse(CamelModel):
    title: str
