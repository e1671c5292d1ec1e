# app/schemas/completion.py
from enum import Enum
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator

from app.models import Role
from app.models.base import CamelModel


class ProviderName(str, Enum):
    GEMINI = "gemini"
    HUGGINGFACE = "huggingface"


class HistoryTurn(CamelModel):
    role: Role
    content: str


class Usage(CamelModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class CompletionRequest(CamelModel):
    """What every provider receives."""

    model_config = ConfigDict(protected_namespaces=())

    message: str
    session_history: List[HistoryTurn] = []
    model: str
    temperature: float = 0.7
    max_tokens: int = 1024
    provider: Optional[ProviderName] = None
    api_key: Optional[str] = None


class CompletionResult(CamelModel):
    model_config = ConfigDict(protected_namespaces=())

    content: str
    model: str
    provider: ProviderName
    usage: Usage = Field(default_factory=Usage)


class ChatCompletionIn(CamelModel):
    """Body of the stateless /chat/completions endpoint."""

    model_config = ConfigDict(protected_namespaces=())

    message: str
    history: List[HistoryTurn] = []
    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0, le=1)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    provider: Optional[ProviderName] = None
    api_key: Optional[str] = None

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message is required")
        return v
