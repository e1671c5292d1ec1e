# tests/conftest.py
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from app.core.dependencies import get_ai_service
from app.core.exceptions import ProviderError
from app.db.memory_store import MemoryStore
from app.main import app
from app.schemas.completion import CompletionRequest, CompletionResult, ProviderName, Usage
from app.services.ai_service import AIService


class FakeProvider:
    """Records every request; replies with `reply` or raises `error`."""

    def __init__(self, name: ProviderName, reply: str = "Hello from the model", error: Exception = None,
                 available: bool = True, title: Optional[str] = "Greeting Chat"):
        self.name = name
        self.reply = reply
        self.error = error
        self.available = available
        self.title = title
        self.requests: List[CompletionRequest] = []
        self.prompts: List[str] = []

    def generate_chat_completion(self, request: CompletionRequest) -> CompletionResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return CompletionResult(
            content=self.reply,
            model=request.model,
            provider=self.name,
            usage=Usage(prompt_tokens=3, completion_tokens=4, total_tokens=7),
        )

    def generate_text(self, prompt, model, temperature, max_tokens, api_key=None):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.title

    def is_service_available(self) -> bool:
        return self.available


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def gemini():
    return FakeProvider(ProviderName.GEMINI)


@pytest.fixture
def huggingface():
    return FakeProvider(ProviderName.HUGGINGFACE, reply="Hello from Qwen")


@pytest.fixture
def ai_service(gemini, huggingface):
    return AIService(gemini=gemini, huggingface=huggingface)


@pytest.fixture
def failing_gemini(gemini):
    gemini.error = ProviderError("Gemini API quota exceeded. Please try again later or upgrade your plan.")
    return gemini


@pytest.fixture
def client(ai_service):
    with TestClient(app) as c:
        app.dependency_overrides[get_ai_service] = lambda: ai_service
        yield c
    app.dependency_overrides.clear()
