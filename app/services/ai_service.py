# app/services/ai_service.py
import logging
from typing import Dict, Optional, Protocol

from app.core.config import settings
from app.schemas.completion import CompletionRequest, CompletionResult, ProviderName
from app.services.gemini_service import GeminiService
from app.services.huggingface_service import HuggingFaceService
from app.utils.prompt_builder import build_title_prompt

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Conversation"

# case-sensitive markers for models served by Hugging Face
HUGGINGFACE_MODEL_MARKERS = ("Qwen", "huggingface")


class CompletionProvider(Protocol):
    def generate_chat_completion(self, request: CompletionRequest) -> CompletionResult: ...

    def is_service_available(self) -> bool: ...


def get_provider_from_model(model: str) -> ProviderName:
    if any(marker in model for marker in HUGGINGFACE_MODEL_MARKERS):
        return ProviderName.HUGGINGFACE
    return ProviderName.GEMINI


class AIService:
    """Picks a provider per request and wraps the best-effort calls (titles, health)."""

    def __init__(self, gemini: Optional[GeminiService] = None,
                 huggingface: Optional[CompletionProvider] = None):
        self.gemini = gemini or GeminiService()
        self.providers: Dict[ProviderName, CompletionProvider] = {
            ProviderName.GEMINI: self.gemini,
            ProviderName.HUGGINGFACE: huggingface or HuggingFaceService(),
        }

    def select_provider(self, model: Optional[str], provider: Optional[ProviderName] = None) -> ProviderName:
        if provider is not None:
            return ProviderName(provider)
        return get_provider_from_model(model or settings.DEFAULT_MODEL)

    def generate_chat_completion(self, request: CompletionRequest) -> CompletionResult:
        name = self.select_provider(request.model, request.provider)
        logger.info("Routing completion for model %s to %s", request.model, name.value)
        return self.providers[name].generate_chat_completion(request)

    def generate_title(self, first_message: str, api_key: Optional[str] = None) -> str:
        try:
            title = self.gemini.generate_text(
                build_title_prompt(first_message),
                model=settings.DEFAULT_MODEL,
                temperature=0.3,
                max_tokens=20,
                api_key=api_key,
            )
        except Exception:
            logger.exception("Title generation error")
            return DEFAULT_TITLE
        return title or DEFAULT_TITLE

    def is_service_available(self) -> bool:
        for name in (ProviderName.GEMINI, ProviderName.HUGGINGFACE):
            try:
                if self.providers[name].is_service_available():
                    return True
            except Exception:
                logger.exception("Availability check for %s failed", name.value)
        return False
