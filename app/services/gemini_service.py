# app/services/gemini_service.py
import logging
from typing import Optional

import openai
from openai import OpenAI

from app.core.config import settings
from app.core.exceptions import ProviderError
from app.schemas.completion import CompletionRequest, CompletionResult, ProviderName, Usage
from app.utils.prompt_builder import build_prompt

logger = logging.getLogger(__name__)

MISSING_KEY = "No API key provided. Please add your Gemini API key in settings."
INVALID_KEY = "Invalid or missing Gemini API key. Please check your configuration."
QUOTA_EXCEEDED = "Gemini API quota exceeded. Please try again later or upgrade your plan."
RATE_LIMITED = "Rate limit exceeded. Please wait a moment before sending another message."
UNAVAILABLE = "Gemini service is temporarily unavailable. Please try again later."
EMPTY_RESPONSE = "No response generated from AI service"


class GeminiService:
    """Primary provider. Talks to Gemini through its OpenAI-compatible endpoint."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.base_url = base_url or settings.GEMINI_BASE_URL
        self.timeout = timeout or settings.PROVIDER_TIMEOUT_SECONDS

    def _client(self, api_key: str) -> OpenAI:
        # no automatic retries; a resend is the caller's decision
        return OpenAI(api_key=api_key, base_url=self.base_url, timeout=self.timeout, max_retries=0)

    def _complete(self, api_key: str, prompt: str, model: str, temperature: float,
                  max_tokens: int, **extra):
        return self._client(api_key).chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            max_tokens=max_tokens,
            **extra,
        )

    def generate_chat_completion(self, request: CompletionRequest) -> CompletionResult:
        api_key = request.api_key or self.api_key
        logger.debug("Gemini key check: provided=%s env=%s", bool(request.api_key), bool(self.api_key))
        if not api_key:
            raise ProviderError(MISSING_KEY)

        prompt = build_prompt(request.message, request.session_history)
        try:
            response = self._complete(
                api_key, prompt, request.model, request.temperature, request.max_tokens, top_p=0.8,
            )
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            logger.warning("Gemini rejected credentials: %s", e)
            raise ProviderError(INVALID_KEY) from e
        except openai.RateLimitError as e:
            logger.warning("Gemini rate limited: %s", e)
            if "quota" in str(e).lower():
                raise ProviderError(QUOTA_EXCEEDED) from e
            raise ProviderError(RATE_LIMITED) from e
        except (openai.APIConnectionError, openai.InternalServerError) as e:
            logger.warning("Gemini unreachable: %s", e)
            raise ProviderError(UNAVAILABLE) from e
        except openai.BadRequestError as e:
            # the Gemini endpoint answers a bad key with a 400, not a 401
            if "api key" in str(e).lower():
                logger.warning("Gemini rejected credentials: %s", e)
                raise ProviderError(INVALID_KEY) from e
            logger.exception("Gemini service error")
            raise ProviderError(f"Gemini service error: {e.message or 'Unknown error occurred'}") from e
        except openai.APIError as e:
            logger.exception("Gemini service error")
            raise ProviderError(f"Gemini service error: {e.message or 'Unknown error occurred'}") from e

        text = response.choices[0].message.content if response.choices else None
        if not text or not text.strip():
            raise ProviderError(EMPTY_RESPONSE)

        usage = Usage()
        if response.usage is not None:
            usage = Usage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
            )
        return CompletionResult(
            content=text.strip(),
            model=request.model,
            provider=ProviderName.GEMINI,
            usage=usage,
        )

    def generate_text(self, prompt: str, model: str, temperature: float, max_tokens: int,
                      api_key: Optional[str] = None) -> Optional[str]:
        """Raw single-prompt call used for titles. Returns None when there is no key."""
        key = api_key or self.api_key
        if not key:
            return None
        response = self._complete(key, prompt, model, temperature, max_tokens)
        text = response.choices[0].message.content if response.choices else None
        return text.strip() if text else None

    def is_service_available(self) -> bool:
        if not self.api_key:
            return False
        try:
            text = self.generate_text("Hello", settings.DEFAULT_MODEL, 0.7, 10)
        except openai.OpenAIError as e:
            logger.warning("Gemini availability check failed: %s", e)
            return False
        return bool(text)
