# app/services/huggingface_service.py
import logging
from typing import Optional

import requests

from app.core.config import settings
from app.core.exceptions import ProviderError
from app.schemas.completion import CompletionRequest, CompletionResult, ProviderName, Usage
from app.utils.prompt_builder import build_prompt

logger = logging.getLogger(__name__)

MISSING_KEY = "No Hugging Face API key configured. Get a free key from https://huggingface.co/settings/tokens"
INVALID_KEY = "Invalid Hugging Face API key. Get a free key from https://huggingface.co/settings/tokens"
RATE_LIMITED = "Hugging Face rate limit exceeded. Please wait a moment before sending another message."
MODEL_LOADING = "Model is loading. Free models may take a moment to initialize. Please try again."
UNAVAILABLE = "Hugging Face service is temporarily unavailable. Please try again later."
EMPTY_RESPONSE = "No response generated from Hugging Face model"


class HuggingFaceService:
    """Secondary provider: the Hugging Face text-generation Inference API."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.api_key = api_key if api_key is not None else settings.HUGGINGFACE_API_KEY
        self.base_url = (base_url or settings.HUGGINGFACE_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.PROVIDER_TIMEOUT_SECONDS

    def _post(self, model: str, api_key: str, payload: dict) -> requests.Response:
        return requests.post(
            f"{self.base_url}/{model}",
            headers={"Authorization": f"Bearer {api_key}"},
            json=payload,
            timeout=self.timeout,
        )

    def generate_chat_completion(self, request: CompletionRequest) -> CompletionResult:
        api_key = request.api_key or self.api_key
        if not api_key:
            raise ProviderError(MISSING_KEY)

        model = request.model or settings.HUGGINGFACE_DEFAULT_MODEL
        payload = {
            "inputs": build_prompt(request.message, request.session_history),
            "parameters": {
                "max_new_tokens": request.max_tokens,
                "temperature": request.temperature,
                "do_sample": True,
                "return_full_text": False,
            },
        }
        try:
            resp = self._post(model, api_key, payload)
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.warning("Hugging Face unreachable: %s", e)
            raise ProviderError(UNAVAILABLE) from e

        if resp.status_code in (401, 403):
            raise ProviderError(INVALID_KEY)
        if resp.status_code == 429:
            raise ProviderError(RATE_LIMITED)
        if resp.status_code == 503:
            raise ProviderError(MODEL_LOADING)
        if resp.status_code >= 500:
            raise ProviderError(UNAVAILABLE)
        if not resp.ok:
            logger.warning("Hugging Face returned HTTP %s for %s", resp.status_code, model)
            raise ProviderError(f"Hugging Face service error: HTTP {resp.status_code}: {resp.reason}")

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError(EMPTY_RESPONSE) from e

        text = None
        if isinstance(data, list) and data and isinstance(data[0], dict):
            text = data[0].get("generated_text")
        if not text or not text.strip():
            raise ProviderError(EMPTY_RESPONSE)

        return CompletionResult(
            content=text.strip(),
            model=model,
            provider=ProviderName.HUGGINGFACE,
            usage=Usage(),
        )

    def is_service_available(self) -> bool:
        if not self.api_key:
            return False
        try:
            resp = self._post(
                settings.HUGGINGFACE_DEFAULT_MODEL,
                self.api_key,
                {"inputs": "Hello", "parameters": {"max_new_tokens": 10}},
            )
        except requests.RequestException as e:
            logger.warning("Hugging Face availability check failed: %s", e)
            return False
        return resp.ok
