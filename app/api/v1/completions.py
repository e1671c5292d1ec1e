# app/api/v1/completions.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.dependencies import get_ai_service
from app.core.exceptions import ProviderError
from app.schemas.completion import ChatCompletionIn, CompletionRequest, CompletionResult
from app.services.ai_service import AIService

router = APIRouter()


@router.post("/completions", response_model=CompletionResult)
def chat_completion(payload: ChatCompletionIn, ai: AIService = Depends(get_ai_service)):
    # stateless: nothing is stored
    request = CompletionRequest(
        message=payload.message,
        session_history=payload.history,
        model=payload.model or settings.DEFAULT_MODEL,
        temperature=settings.DEFAULT_TEMPERATURE if payload.temperature is None else payload.temperature,
        max_tokens=payload.max_tokens or settings.DEFAULT_MAX_TOKENS,
        provider=payload.provider,
        api_key=payload.api_key,
    )
    try:
        return ai.generate_chat_completion(request)
    except ProviderError as e:
        return JSONResponse(status_code=500, content={"message": e.message, "type": "ai_error"})
