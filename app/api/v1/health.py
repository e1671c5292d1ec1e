# app/api/v1/health.py
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.dependencies import get_ai_service
from app.schemas.health import HealthOut
from app.services.ai_service import AIService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=HealthOut)
def health(ai: AIService = Depends(get_ai_service)):
    """Advisory only: reports whether either provider answers right now."""
    try:
        available = ai.is_service_available()
    except Exception:
        logger.exception("Service check failed")
        return JSONResponse(
            status_code=500,
            content={"status": "error", "message": "Service check failed", "aiService": "unavailable"},
        )
    return HealthOut(
        ai_service="available" if available else "unavailable",
        timestamp=datetime.now(timezone.utc),
    )
