# app/schemas/health.py
from datetime import datetime
from typing import Literal

from app.models.base import CamelModel


class HealthOut(CamelModel):
    status: Literal["ok"] = "ok"
    ai_service: Literal["available", "unavailable"]
    timestamp: datetime
