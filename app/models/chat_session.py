# app/models/chat_session.py
from datetime import datetime
from typing import Optional

from app.models.base import CamelModel


class ChatSession(CamelModel):
    id: str
    title: Optional[str] = None
    created_at: datetime
    updated_at: datetime
