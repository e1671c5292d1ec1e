# app/core/dependencies.py
from fastapi import Depends, Request

from app.db.memory_store import MemoryStore
from app.services.ai_service import AIService
from app.services.chat_service import ChatService
from app.services.inflight import InFlightRegistry


def get_store(request: Request) -> MemoryStore:
    return request.app.state.store


def get_ai_service(request: Request) -> AIService:
    return request.app.state.ai_service


def get_inflight(request: Request) -> InFlightRegistry:
    return request.app.state.inflight


def get_chat_service(
    store: MemoryStore = Depends(get_store),
    ai: AIService = Depends(get_ai_service),
) -> ChatService:
    return ChatService(store, ai)
