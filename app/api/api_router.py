# app/api/api_router.py
from fastapi import APIRouter
from app.api.v1 import completions, health, sessions

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(completions.router, prefix="/chat", tags=["chat"])
