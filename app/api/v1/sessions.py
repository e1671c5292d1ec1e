# app/api/v1/sessions.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.core.dependencies import get_chat_service, get_inflight, get_store
from app.core.exceptions import SessionNotFoundError
from app.db.memory_store import MemoryStore
from app.models import ChatSession, Message
from app.schemas.chat import (
    ChatMessageRequest,
    ChatMessageResponse,
    GenerateTitleRequest,
    GenerateTitleResponse,
    SessionCreate,
)
from app.services.chat_service import ChatService
from app.services.inflight import InFlightRegistry

router = APIRouter()


@router.get("", response_model=List[ChatSession])
def list_sessions(store: MemoryStore = Depends(get_store)):
    return store.list_sessions()


@router.post("", response_model=ChatSession, status_code=status.HTTP_201_CREATED)
def create_session(payload: SessionCreate, store: MemoryStore = Depends(get_store)):
    return store.create_session(title=payload.title)


@router.get("/{session_id}", response_model=ChatSession)
def get_session(session_id: str, store: MemoryStore = Depends(get_store)):
    session = store.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(session_id: str, store: MemoryStore = Depends(get_store)):
    if not store.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{session_id}/messages", response_model=List[Message], response_model_exclude_none=True)
def list_messages(session_id: str, store: MemoryStore = Depends(get_store)):
    return store.get_messages(session_id)


@router.post(
    "/{session_id}/messages",
    response_model=ChatMessageResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def send_message(
    session_id: str,
    payload: ChatMessageRequest,
    response: Response,
    service: ChatService = Depends(get_chat_service),
    inflight: InFlightRegistry = Depends(get_inflight),
):
    token = inflight.begin(session_id)
    try:
        result = service.send_message(
            session_id,
            payload.content,
            model=payload.model,
            temperature=payload.temperature,
            max_tokens=payload.max_tokens,
            provider=payload.provider,
            api_key=payload.api_key,
            cancel_token=token,
        )
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    finally:
        inflight.finish(session_id, token)

    if result.error:
        # generation failed but the exchange was recorded
        response.status_code = status.HTTP_200_OK
    return ChatMessageResponse(
        user_message=result.user_message,
        ai_message=result.ai_message,
        usage=result.usage,
        error=result.error,
        superseded=result.superseded or None,
    )


@router.post("/{session_id}/generate-title", response_model=GenerateTitleResponse)
def generate_title(
    session_id: str,
    payload: GenerateTitleRequest,
    service: ChatService = Depends(get_chat_service),
):
    try:
        title = service.generate_title(session_id, payload.first_message, api_key=payload.api_key)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"title": title}
