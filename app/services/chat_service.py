# app/services/chat_service.py
import logging
from dataclasses import dataclass
from typing import List, Optional

from app.core.config import settings
from app.core.exceptions import SessionNotFoundError
from app.db.memory_store import MemoryStore
from app.models import ChatSession, Message, MessageMetadata, Role
from app.schemas.completion import CompletionRequest, HistoryTurn, ProviderName, Usage
from app.services.ai_service import AIService
from app.services.inflight import CancellationToken

logger = logging.getLogger(__name__)

ERROR_REPLY = "I'm sorry, I encountered an error: {error}"


@dataclass
class ExchangeResult:
    user_message: Message
    ai_message: Message
    usage: Optional[Usage] = None
    error: Optional[str] = None
    # a newer request for the session started while this one was generating
    superseded: bool = False


class ChatService:
    def __init__(self, store: MemoryStore, ai: AIService, history_limit: Optional[int] = None):
        self.store = store
        self.ai = ai
        self.history_limit = settings.HISTORY_LIMIT if history_limit is None else history_limit

    def _require_session(self, session_id: str) -> ChatSession:
        session = self.store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def _context(self, session_id: str, exclude_id: str) -> List[HistoryTurn]:
        prior = [m for m in self.store.get_messages(session_id) if m.id != exclude_id]
        recent = prior[-self.history_limit:] if self.history_limit > 0 else []
        return [HistoryTurn(role=m.role, content=m.content) for m in recent]

    def send_message(
        self,
        session_id: str,
        content: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        provider: Optional[ProviderName] = None,
        api_key: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ExchangeResult:
        # 1) persist the user turn and snapshot the history it follows
        with self.store.session_lock(session_id):
            self._require_session(session_id)
            user_message = self.store.create_message(session_id, Role.USER, content)
            history = self._context(session_id, exclude_id=user_message.id)

        request = CompletionRequest(
            message=content,
            session_history=history,
            model=model or settings.DEFAULT_MODEL,
            temperature=settings.DEFAULT_TEMPERATURE if temperature is None else temperature,
            max_tokens=max_tokens or settings.DEFAULT_MAX_TOKENS,
            provider=provider,
            api_key=api_key,
        )

        # 2) generate; any failure becomes part of the conversation
        result = error = None
        try:
            result = self.ai.generate_chat_completion(request)
        except Exception as e:
            error = str(e) or e.__class__.__name__
            logger.warning("Generation failed for session %s: %s", session_id, error)

        # 3) always persist the assistant turn; a superseded result is only flagged
        superseded = cancel_token is not None and cancel_token.cancelled
        if superseded:
            logger.info("Reply for session %s was superseded by a newer request", session_id)
        with self.store.session_lock(session_id):
            self._require_session(session_id)

            if result is not None:
                ai_message = self.store.create_message(
                    session_id,
                    Role.ASSISTANT,
                    result.content,
                    MessageMetadata(model=result.model, tokens=result.usage.total_tokens),
                )
            else:
                ai_message = self.store.create_message(
                    session_id,
                    Role.ASSISTANT,
                    ERROR_REPLY.format(error=error),
                    MessageMetadata(error=error),
                )
            self.store.update_session(session_id)

        return ExchangeResult(
            user_message=user_message,
            ai_message=ai_message,
            usage=result.usage if result is not None else None,
            error=error,
            superseded=superseded,
        )

    def generate_title(self, session_id: str, first_message: str, api_key: Optional[str] = None) -> str:
        self._require_session(session_id)
        title = self.ai.generate_title(first_message, api_key=api_key)
        if self.store.update_session(session_id, title=title) is None:
            # deleted while the title was being generated
            raise SessionNotFoundError(session_id)
        return title
