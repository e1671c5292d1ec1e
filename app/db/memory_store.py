# app/db/memory_store.py
import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from app.models import ChatSession, Message, MessageMetadata, Role

logger = logging.getLogger(__name__)

# fields a caller may change through update_session
_UPDATABLE_SESSION_FIELDS = {"title", "updated_at"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_metadata(
    metadata: Union[MessageMetadata, Mapping[str, Any], None],
) -> Optional[MessageMetadata]:
    """Keep only model/tokens/error with the expected types; anything else is dropped."""
    if metadata is None:
        return None
    if isinstance(metadata, MessageMetadata):
        metadata = metadata.model_dump()

    model = metadata.get("model")
    tokens = metadata.get("tokens")
    error = metadata.get("error")
    return MessageMetadata(
        model=model if isinstance(model, str) else None,
        tokens=tokens if isinstance(tokens, int) and not isinstance(tokens, bool) else None,
        error=error if isinstance(error, str) else None,
    )


class MemoryStore:
    """
    In-process storage for chat sessions and their messages.

    Nothing survives a restart. Missing records come back as None/False,
    never as exceptions.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._sessions: Dict[str, ChatSession] = {}
        self._messages: Dict[str, Message] = {}
        self._session_locks: Dict[str, threading.Lock] = {}

    # ---------------------------
    # Sessions
    # ---------------------------
    def create_session(self, title: Optional[str] = None) -> ChatSession:
        now = _now()
        session = ChatSession(
            id=str(uuid.uuid4()),
            title=title or None,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._sessions[session.id] = session
            self._session_locks[session.id] = threading.Lock()
        logger.debug("Created session %s", session.id)
        return session

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def update_session(self, session_id: str, **fields) -> Optional[ChatSession]:
        changes = {k: v for k, v in fields.items() if k in _UPDATABLE_SESSION_FIELDS}
        # updated_at always moves, whatever the caller passed
        changes["updated_at"] = _now()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            updated = session.model_copy(update=changes)
            self._sessions[session_id] = updated
            return updated

    def delete_session(self, session_id: str) -> bool:
        # messages first, then the session. The session lock keeps appends out
        # and the store lock keeps readers from seeing a half-deleted conversation.
        with self.session_lock(session_id), self._lock:
            orphaned = [m.id for m in self._messages.values() if m.session_id == session_id]
            for message_id in orphaned:
                del self._messages[message_id]
            existed = self._sessions.pop(session_id, None) is not None
            self._session_locks.pop(session_id, None)
        if existed:
            logger.info("Deleted session %s and %d messages", session_id, len(orphaned))
        return existed

    def list_sessions(self) -> List[ChatSession]:
        with self._lock:
            sessions = list(self._sessions.values())
        # sorted() is stable, so equal timestamps keep insertion order
        return sorted(sessions, key=lambda s: s.updated_at, reverse=True)

    # ---------------------------
    # Messages
    # ---------------------------
    def create_message(
        self,
        session_id: str,
        role: Union[Role, str],
        content: str,
        metadata: Union[MessageMetadata, Mapping[str, Any], None] = None,
    ) -> Message:
        message = Message(
            id=str(uuid.uuid4()),
            content=content,
            role=Role(role),
            timestamp=_now(),
            session_id=session_id,
            metadata=normalize_metadata(metadata),
        )
        with self._lock:
            self._messages[message.id] = message
        return message

    def get_messages(self, session_id: str) -> List[Message]:
        with self._lock:
            messages = [m for m in self._messages.values() if m.session_id == session_id]
        return sorted(messages, key=lambda m: m.timestamp)

    # ---------------------------
    # Per-session exclusion
    # ---------------------------
    @contextmanager
    def session_lock(self, session_id: str) -> Iterator[None]:
        # locks live only as long as their session; an unknown id gets a
        # throwaway lock so lookups for it never grow the map
        with self._lock:
            lock = self._session_locks.get(session_id) or threading.Lock()
        with lock:
            yield
