# tests/test_chat_service.py
import pytest

from app.core.exceptions import ProviderError, SessionNotFoundError
from app.models import Role
from app.services.chat_service import ChatService
from app.services.inflight import InFlightRegistry


@pytest.fixture
def service(store, ai_service):
    return ChatService(store, ai_service)


def test_successful_exchange_adds_two_messages(service, store, gemini):
    session = store.create_session()
    before = session.updated_at

    result = service.send_message(session.id, "Hello")

    messages = store.get_messages(session.id)
    assert [m.role for m in messages] == [Role.USER, Role.ASSISTANT]
    assert result.user_message == messages[0]
    assert result.ai_message.content == "Hello from the model"
    assert result.ai_message.metadata.model == "gemini-2.5-flash"
    assert result.ai_message.metadata.tokens == 7
    assert result.error is None
    assert result.usage.total_tokens == 7
    assert store.get_session(session.id).updated_at >= before


def test_defaults_passed_to_provider(service, store, gemini):
    session = store.create_session()
    service.send_message(session.id, "Hello")
    request = gemini.requests[0]
    assert request.model == "gemini-2.5-flash"
    assert request.temperature == 0.7
    assert request.max_tokens == 1024
    assert request.message == "Hello"
    assert request.session_history == []


def test_zero_temperature_is_kept(service, store, gemini):
    session = store.create_session()
    service.send_message(session.id, "Hello", temperature=0.0)
    assert gemini.requests[0].temperature == 0.0


def test_model_routes_to_secondary(service, store, gemini, huggingface):
    session = store.create_session()
    result = service.send_message(session.id, "Hello", model="Qwen/Qwen2.5-7B-Instruct")
    assert result.ai_message.content == "Hello from Qwen"
    assert gemini.requests == []


def test_generation_failure_becomes_error_message(service, store, failing_gemini):
    session = store.create_session()
    store.create_message(session.id, Role.USER, "earlier")

    result = service.send_message(session.id, "Hello")

    assert len(store.get_messages(session.id)) == 3
    assert result.error == "Gemini API quota exceeded. Please try again later or upgrade your plan."
    assert result.ai_message.role == Role.ASSISTANT
    assert result.ai_message.metadata.error == result.error
    assert result.ai_message.content == f"I'm sorry, I encountered an error: {result.error}"
    assert result.usage is None


def test_unexpected_exception_is_also_recorded(service, store, gemini):
    gemini.error = RuntimeError("socket closed")
    session = store.create_session()
    result = service.send_message(session.id, "Hello")
    assert result.ai_message.metadata.error == "socket closed"


def test_history_limited_to_ten_prior_messages(service, store, gemini):
    session = store.create_session()
    for i in range(11):
        role = Role.USER if i % 2 == 0 else Role.ASSISTANT
        store.create_message(session.id, role, f"m{i}")

    service.send_message(session.id, "newest")

    history = gemini.requests[0].session_history
    assert [t.content for t in history] == [f"m{i}" for i in range(1, 11)]
    assert "newest" not in [t.content for t in history]


def test_unknown_session(service, store):
    with pytest.raises(SessionNotFoundError):
        service.send_message("missing", "Hello")
    assert store.get_messages("missing") == []


def test_user_message_persist_failure_propagates(service, store, gemini, monkeypatch):
    session = store.create_session()

    def broken(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(store, "create_message", broken)
    with pytest.raises(OSError):
        service.send_message(session.id, "Hello")
    assert gemini.requests == []


def test_superseded_request_still_records_both_turns(service, store, gemini):
    session = store.create_session()
    registry = InFlightRegistry()
    old = registry.begin(session.id)
    reply = gemini.generate_chat_completion

    def supersede(request):
        registry.begin(session.id)
        return reply(request)

    gemini.generate_chat_completion = supersede
    result = service.send_message(session.id, "Hello", cancel_token=old)

    assert result.superseded is True
    assert result.error is None
    messages = store.get_messages(session.id)
    assert [m.role for m in messages] == [Role.USER, Role.ASSISTANT]
    assert messages[1].content == "Hello from the model"


def test_superseded_failure_still_records_error_reply(service, store, gemini):
    session = store.create_session()
    registry = InFlightRegistry()
    old = registry.begin(session.id)

    def supersede(request):
        registry.begin(session.id)
        raise ProviderError("late")

    gemini.generate_chat_completion = supersede
    result = service.send_message(session.id, "Hello", cancel_token=old)

    assert result.superseded is True
    assert result.ai_message.metadata.error == "late"
    assert len(store.get_messages(session.id)) == 2


def test_unknown_sessions_do_not_accumulate_locks(service, store):
    for i in range(50):
        with pytest.raises(SessionNotFoundError):
            service.send_message(f"missing-{i}", "Hello")
    assert store._session_locks == {}


def test_session_deleted_during_generation_leaves_no_lock(service, store, gemini):
    session = store.create_session()
    reply = gemini.generate_chat_completion

    def delete_then_reply(request):
        store.delete_session(session.id)
        return reply(request)

    gemini.generate_chat_completion = delete_then_reply
    with pytest.raises(SessionNotFoundError):
        service.send_message(session.id, "Hello")
    assert store._session_locks == {}
    assert store.get_messages(session.id) == []


def test_generate_title_updates_session(service, store):
    session = store.create_session()
    assert service.generate_title(session.id, "Hi") == "Greeting Chat"
    updated = store.get_session(session.id)
    assert updated.title == "Greeting Chat"
    assert updated.created_at == session.created_at


def test_generate_title_failure_uses_placeholder(service, store, gemini):
    gemini.error = ProviderError("No API key provided. Please add your Gemini API key in settings.")
    session = store.create_session()
    assert service.generate_title(session.id, "Hi") == "New Conversation"


def test_generate_title_unknown_session(service):
    with pytest.raises(SessionNotFoundError):
        service.generate_title("missing", "Hi")
