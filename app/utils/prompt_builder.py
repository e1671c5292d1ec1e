# app/utils/prompt_builder.py
from typing import Iterable

from app.models import Role
from app.schemas.completion import HistoryTurn

ROLE_LABELS = {Role.USER: "Human", Role.ASSISTANT: "Assistant"}


def build_prompt(message: str, history: Iterable[HistoryTurn] = ()) -> str:
    # completion style: one line per turn, then an open assistant turn
    lines = [f"{ROLE_LABELS[turn.role]}: {turn.content}" for turn in history]
    lines.append(f"{ROLE_LABELS[Role.USER]}: {message}")
    lines.append(f"{ROLE_LABELS[Role.ASSISTANT]}:")
    return "\n".join(lines)


TITLE_PROMPT = (
    'Generate a short, descriptive title (maximum 6 words) for a conversation '
    'that starts with: "{first_message}". Only return the title, nothing else.'
)


def build_title_prompt(first_message: str) -> str:
    return TITLE_PROMPT.format(first_message=first_message)
