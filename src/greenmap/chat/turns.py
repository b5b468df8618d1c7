"""Conversion of chat history into upstream model turns."""

from collections.abc import Sequence

from ..llm import ChatMessage as Turn
from .models import HistoryTurn, Sender

_ROLES = {
    Sender.USER: "user",
    Sender.BOT: "assistant",
}


def build_turns(
    history: Sequence[HistoryTurn],
    message: str,
    system_instruction: str | None = None
) -> list[Turn]:
    """Build the role-tagged turn sequence for one chat request.

    Prior turns keep their order and text; the new user message is
    always the last turn. A system instruction, when given, goes first.

    Args:
        history: Prior turns, oldest first
        message: The new user message
        system_instruction: Optional system prompt

    Returns:
        Turns ready for ``LLMProvider.chat_completion_stream``
    """
    turns = []
    if system_instruction:
        turns.append(Turn(role="system", content=system_instruction))
    turns.extend(Turn(role=_ROLES[turn.sender], content=turn.text) for turn in history)
    turns.append(Turn(role="user", content=message))
    return turns
