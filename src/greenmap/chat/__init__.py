"""GreenBot chat module.

Provides the conversation model, the turn builder used by the relay,
and the streaming client that renders replies incrementally.
"""

from .client import DEFAULT_RELAY_URL, ChatStreamClient
from .decoding import FragmentDecoder
from .errors import ChatBusyError, ChatError, MessageStateError, RelayError
from .models import ChatMessage, ChatRequest, Conversation, HistoryTurn, Sender
from .session import APOLOGY_TEXT, ChatSession
from .turns import build_turns

__all__ = [
    "APOLOGY_TEXT",
    "DEFAULT_RELAY_URL",
    "ChatBusyError",
    "ChatError",
    "ChatMessage",
    "ChatRequest",
    "ChatSession",
    "ChatStreamClient",
    "Conversation",
    "FragmentDecoder",
    "HistoryTurn",
    "MessageStateError",
    "RelayError",
    "Sender",
    "build_turns",
]
