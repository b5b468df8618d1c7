"""
GreenMap: GreenBot chat relay and AI insights for community environmental reporting.

Each subpackage hides one design decision: which LLM answers (llm),
how replies stream and render (chat), how the HTTP API is exposed
(server), and where transcripts are kept (storage).
"""

__version__ = "0.1.0"

from .chat import (
    ChatMessage,
    ChatRequest,
    ChatSession,
    ChatStreamClient,
    Conversation,
    HistoryTurn,
    Sender,
    build_turns,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatSession",
    "ChatStreamClient",
    "Conversation",
    "HistoryTurn",
    "Sender",
    "build_turns",
]
