"""Conversation storage module for GreenMap.

Persists GreenBot transcripts behind a repository interface.
"""

from .base import ConversationStore
from .factory import create_conversation_store

__all__ = [
    "ConversationStore",
    "create_conversation_store",
]
