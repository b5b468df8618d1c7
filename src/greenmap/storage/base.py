"""Abstract base class for conversation stores.

This module defines the repository contract for chat transcripts.
The abstraction hides:
- Storage format (dict, SQLite rows, etc.)
- Persistence mechanism (in-memory, file)
- Connection management
"""

from abc import ABC, abstractmethod

from ..chat.models import Conversation


class ConversationStore(ABC):
    """Abstract conversation repository keyed by opaque conversation ids."""

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store gracefully."""

    @abstractmethod
    async def save(self, conversation: Conversation) -> None:
        """Create or replace the stored transcript for a conversation."""

    @abstractmethod
    async def get(self, conversation_id: str) -> Conversation | None:
        """Load a conversation, or None if the id is unknown."""

    @abstractmethod
    async def list_ids(self) -> list[str]:
        """Ids of stored conversations, most recently updated first."""

    @abstractmethod
    async def delete(self, conversation_id: str) -> bool:
        """Delete a conversation. Returns False if it did not exist."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
