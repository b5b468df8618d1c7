"""In-memory conversation store.

Data is lost when the application exits.
"""

from copy import deepcopy

from ..chat.models import Conversation
from .base import ConversationStore


class InMemoryConversationStore(ConversationStore):
    """Dict-backed conversation store, suitable for a single session or tests."""

    def __init__(self) -> None:
        self._conversations: dict[str, Conversation] = {}

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def save(self, conversation: Conversation) -> None:
        # Copy so later streaming into the live conversation doesn't leak in
        self._conversations.pop(conversation.conversation_id, None)
        self._conversations[conversation.conversation_id] = Conversation(
            deepcopy(conversation.messages),
            conversation_id=conversation.conversation_id,
        )

    async def get(self, conversation_id: str) -> Conversation | None:
        stored = self._conversations.get(conversation_id)
        if stored is None:
            return None
        return Conversation(deepcopy(stored.messages), conversation_id=conversation_id)

    async def list_ids(self) -> list[str]:
        return list(reversed(self._conversations))

    async def delete(self, conversation_id: str) -> bool:
        return self._conversations.pop(conversation_id, None) is not None

    @property
    def backend_type(self) -> str:
        return "memory"
