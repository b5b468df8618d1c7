"""Data models for GreenBot conversations.

Hides how messages are represented and mutated while a reply streams in:
- ChatMessage: one rendered message (mutable only while it is typing)
- HistoryTurn / ChatRequest: the wire form posted to the relay
- Conversation: ordered message list that owns the placeholder lifecycle
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import MessageStateError


class Sender(str, Enum):
    """Author of a chat message."""

    USER = "user"
    BOT = "bot"


@dataclass
class ChatMessage:
    """A chat message in the conversation."""

    sender: Sender
    text: str
    is_typing: bool = False
    id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=datetime.now)


class HistoryTurn(BaseModel):
    """A prior message as sent to the relay (no id, no typing flag)."""

    model_config = ConfigDict(frozen=True)

    sender: Sender = Field(description="Who wrote the message: 'user' or 'bot'")
    text: str = Field(description="Message text")


class ChatRequest(BaseModel):
    """Body of ``POST /api/chat``."""

    message: str = Field(description="The new user message")
    history: list[HistoryTurn] = Field(
        default_factory=list,
        description="Prior turns, oldest first, excluding the new message"
    )

    @field_validator("message")
    @classmethod
    def _message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be empty")
        return value


class Conversation:
    """Ordered chat history with at most one typing placeholder.

    Messages are only ever appended. The placeholder created by
    ``start_bot_reply`` is the single message whose text may change, and
    it stops changing once ``complete`` or ``fail`` is called.
    """

    def __init__(
        self,
        messages: list[ChatMessage] | None = None,
        conversation_id: str | None = None
    ):
        self.conversation_id = conversation_id or uuid4().hex
        self._messages: list[ChatMessage] = list(messages or [])

    @property
    def messages(self) -> list[ChatMessage]:
        """Snapshot of the messages, oldest first."""
        return list(self._messages)

    @property
    def typing_message(self) -> ChatMessage | None:
        """The in-progress placeholder, if a reply is streaming."""
        for msg in self._messages:
            if msg.is_typing:
                return msg
        return None

    def __len__(self) -> int:
        return len(self._messages)

    def add_user_message(self, text: str) -> ChatMessage:
        msg = ChatMessage(sender=Sender.USER, text=text)
        self._messages.append(msg)
        return msg

    def add_bot_message(self, text: str) -> ChatMessage:
        """Append a finished bot message (greetings, restored transcripts)."""
        msg = ChatMessage(sender=Sender.BOT, text=text)
        self._messages.append(msg)
        return msg

    def start_bot_reply(self) -> ChatMessage:
        """Append an empty typing placeholder for the next bot reply.

        Raises:
            MessageStateError: If another reply is still typing
        """
        if self.typing_message is not None:
            raise MessageStateError("A bot reply is already streaming")
        msg = ChatMessage(sender=Sender.BOT, text="", is_typing=True)
        self._messages.append(msg)
        return msg

    def _active(self, message_id: str) -> ChatMessage:
        msg = self.typing_message
        if msg is None or msg.id != message_id:
            raise MessageStateError(f"Message {message_id} is not the active placeholder")
        return msg

    def append_fragment(self, message_id: str, fragment: str) -> ChatMessage:
        """Append a streamed fragment to the active placeholder.

        The placeholder stays typing until ``complete`` or ``fail``.
        """
        msg = self._active(message_id)
        msg.text += fragment
        return msg

    def complete(self, message_id: str) -> ChatMessage:
        """Freeze the placeholder, keeping whatever text has arrived."""
        msg = self._active(message_id)
        msg.is_typing = False
        return msg

    def fail(self, message_id: str, apology: str) -> ChatMessage:
        """Replace the placeholder's text with an apology and freeze it."""
        msg = self._active(message_id)
        msg.text = apology
        msg.is_typing = False
        return msg

    def wire_history(self, exclude: set[str] | None = None) -> list[HistoryTurn]:
        """History as sent upstream, without the typing placeholder.

        Args:
            exclude: Extra message ids to leave out (e.g. the message being sent)
        """
        skip = exclude or set()
        return [
            HistoryTurn(sender=msg.sender, text=msg.text)
            for msg in self._messages
            if not msg.is_typing and msg.id not in skip
        ]
