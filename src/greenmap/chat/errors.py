"""Exceptions raised by the chat relay client and conversation state."""


class ChatError(Exception):
    """Base class for chat errors."""


class ChatBusyError(ChatError):
    """A reply is still streaming; sends are serialized per session."""


class MessageStateError(ChatError):
    """A mutation targeted a message that is not the active placeholder."""


class RelayError(ChatError):
    """The relay answered with a non-success status instead of a stream."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"Relay returned {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail
