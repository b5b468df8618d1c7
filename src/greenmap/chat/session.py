"""Client-side driver for one GreenBot conversation.

Hides the placeholder lifecycle behind a single ``send`` call: the user
message and an empty typing placeholder are appended before any network
I/O, fragments are applied as they arrive, and the placeholder is frozen
on end-of-stream or replaced with an apology on transport failure.
"""

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING

import httpx
from loguru import logger

from .client import ChatStreamClient
from .errors import ChatBusyError, RelayError
from .models import ChatMessage, Conversation

if TYPE_CHECKING:
    from ..storage import ConversationStore

APOLOGY_TEXT = "Oops! I seem to have lost my train of thought. Could you please ask me again?"

UpdateListener = Callable[[ChatMessage], None]


class ChatSession:
    """Sends user messages and renders streamed replies into a Conversation.

    Only one reply may stream at a time; ``is_loading`` reports whether
    one is outstanding so a UI can disable its input.
    """

    def __init__(
        self,
        client: ChatStreamClient,
        conversation: Conversation | None = None,
        store: "ConversationStore | None" = None,
        on_update: UpdateListener | None = None,
    ) -> None:
        self._client = client
        self.conversation = conversation or Conversation()
        self._store = store
        self._on_update = on_update
        self._loading = False

    @property
    def is_loading(self) -> bool:
        return self._loading

    def _notify(self, message: ChatMessage) -> None:
        if self._on_update is not None:
            self._on_update(message)

    async def send(self, text: str) -> ChatMessage:
        """Send ``text`` and stream the reply into a new placeholder.

        Transport, relay and unexpected stream failures are not raised:
        the placeholder's text becomes ``APOLOGY_TEXT`` instead.
        Cancellation freezes the placeholder with its partial text and
        propagates without notifying the listener.

        Returns:
            The bot message created for this request

        Raises:
            ValueError: If ``text`` is blank
            ChatBusyError: If a previous reply is still streaming
        """
        if not text.strip():
            raise ValueError("Cannot send an empty message")
        if self._loading:
            raise ChatBusyError("Wait for the current reply to finish")

        history = self.conversation.wire_history()
        user_message = self.conversation.add_user_message(text)
        placeholder = self.conversation.start_bot_reply()
        self._loading = True
        self._notify(user_message)
        self._notify(placeholder)

        fragments = 0
        try:
            async for fragment in self._client.stream_reply(text, history):
                self.conversation.append_fragment(placeholder.id, fragment)
                fragments += 1
                self._notify(placeholder)
            self.conversation.complete(placeholder.id)
            logger.debug("Reply {} complete after {} fragments", placeholder.id, fragments)
        except (httpx.HTTPError, RelayError) as e:
            logger.warning("Chat stream failed after {} fragments: {}", fragments, e)
            self.conversation.fail(placeholder.id, APOLOGY_TEXT)
        except asyncio.CancelledError:
            self.conversation.complete(placeholder.id)
            raise
        except Exception:
            logger.exception("Unexpected error streaming reply {} after {} fragments", placeholder.id, fragments)
            self.conversation.fail(placeholder.id, APOLOGY_TEXT)
        finally:
            self._loading = False

        self._notify(placeholder)

        if self._store is not None:
            await self._store.save(self.conversation)

        return placeholder
