"""GreenBot terminal chat built on Textual.

Orchestrates the chat widgets and drives ChatSession against the relay.
"""

import asyncio
import contextlib

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from ..chat import ChatMessage, ChatSession, ChatStreamClient, Sender
from ..storage import ConversationStore
from .styles import APP_CSS
from .themes import GREENMAP_FOREST
from .widgets import ChatHistoryWidget, ChatInputBar

GREETING = "Hi there! I'm GreenBot, your friendly eco-assistant. How can I help you today? 🌱"
CHAT_WORKER_GROUP = "chat"


class GreenBotApp(App):
    """Textual TUI for chatting with GreenBot through the relay."""

    CSS = APP_CSS
    TITLE = "GreenMap"
    SUB_TITLE = "Chat with GreenBot"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("escape", "cancel_reply", "Cancel"),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
    ]

    def __init__(
        self,
        relay_url: str,
        store: ConversationStore | None = None,
        client: ChatStreamClient | None = None,
    ) -> None:
        super().__init__()
        self._client = client or ChatStreamClient(relay_url)
        self._store = store
        self._session: ChatSession | None = None
        self._closing = False

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatHistoryWidget(id="chat-history")
        yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    async def on_mount(self) -> None:
        self.register_theme(GREENMAP_FOREST)
        self.theme = "greenmap-forest"

        if self._store is not None:
            await self._store.connect()

        chat = self.query_one("#chat-history", ChatHistoryWidget)
        self._session = ChatSession(self._client, store=self._store, on_update=chat.show_message)

        store_name = self._store.backend_type if self._store is not None else "none"
        self.sub_title = f"{self._client.url} | store: {store_name}"

        # The greeting is display-only and never sent upstream as history
        chat.show_message(ChatMessage(sender=Sender.BOT, text=GREETING))
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    async def on_unmount(self) -> None:
        """Stop streaming and release the client and store."""
        self._closing = True
        self.workers.cancel_group(self, CHAT_WORKER_GROUP)
        with contextlib.suppress(Exception):
            await self._client.close()
        if self._store is not None:
            with contextlib.suppress(Exception):
                await self._store.disconnect()

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Start streaming a reply unless one is already in progress."""
        if self._session is None or self._session.is_loading:
            self.notify("GreenBot is still answering", severity="warning", timeout=2)
            return
        self._send(event.value)

    @work(exclusive=True, group=CHAT_WORKER_GROUP)
    async def _send(self, text: str) -> None:
        """Stream one reply; input stays disabled until it finishes."""
        input_bar = self.query_one("#chat-input-bar", ChatInputBar)
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        input_bar.set_busy(True)
        try:
            await self._session.send(text)
            self.sub_title = f"{self._client.url} | {len(self._session.conversation)} messages"
        except asyncio.CancelledError:
            if not self._closing:
                # send() froze the partial reply without notifying
                chat.show_message(self._session.conversation.messages[-1])
                self.notify("Reply cancelled", severity="warning", timeout=2)
            raise
        except Exception as e:
            self.notify(f"Error: {str(e)[:50]}", severity="error", timeout=5)
        finally:
            if not self._closing:
                input_bar.set_busy(False)

    def action_cancel_reply(self) -> None:
        """Cancel the reply that is currently streaming."""
        if self._session is not None and self._session.is_loading:
            self.workers.cancel_group(self, CHAT_WORKER_GROUP)

    def action_copy_last_response(self) -> None:
        """Copy last GreenBot response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")


async def run_textual_tui(
    relay_url: str,
    store: ConversationStore | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        relay_url: URL of the chat relay endpoint
        store: Optional conversation store for transcripts
    """
    app = GreenBotApp(relay_url=relay_url, store=store)
    with contextlib.suppress(KeyboardInterrupt, asyncio.CancelledError):
        await app.run_async()
