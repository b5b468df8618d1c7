"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Recall of previously sent messages
- Incremental rendering of a streaming bot message
- Chat history scrolling
"""

from rich.text import Text
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.message import Message
from textual.widgets import Button, Input, Markdown, Static

from ..chat import ChatMessage, Sender

TYPING_INDICATOR = "GreenBot is typing..."


class MessageInput(Input):
    """Single-line input that recalls sent messages with Up/Down."""

    BINDINGS = [
        Binding("up", "recall(-1)", "Previous message", show=False),
        Binding("down", "recall(1)", "Next message", show=False),
    ]

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._recalled: list[str] = []
        # len(self._recalled) means "the draft being typed"
        self._recall_index = 0
        self._recall_draft = ""

    def remember(self, text: str) -> None:
        """Record a sent message and reset recall to the empty draft."""
        if not self._recalled or self._recalled[-1] != text:
            self._recalled.append(text)
        self._recall_index = len(self._recalled)
        self._recall_draft = ""

    def action_recall(self, step: int) -> None:
        if not self._recalled:
            return
        if self._recall_index == len(self._recalled):
            self._recall_draft = self.value
        self._recall_index = min(max(self._recall_index + step, 0), len(self._recalled))
        at_draft = self._recall_index == len(self._recalled)
        self.value = self._recall_draft if at_draft else self._recalled[self._recall_index]
        self.cursor_position = len(self.value)


class ChatInputBar(Horizontal):
    """Chat input with a Send button; disabled while a reply streams."""

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def compose(self):
        yield MessageInput(id="chat-input", placeholder="Ask me about the environment...")
        yield Button("Send", id="send-btn", variant="success").with_tooltip("Send message (Enter)")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            event.stop()
            self._submit()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._submit()

    def _submit(self) -> None:
        text_input = self.query_one("#chat-input", MessageInput)
        value = text_input.value.strip()
        if value and not text_input.disabled:
            text_input.remember(value)
            text_input.value = ""
            self.post_message(self.Submitted(value))

    def set_busy(self, busy: bool) -> None:
        """Disable input and button while a reply is outstanding."""
        self.query_one("#chat-input", MessageInput).disabled = busy
        self.query_one("#send-btn", Button).disabled = busy
        if not busy:
            self.focus_input()

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", MessageInput).focus()


class MessageView(Vertical):
    """One chat message; a bot placeholder re-renders as fragments arrive."""

    def __init__(self, message: ChatMessage, *args, **kwargs) -> None:
        role_class = "user-message" if message.sender == Sender.USER else "bot-message"
        super().__init__(*args, classes=f"chat-message {role_class}", **kwargs)
        self._message = message
        self._final = False

    def compose(self):
        if self._message.sender == Sender.USER:
            header = f"> You [{self._message.timestamp:%H:%M:%S}]"
        else:
            header = f"< GreenBot [{self._message.timestamp:%H:%M:%S}]"
        yield Static(header, classes="message-header")
        yield Static(self._body(), classes="message-content")

    def on_mount(self) -> None:
        self.refresh_message()

    def _body(self) -> Text:
        msg = self._message
        if msg.is_typing and not msg.text:
            return Text(TYPING_INDICATOR)
        return Text(msg.text)

    def refresh_message(self) -> None:
        """Re-render from the underlying message."""
        msg = self._message
        self.set_class(msg.is_typing, "typing")
        if self._final:
            return

        content = self.query_one(".message-content", Static)
        if msg.is_typing or msg.sender == Sender.USER:
            content.update(self._body())
            return

        # Reply finished: render it once as Markdown
        self._final = True
        content.remove()
        self.mount(Markdown(msg.text, classes="message-content"))

    @property
    def text(self) -> str:
        return self._message.text


class ChatHistoryWidget(VerticalScroll):
    """Scrollable chat history keyed by message id."""

    BORDER_TITLE = "GreenBot"
    BORDER_SUBTITLE = "Conversation history"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._views: dict[str, MessageView] = {}

    def show_message(self, message: ChatMessage) -> None:
        """Add a message, or re-render it if it is already shown."""
        view = self._views.get(message.id)
        if view is None:
            view = MessageView(message)
            self._views[message.id] = view
            self.mount(view)
            self.border_subtitle = f"{len(self._views)} messages"
        elif view.is_mounted:
            view.refresh_message()
        self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        """Text of the most recent bot message."""
        for view in reversed(list(self._views.values())):
            if "bot-message" in view.classes:
                return view.text
        return None
