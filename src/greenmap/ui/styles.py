"""CSS styles for the GreenBot TUI.

Single column: the conversation fills the screen and the input bar is
docked below it. A streaming reply is drawn with an amber rail until it
is final.
"""

APP_CSS = """
Screen {
    background: $background;
}

#chat-history {
    height: 1fr;
    margin: 0 1;
    padding: 0 1;
    background: $surface;
    border: heavy $border;
    border-title-color: $accent;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
}

#chat-history:focus-within {
    border: heavy $primary;
}

MessageView {
    height: auto;
    margin-top: 1;
    padding: 0 1;
}

MessageView.user-message {
    margin-left: 8;
    border-right: outer $success;
    background: $success 6%;
}

MessageView.bot-message {
    margin-right: 8;
    border-left: outer $secondary;
    background: $secondary 6%;
}

MessageView.typing {
    border-left: outer $warning;
}

MessageView.typing .message-content {
    color: $text-muted;
    text-style: italic;
}

.user-message .message-header {
    color: $success;
    text-align: right;
}

.bot-message .message-header {
    color: $secondary;
}

.message-content {
    height: auto;
}

.message-content > MarkdownBlock {
    margin: 0;
}

ChatInputBar {
    dock: bottom;
    height: auto;
    margin: 1 1 0 1;
}

#chat-input {
    width: 1fr;
    border: tall $border;
}

#chat-input:focus {
    border: tall $primary;
}

#chat-input:disabled {
    color: $text-disabled;
}

#send-btn {
    min-width: 10;
    margin-left: 1;
}
"""
