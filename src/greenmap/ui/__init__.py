"""Terminal UI module for GreenMap.

Provides a Textual-based chat client for the GreenBot relay.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (message recall, streaming message rendering)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palette
- app.py: Application orchestration (user interaction flow)
"""

from .app import GreenBotApp, run_textual_tui
from .widgets import ChatHistoryWidget, ChatInputBar, MessageView

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "GreenBotApp",
    "MessageView",
    "run_textual_tui",
]
