"""Terminal UI module for aistudio-client.

Provides a Textual-based TUI over the ChatClient.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (session form, chat history, status, image, log)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- callbacks.py: How the TUI receives state snapshots and log records
- app.py: Application orchestration (user interaction flow)
"""

from .app import ChatTextualApp, run_textual_tui
from .callbacks import StateCallback, TUILogHandler
from .config import LogLevel
from .widgets import (
    ChatHistoryWidget,
    ChatInputBar,
    DebugPanel,
    ImagePanel,
    SessionBar,
    StatusLine,
)

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "ChatTextualApp",
    "DebugPanel",
    "ImagePanel",
    "LogLevel",
    "SessionBar",
    "StateCallback",
    "StatusLine",
    "TUILogHandler",
    "run_textual_tui",
]
