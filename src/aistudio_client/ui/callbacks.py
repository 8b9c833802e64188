"""Bridges between the chat core and the TUI.

Hides the details of how the TUI receives updates:
- State snapshots from the ChatClient
- Log records from the standard logging module
Both may arrive from outside the app's thread, so updates are marshalled
with call_from_thread when needed.
"""

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .config import LOG_MAX_MESSAGE_LENGTH, LogLevel

if TYPE_CHECKING:
    from textual.app import App

    from ..chat import ChatState
    from .widgets import DebugPanel


def call_thread_safe(app: "App | None", func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
    """Call a function in a thread-safe manner for UI updates."""
    if app is not None and app._thread_id != threading.get_ident():
        app.call_from_thread(func, *args, **kwargs)
    else:
        func(*args, **kwargs)


class StateCallback:
    """Listener passed to ChatClient.subscribe.

    Forwards each snapshot to ``render`` on the app's thread.
    """

    def __init__(self, render: Callable[["ChatState"], None], app: "App | None" = None) -> None:
        self.render = render
        self.app = app
        self.snapshots = 0

    def __call__(self, state: "ChatState") -> None:
        self.snapshots += 1
        call_thread_safe(self.app, self.render, state)


class TUILogHandler(logging.Handler):
    """Logging handler that writes records into the log panel."""

    def __init__(self, panel: "DebugPanel", app: "App | None" = None, level: int = logging.DEBUG) -> None:
        super().__init__(level=level)
        self.panel = panel
        self.app = app

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
            if len(message) > LOG_MAX_MESSAGE_LENGTH:
                message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."
            component = record.name.rsplit(".", 1)[-1]
            call_thread_safe(
                self.app,
                self.panel.log,
                component,
                message,
                LogLevel.normalize(record.levelno),
            )
        except Exception:
            self.handleError(record)
