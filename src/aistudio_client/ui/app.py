"""Main Textual TUI application.

Renders ChatClient state snapshots and turns user actions into client calls.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header

from ..chat import ChatClient, ChatState, GTTSSpeechEngine, SpeechEngine, run_speech_consumer
from .callbacks import StateCallback, TUILogHandler
from .config import LogLevel
from .styles import APP_CSS
from .themes import STUDIO_DARK
from .widgets import (
    ChatHistoryWidget,
    ChatInputBar,
    DebugPanel,
    ImagePanel,
    SessionBar,
    SpeakRequested,
    StatusLine,
)

logger = logging.getLogger(__name__)


class ChatTextualApp(App):
    """Textual TUI for chatting with AI Studio models."""

    CSS = APP_CSS
    TITLE = "AI Studio Client"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+s", "speak_last_response", "Speak"),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("ctrl+b", "toggle_maximize_chat", "Max Chat"),
        Binding("ctrl+d", "toggle_debug", "Log"),
    ]

    def __init__(
        self,
        client: ChatClient,
        api_key: str | None = None,
        system_prompt: str | None = None,
        log_level: str | None = None,
        speech_engine: SpeechEngine | None = None,
    ) -> None:
        super().__init__()
        self._client = client
        self._api_key = api_key or ""
        self._system_prompt = system_prompt or ""
        self._log_level = log_level
        self._speech_engine = speech_engine or GTTSSpeechEngine()
        self._unsubscribe: Any = None
        self._log_handler: TUILogHandler | None = None

    @property
    def client(self) -> ChatClient:
        return self._client

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield SessionBar(
            id="session-bar",
            api_key=self._api_key,
            system_prompt=self._system_prompt,
        )

        yield ChatHistoryWidget(id="chat-history")

        with Vertical(id="right-panel"):
            yield ImagePanel(id="image-panel")
            yield DebugPanel(id="debug-panel")

        with Vertical(id="bottom-bar"):
            yield StatusLine(id="status-line")
            yield ChatInputBar(id="chat-input-bar")

        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(STUDIO_DARK)
        self.theme = "studio-dark"

        log_panel = self.query_one("#debug-panel", DebugPanel)
        self._log_handler = TUILogHandler(log_panel, app=self)
        logging.getLogger("aistudio_client").addHandler(self._log_handler)
        if self._log_level is not None:
            level = LogLevel.from_string(self._log_level)
            log_panel.log_level = level
            logging.getLogger("aistudio_client").setLevel(level)
            log_panel.show()

        self._unsubscribe = self._client.subscribe(StateCallback(self.render_state, app=self))
        self.render_state(self._client.state)

        self.run_worker(
            run_speech_consumer(self._client.speech, self._speech_engine, on_spoken=self._on_spoken),
            name="speech",
            group="speech",
        )

        self.sub_title = "not initialized"
        if self._api_key:
            self.initialize(self._api_key, self._system_prompt)
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def on_unmount(self) -> None:
        """Clean up subscriptions when app exits."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._log_handler is not None:
            logging.getLogger("aistudio_client").removeHandler(self._log_handler)
            self._log_handler = None
        self._client.speech.close()

    def render_state(self, state: ChatState) -> None:
        """Re-render every widget from a state snapshot."""
        self.query_one("#chat-history", ChatHistoryWidget).sync(state.messages)
        self.query_one("#status-line", StatusLine).update_status(
            state, initialized=self._client.session is not None
        )
        self.query_one("#chat-input-bar", ChatInputBar).set_busy(state.is_loading)
        image_panel = self.query_one("#image-panel", ImagePanel)
        if state.last_generated_image is not None:
            image_panel.show_image(state.last_generated_image)

    def initialize(self, api_key: str, system_prompt: str) -> bool:
        if not self._client.initialize(api_key, system_prompt):
            self.notify(self._client.state.last_error or "Initialization failed", severity="error")
            return False
        session = self._client.session
        self.sub_title = f"{session.model} | images: {session.image_model}"
        # render_state ran before the session was stored
        self.render_state(self._client.state)
        self.notify("Chat initialized", timeout=2)
        return True

    def on_session_bar_initialize_requested(self, event: SessionBar.InitializeRequested) -> None:
        self.initialize(event.api_key, event.system_prompt)

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        if event.action == ChatInputBar.SPEAK:
            self._speak(event.value)
        elif event.action == ChatInputBar.IMAGE:
            self._generate_image(event.value)
        else:
            self._send_message(event.value)

    def on_speak_requested(self, event: SpeakRequested) -> None:
        self._speak(event.text)

    @work(group="requests")
    async def _send_message(self, text: str) -> None:
        await self._client.send_message(text)
        if self._client.state.last_error:
            self.notify(self._client.state.last_error[:80], severity="error", timeout=5)

    @work(group="requests")
    async def _generate_image(self, prompt: str) -> None:
        image = await self._client.generate_image(prompt)
        if image is not None:
            self.notify(f"Image generated ({image.width}x{image.height})", timeout=3)
        elif self._client.state.last_error:
            self.notify(self._client.state.last_error[:80], severity="error", timeout=5)

    def _speak(self, text: str) -> None:
        if self._client.speak(text):
            self.notify("Speaking...", timeout=2)

    def _on_spoken(self, text: str, result: Any) -> None:
        if isinstance(result, Path):
            self.notify(f"Speech saved to {result}", timeout=4)

    def action_speak_last_response(self) -> None:
        """Speak the last model reply."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self._speak(response)
        else:
            self.notify("No response to speak", severity="warning")

    def action_copy_last_response(self) -> None:
        """Copy last model reply to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_toggle_maximize_chat(self) -> None:
        """Toggle maximize for chat panel."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        right = self.query_one("#right-panel", Vertical)
        if chat.has_class("-maximized"):
            chat.remove_class("-maximized")
            right.display = True
        else:
            chat.add_class("-maximized")
            right.display = False


async def run_textual_tui(
    client: ChatClient,
    api_key: str | None = None,
    system_prompt: str | None = None,
    log_level: str | None = None,
    speech_engine: SpeechEngine | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        client: Chat client the UI drives
        api_key: Prefilled API key; the chat is initialized on start when set
        system_prompt: Prefilled system prompt
        log_level: Log level for panel (debug/info/warning/error), None to hide
        speech_engine: Speech collaborator (default: gTTS to MP3 files)
    """
    app = ChatTextualApp(
        client=client,
        api_key=api_key,
        system_prompt=system_prompt,
        log_level=log_level,
        speech_engine=speech_engine,
    )
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
