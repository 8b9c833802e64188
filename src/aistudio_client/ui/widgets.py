"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Session form (API key and system prompt entry)
- Input history management
- Status line formatting (loading and error)
- Log rendering and level filtering
- Chat turn rendering
- Generated image display
"""

from datetime import datetime

from PIL import Image as PILImage
from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message
from textual.widgets import Button, Input, Markdown, RichLog, Static, TextArea
from textual_image.widget import Image as TextualImageWidget

from ..chat import ChatState, ChatTurn, GeneratedImage, TurnRole
from .config import (
    INPUT_HISTORY_MAX_SIZE,
    LOG_TIMESTAMP_FORMAT,
    MESSAGE_TIMESTAMP_FORMAT,
    ROLE_LABELS,
    LogLevel,
)


class SpeakRequested(Message):
    """Posted when the user asks for a piece of text to be read aloud."""

    def __init__(self, text: str) -> None:
        super().__init__()
        self.text = text


class SessionBar(Horizontal):
    """API key and system prompt entry with an Initialize button."""

    class InitializeRequested(Message):
        """Message sent when the user asks to (re)initialize the chat."""

        def __init__(self, api_key: str, system_prompt: str) -> None:
            super().__init__()
            self.api_key = api_key
            self.system_prompt = system_prompt

    def __init__(self, *args, api_key: str = "", system_prompt: str = "", **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._api_key = api_key
        self._system_prompt = system_prompt

    def compose(self):
        yield Input(
            value=self._api_key,
            placeholder="API key",
            password=True,
            id="api-key-input",
        )
        yield Input(
            value=self._system_prompt,
            placeholder="System prompt (optional)",
            id="system-prompt-input",
        )
        yield Button("Initialize", id="init-btn", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "init-btn":
            event.stop()
            self.request_initialize()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.request_initialize()

    def request_initialize(self) -> None:
        api_key = self.query_one("#api-key-input", Input).value
        system_prompt = self.query_one("#system-prompt-input", Input).value
        self.post_message(self.InitializeRequested(api_key, system_prompt))


class ClickableMessage(Vertical):
    """A chat turn that asks for its text to be spoken when clicked."""

    def __init__(self, content: str, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._content = content

    def on_click(self, event: Click) -> None:
        event.stop()
        self.post_message(SpeakRequested(self._content))


class ChatInputBar(Horizontal):
    """Chat input with Send, Image and Speak buttons."""

    SEND = "send"
    IMAGE = "image"
    SPEAK = "speak"

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str, action: str) -> None:
            super().__init__()
            self.value = value
            self.action = action

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1
        self._busy = False

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Send message (Ctrl+J)"
        )
        yield Button("Image", id="image-btn", variant="primary").with_tooltip(
            "Generate an image from the input"
        )
        yield Button("Speak", id="speak-btn").with_tooltip(
            "Read the input aloud"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.highlight_cursor_line = False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        actions = {
            "send-btn": self.SEND,
            "image-btn": self.IMAGE,
            "speak-btn": self.SPEAK,
        }
        action = actions.get(event.button.id or "")
        if action is not None:
            event.stop()
            self._submit(action)

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit(self.SEND)
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        last_row = len(lines) - 1
        last_col = len(lines[-1]) if lines else 0
        return text_area.cursor_location == (last_row, last_col)

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _remember(self, value: str) -> None:
        if not self._history or self._history[-1] != value:
            self._history.append(value)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1

    def _submit(self, action: str) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if not value:
            return
        # Requests are disabled while one is in flight; speaking is not
        if self._busy and action != self.SPEAK:
            return
        self._remember(value)
        if action != self.SPEAK:
            text_area.text = ""
        self.post_message(self.Submitted(value, action))

    def set_busy(self, busy: bool) -> None:
        """Disable request buttons while a request is in flight."""
        self._busy = busy
        self.query_one("#send-btn", Button).disabled = busy
        self.query_one("#image-btn", Button).disabled = busy
        self.query_one("#send-btn", Button).label = "..." if busy else "Send"

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", TextArea).focus()


class StatusLine(Static):
    """One-line status: loading indicator or the last error."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._is_loading = False
        self._error: str | None = None
        self._initialized = False

    def on_mount(self) -> None:
        self._update_display()

    def update_status(self, state: ChatState, initialized: bool) -> None:
        self._is_loading = state.is_loading
        self._error = state.last_error
        self._initialized = initialized
        self._update_display()

    def _update_display(self) -> None:
        if self._error:
            self.set_class(True, "-error")
            self.update(Text(self._error))
            return
        self.set_class(False, "-error")
        if self._is_loading:
            self.update("[bold yellow]Waiting for the model...[/]")
        elif self._initialized:
            self.update("[green]Ready[/]")
        else:
            self.update("[dim]Enter an API key and press Initialize[/]")

    def get_plain_text(self) -> str:
        return self._error or ("loading" if self._is_loading else "")


class DebugPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Shows timestamped log records from all components.
    Supports standard log levels: DEBUG < INFO < WARNING < ERROR.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    def __init__(self, *args, log_level: int = LogLevel.INFO, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def log(
        self,
        component: str,
        message: str,
        level: int = LogLevel.DEBUG
    ) -> None:
        """Add a log entry if it meets the current level threshold.

        Args:
            component: Component name (module the record came from)
            message: Log message
            level: Log level (LogLevel.DEBUG, INFO, WARNING, ERROR)
        """
        if level < self._log_level:
            return

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)

        level_colors = {
            LogLevel.DEBUG: "dim white",
            LogLevel.INFO: "cyan",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red",
        }
        level_color = level_colors.get(level, "white")
        level_name = LogLevel.name(level)

        component_colors = {
            "app": "cyan",
            "session": "green",
            "dispatcher": "magenta",
            "speech": "blue",
            "state": "bright_yellow",
        }
        comp_color = component_colors.get(component, "white")

        line = Text.from_markup(
            f"[dim]{timestamp}[/] "
            f"[{level_color}]{level_name:<5}[/] "
            f"[{comp_color}]\\[{component}][/] "
        )
        line.append(message)
        self.write(line)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True


class ImagePanel(Static):
    """Panel showing the last generated image.

    Uses textual_image.widget.Image which auto-detects the best rendering
    method: Sixel (iTerm2, xterm), TGP (Kitty), or halfcell fallback.

    Hidden until an image has been generated.
    """

    BORDER_TITLE = "Image"
    BORDER_SUBTITLE = ""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._image_widget: TextualImageWidget | None = None
        self._current: GeneratedImage | None = None

    def on_mount(self) -> None:
        self.display = False

    def compose(self):
        self._image_widget = TextualImageWidget(None, id="generated-image")
        yield self._image_widget

    @property
    def current(self) -> GeneratedImage | None:
        return self._current

    def show_image(self, image: GeneratedImage | None) -> bool:
        """Display ``image`` unless it is already shown.

        Returns:
            True if the panel now shows an image
        """
        if image is None:
            return self._current is not None
        if image is self._current:
            return True

        self._current = image
        bitmap: PILImage.Image = image.to_pil()
        if self._image_widget is not None:
            self._image_widget.image = bitmap
        self.border_subtitle = f"{image.width}x{image.height} {image.mime_type}"
        self.display = True
        return True

    def clear_image(self) -> None:
        if self._image_widget is not None:
            self._image_widget.image = None
        self._current = None
        self.border_subtitle = ""
        self.display = False


class ChatHistoryWidget(VerticalScroll):
    """Scrollable chat history mirroring the message store."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._turns: tuple[ChatTurn, ...] = ()

    def sync(self, turns: tuple[ChatTurn, ...]) -> None:
        """Bring the widget in line with the message store.

        Turns are append-only, so only the new tail is mounted; anything
        else (a reset) triggers a full re-render.
        """
        if turns[:len(self._turns)] != self._turns:
            self.remove_children()
            self._turns = ()

        for turn in turns[len(self._turns):]:
            self._render_turn(turn)
        self._turns = turns

        count = len(turns)
        self.border_subtitle = f"{count} messages" if count else "Conversation history"
        if count:
            self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        """Get the last assistant response."""
        for turn in reversed(self._turns):
            if turn.role == TurnRole.ASSISTANT:
                return turn.content
        return None

    def _render_turn(self, turn: ChatTurn) -> None:
        label = ROLE_LABELS.get(turn.role.value, turn.role.value)
        header = f"{label} [{turn.timestamp.strftime(MESSAGE_TIMESTAMP_FORMAT)}]"
        container = ClickableMessage(
            content=turn.content,
            classes=f"chat-message {turn.role.value}-message",
        )
        container.compose_add_child(Static(Text(header), classes="message-header"))
        if turn.role == TurnRole.ASSISTANT:
            container.compose_add_child(Markdown(turn.content, classes="message-content"))
        else:
            container.compose_add_child(Static(Text(turn.content), classes="message-content"))
        self.mount(container)
