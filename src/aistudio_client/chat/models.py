"""Data models for the chat state.

Hides the internal representation of chat turns and the observable state
snapshot handed to presentation layers.
"""

from datetime import datetime
from enum import Enum
from io import BytesIO
from pathlib import Path

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, computed_field


class TurnRole(str, Enum):
    """Who produced a chat turn."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"  # synthetic turns added on initialization


class ChatTurn(BaseModel):
    """A single immutable turn in the conversation."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Text of the turn")
    role: TurnRole = Field(description="Producer of the turn")
    timestamp: datetime = Field(default_factory=datetime.now)

    @computed_field
    @property
    def is_user(self) -> bool:
        """Whether the turn was typed by the user."""
        return self.role == TurnRole.USER

    @classmethod
    def user(cls, content: str) -> "ChatTurn":
        return cls(content=content, role=TurnRole.USER)

    @classmethod
    def assistant(cls, content: str) -> "ChatTurn":
        return cls(content=content, role=TurnRole.ASSISTANT)

    @classmethod
    def system(cls, content: str) -> "ChatTurn":
        return cls(content=content, role=TurnRole.SYSTEM)


class GeneratedImage(BaseModel):
    """A decoded image returned by the image model."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(description="Encoded image bytes (PNG, JPEG, ...)")
    mime_type: str = Field(description="MIME type of the encoded bytes")
    width: int = Field(ge=1)
    height: int = Field(ge=1)

    def to_pil(self) -> Image.Image:
        """Return a displayable bitmap."""
        image = Image.open(BytesIO(self.data))
        image.load()
        return image

    def save(self, path: str | Path) -> Path:
        """Write the encoded bytes to ``path`` and return it."""
        target = Path(path)
        target.write_bytes(self.data)
        return target


class ChatState(BaseModel):
    """Observable snapshot of the chat.

    Snapshots are immutable; every state change produces a new one.
    """

    model_config = ConfigDict(frozen=True)

    messages: tuple[ChatTurn, ...] = Field(default=())
    is_loading: bool = False
    last_error: str | None = None
    last_generated_image: GeneratedImage | None = None
