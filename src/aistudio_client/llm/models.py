from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """Represents a chat message sent to an LLM provider."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(default="", description="Generated text content (empty when the model returned none)")
    model: str = Field(description="Model that generated the response")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )


class ImageResponse(BaseModel):
    """Response from an image-capable model.

    ``data`` holds the payload of the first inline-data part of the first
    candidate. It is ``None`` when the model produced no image at all.
    Depending on the transport, the payload is either raw bytes or
    base64-encoded text.
    """

    model_config = ConfigDict(frozen=True)

    data: bytes | str | None = Field(default=None, description="Image payload, raw or base64-encoded")
    mime_type: str | None = Field(default=None, description="MIME type reported for the payload")
    text: str = Field(default="", description="Any text the model returned alongside the image")
    model: str = Field(description="Model that generated the response")

    @property
    def has_image(self) -> bool:
        """Whether the response carries a non-empty image payload."""
        return bool(self.data)
