"""Chat configuration constants.

Centralizes user-visible messages and default values for the chat module.
"""

# Default models
DEFAULT_PROVIDER = "gemini"
DEFAULT_CHAT_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"

# Synthetic reply appended after the system prompt on initialization
ACKNOWLEDGEMENT = "ОК. Я готовий."

# User-visible error messages
EMPTY_API_KEY_MESSAGE = "API key cannot be empty"
NOT_INITIALIZED_MESSAGE = "Please initialize chat with API key first"
IMAGE_FAILED_MESSAGE = "Failed to generate image"
CHAT_ERROR_TEMPLATE = "Error: {error}"
IMAGE_ERROR_TEMPLATE = "Error generating image: {error}"

# Image payloads without a reported MIME type are assumed to be PNG
DEFAULT_IMAGE_MIME_TYPE = "image/png"
