"""
aistudio-client: a chat client for Google AI Studio models.

Forwards user text to Gemini, keeps the conversation as an observable state
snapshot, and offers image generation and a speak-event channel for
text-to-speech.
"""

__version__ = "0.1.0"

from .chat import (
    ChatClient,
    ChatState,
    ChatTurn,
    GeneratedImage,
    Session,
    SpeechBridge,
)

__all__ = [
    "ChatClient",
    "ChatState",
    "ChatTurn",
    "GeneratedImage",
    "Session",
    "SpeechBridge",
]
