"""Conversation state manager.

Module structure (each module hides a design decision):
- models.py: Turn and state snapshot representation
- state.py: How snapshots are replaced and observed
- session.py: Credential validation and session construction
- dispatcher.py: Remote calls and the error boundary
- images.py: Image payload decoding
- speech.py: Speak-event channel and speech collaborators
- client.py: Facade used by presentation layers
"""

from .client import ChatClient
from .dispatcher import RequestDispatcher
from .errors import (
    ChatClientError,
    EmptyResultError,
    PreconditionError,
    RemoteCallError,
    ValidationError,
)
from .images import decode_image_payload
from .models import ChatState, ChatTurn, GeneratedImage, TurnRole
from .session import Session, SessionController
from .speech import GTTSSpeechEngine, SpeechBridge, SpeechEngine, run_speech_consumer
from .state import StateStore

__all__ = [
    "ChatClient",
    "ChatClientError",
    "ChatState",
    "ChatTurn",
    "EmptyResultError",
    "GTTSSpeechEngine",
    "GeneratedImage",
    "PreconditionError",
    "RemoteCallError",
    "RequestDispatcher",
    "Session",
    "SessionController",
    "SpeechBridge",
    "SpeechEngine",
    "StateStore",
    "TurnRole",
    "ValidationError",
    "decode_image_payload",
    "run_speech_consumer",
]
