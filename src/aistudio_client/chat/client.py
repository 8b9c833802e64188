"""Chat client facade.

The single object a presentation layer talks to. It owns the state store,
the speech bridge and the current session, and threads the session into
every dispatcher call.
"""

import logging
from collections.abc import Callable
from typing import Any

from ..llm import LLMProvider, create_llm_provider
from .config import DEFAULT_CHAT_MODEL, DEFAULT_IMAGE_MODEL, DEFAULT_PROVIDER
from .dispatcher import RequestDispatcher
from .models import ChatState, ChatTurn, GeneratedImage
from .session import ProviderFactory, Session, SessionController
from .speech import SpeechBridge
from .state import StateListener, StateStore

logger = logging.getLogger(__name__)


class ChatClient:
    """Conversation state manager.

    Example:
        client = ChatClient()
        client.subscribe(render)
        client.initialize(api_key, "You are terse.")
        await client.send_message("hi")
        client.speak(client.state.messages[-1].content)
    """

    def __init__(
        self,
        provider_factory: ProviderFactory = create_llm_provider,
        provider_name: str = DEFAULT_PROVIDER,
        model: str = DEFAULT_CHAT_MODEL,
        image_model: str = DEFAULT_IMAGE_MODEL,
        store: StateStore | None = None,
        speech: SpeechBridge | None = None,
        **provider_kwargs: Any,
    ) -> None:
        self._store = store or StateStore()
        self._speech = speech or SpeechBridge()
        self._controller = SessionController(
            self._store,
            provider_factory=provider_factory,
            provider_name=provider_name,
            model=model,
            image_model=image_model,
            **provider_kwargs,
        )
        self._dispatcher = RequestDispatcher(self._store)
        self._session: Session | None = None
        self._retired: list[LLMProvider] = []

    @property
    def state(self) -> ChatState:
        """Current observable snapshot."""
        return self._store.state

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def speech(self) -> SpeechBridge:
        return self._speech

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with every new snapshot."""
        return self._store.subscribe(listener)

    def initialize(self, api_key: str, system_prompt: str | None = None) -> bool:
        """(Re)initialize the chat. Returns False on a blank API key."""
        session = self._controller.initialize(api_key, system_prompt)
        if session is None:
            return False
        if self._session is not None:
            self._retired.append(self._session.provider)
        self._session = session
        return True

    async def send_message(self, text: str) -> ChatTurn | None:
        """Send text to the model; see RequestDispatcher.send_message."""
        return await self._dispatcher.send_message(self._session, text)

    async def generate_image(self, prompt: str) -> GeneratedImage | None:
        """Generate an image; see RequestDispatcher.generate_image."""
        return await self._dispatcher.generate_image(self._session, prompt)

    def speak(self, text: str) -> bool:
        """Ask the speech collaborator to read ``text`` aloud."""
        return self._speech.speak(text)

    async def close(self) -> None:
        """Close providers and the speech bridge."""
        self._speech.close()
        providers = list(self._retired)
        if self._session is not None:
            providers.append(self._session.provider)
        for provider in providers:
            try:
                await provider.close()
            except Exception as e:
                logger.warning("Failed to close provider: %s", e)
        self._retired.clear()
