"""Session controller.

Hides how credentials and the system prompt turn into a usable chat session:
validation, provider construction and the synthetic opening turns.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import SecretStr

from ..llm import ChatMessage, LLMProvider, create_llm_provider
from .config import (
    ACKNOWLEDGEMENT,
    CHAT_ERROR_TEMPLATE,
    DEFAULT_CHAT_MODEL,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_PROVIDER,
    EMPTY_API_KEY_MESSAGE,
)
from .errors import ValidationError
from .models import ChatTurn, TurnRole
from .state import StateStore

logger = logging.getLogger(__name__)

ProviderFactory = Callable[..., LLMProvider]


@dataclass(frozen=True)
class Session:
    """An initialized chat session.

    Passed explicitly into every dispatcher call. The lock serializes
    requests made on the same session.
    """

    api_key: SecretStr
    provider: LLMProvider
    system_prompt: str | None = None
    model: str = DEFAULT_CHAT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, compare=False, repr=False)

    @property
    def has_system_prompt(self) -> bool:
        return bool(self.system_prompt and self.system_prompt.strip())

    def primer(self) -> list[ChatMessage]:
        """Opening exchange replayed ahead of every chat request."""
        if not self.has_system_prompt:
            return []
        return [
            ChatMessage(role="user", content=self.system_prompt),
            ChatMessage(role="assistant", content=ACKNOWLEDGEMENT),
        ]

    def build_history(self, turns: tuple[ChatTurn, ...]) -> list[ChatMessage]:
        """Convert stored turns into the provider's message list.

        Synthetic system turns are skipped; the primer stands in for them.
        """
        history = self.primer()
        for turn in turns:
            if turn.role == TurnRole.SYSTEM:
                continue
            history.append(ChatMessage(role=turn.role.value, content=turn.content))
        return history


class SessionController:
    """Creates sessions and resets the message store."""

    def __init__(
        self,
        store: StateStore,
        provider_factory: ProviderFactory = create_llm_provider,
        provider_name: str = DEFAULT_PROVIDER,
        model: str = DEFAULT_CHAT_MODEL,
        image_model: str = DEFAULT_IMAGE_MODEL,
        **provider_kwargs: Any,
    ) -> None:
        self._store = store
        self._provider_factory = provider_factory
        self._provider_name = provider_name
        self._model = model
        self._image_model = image_model
        self._provider_kwargs = provider_kwargs

    def initialize(self, api_key: str, system_prompt: str | None = None) -> Session | None:
        """Start a new session.

        On a blank API key, sets the error and returns None; the message
        store and any previous session are left as they were. On success,
        resets the message store and, when a system prompt is given, appends
        the prompt and the fixed acknowledgement as non-user turns.

        Args:
            api_key: Google AI Studio API key
            system_prompt: Optional instructions for the model

        Returns:
            The new Session, or None if initialization failed
        """
        self._store.update(last_error=None)

        try:
            self._validate(api_key)
            provider = self._provider_factory(
                self._provider_name,
                api_key=api_key.strip(),
                model=self._model,
                image_model=self._image_model,
                **self._provider_kwargs,
            )
        except ValidationError as e:
            logger.warning("Chat initialization rejected: %s", e)
            self._store.update(last_error=str(e))
            return None
        except Exception as e:
            logger.error("Could not create %s provider: %s", self._provider_name, e)
            self._store.update(last_error=CHAT_ERROR_TEMPLATE.format(error=e))
            return None

        session = Session(
            api_key=SecretStr(api_key.strip()),
            provider=provider,
            system_prompt=system_prompt,
            model=self._model,
            image_model=self._image_model,
        )

        # Requests still running for the previous session become stale
        self._store.reset_messages(is_loading=False)
        if session.has_system_prompt:
            self._store.append(ChatTurn.system(system_prompt))
            self._store.append(ChatTurn.system(ACKNOWLEDGEMENT))

        logger.info(
            "Chat initialized with model %s (system prompt: %s)",
            session.model,
            "yes" if session.has_system_prompt else "no",
        )
        return session

    @staticmethod
    def _validate(api_key: str) -> None:
        if not api_key or not api_key.strip():
            raise ValidationError(EMPTY_API_KEY_MESSAGE)
