"""Request dispatcher.

Issues one remote call per user action and folds the outcome into the chat
state. This is the error boundary: every failure ends up as ``last_error``
text and nothing is raised to the caller.

Requests on the same session are serialized by the session lock, so
``is_loading`` is true only while a single request is in flight. A request
that outlives its conversation (the chat was re-initialized meanwhile) is
dropped: it writes nothing into the state.
"""

import logging

from .config import (
    CHAT_ERROR_TEMPLATE,
    IMAGE_ERROR_TEMPLATE,
    IMAGE_FAILED_MESSAGE,
    NOT_INITIALIZED_MESSAGE,
)
from .errors import EmptyResultError, PreconditionError, RemoteCallError
from .images import decode_image_payload
from .models import ChatTurn, GeneratedImage
from .session import Session
from .state import StateStore

logger = logging.getLogger(__name__)


class RequestDispatcher:
    """Runs chat and image requests against a session."""

    def __init__(self, store: StateStore) -> None:
        self._store = store

    def _require_session(self, session: Session | None) -> Session:
        if session is None:
            raise PreconditionError(NOT_INITIALIZED_MESSAGE)
        return session

    async def send_message(self, session: Session | None, text: str) -> ChatTurn | None:
        """Send user text and append the model's reply.

        The user turn is appended before the call is made. An empty reply
        appends nothing and is not an error.

        Args:
            session: Current session, None if the chat was never initialized
            text: Raw user text

        Returns:
            The appended assistant turn, or None
        """
        try:
            active = self._require_session(session)
        except PreconditionError as e:
            self._store.update(last_error=str(e))
            return None

        epoch = self._store.epoch
        async with active.lock:
            if self._is_stale(epoch):
                logger.info("Chat was re-initialized, dropping queued message")
                return None

            self._store.update(is_loading=True, last_error=None)
            try:
                self._store.append(ChatTurn.user(text))
                reply = await self._complete(active)
                if self._is_stale(epoch):
                    logger.info("Chat was re-initialized, dropping reply")
                    return None
                turn = ChatTurn.assistant(reply)
                self._store.append(turn)
                return turn
            except EmptyResultError:
                logger.debug("Model returned no text, nothing appended")
                return None
            except RemoteCallError as e:
                if not self._is_stale(epoch):
                    self._store.update(last_error=CHAT_ERROR_TEMPLATE.format(error=e))
                return None
            finally:
                if not self._is_stale(epoch):
                    self._store.update(is_loading=False)

    def _is_stale(self, epoch: int) -> bool:
        return self._store.epoch != epoch

    async def _complete(self, session: Session) -> str:
        history = session.build_history(self._store.messages)
        logger.debug("Sending chat request (%d messages) to %s", len(history), session.model)
        try:
            response = await session.provider.chat_completion(history, model=session.model)
        except Exception as e:
            logger.error("Chat request failed: %s", e)
            raise RemoteCallError(str(e), operation="chat") from e

        if not response.content:
            raise EmptyResultError("Model returned no text")
        return response.content

    async def generate_image(self, session: Session | None, prompt: str) -> GeneratedImage | None:
        """Generate an image and store it as the last generated image.

        When the response has no image payload the previous image is kept and
        the fixed failure message is set.

        Args:
            session: Current session, None if the chat was never initialized
            prompt: Image description

        Returns:
            The new image, or None
        """
        try:
            active = self._require_session(session)
        except PreconditionError as e:
            self._store.update(last_error=str(e))
            return None

        epoch = self._store.epoch
        async with active.lock:
            if self._is_stale(epoch):
                logger.info("Chat was re-initialized, dropping queued image request")
                return None

            self._store.update(is_loading=True, last_error=None)
            try:
                image = await self._render(active, prompt)
                if self._is_stale(epoch):
                    logger.info("Chat was re-initialized, dropping image")
                    return None
                self._store.update(last_generated_image=image)
                return image
            except EmptyResultError:
                if not self._is_stale(epoch):
                    self._store.update(last_error=IMAGE_FAILED_MESSAGE)
                return None
            except RemoteCallError as e:
                if not self._is_stale(epoch):
                    self._store.update(last_error=IMAGE_ERROR_TEMPLATE.format(error=e))
                return None
            finally:
                if not self._is_stale(epoch):
                    self._store.update(is_loading=False)

    async def _render(self, session: Session, prompt: str) -> GeneratedImage:
        logger.debug("Sending image request to %s", session.image_model)
        try:
            response = await session.provider.generate_image(prompt, model=session.image_model)
        except Exception as e:
            logger.error("Error generating image: %s", e)
            raise RemoteCallError(str(e), operation="image") from e

        if not response.has_image:
            logger.warning("Image response from %s carried no image payload", response.model)
            raise EmptyResultError(IMAGE_FAILED_MESSAGE)

        try:
            return decode_image_payload(response.data, response.mime_type)
        except Exception as e:
            logger.error("Error decoding image: %s", e)
            raise RemoteCallError(str(e), operation="image") from e
