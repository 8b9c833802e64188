"""Observable chat state and message store.

Hides how state changes reach observers. Every mutation builds a new
ChatState snapshot, swaps it in and notifies subscribers synchronously, so an
observer never sees a half-applied change.
"""

import logging
from collections.abc import Callable

from .models import ChatState, ChatTurn

logger = logging.getLogger(__name__)

StateListener = Callable[[ChatState], None]


class StateStore:
    """Holder of the current ChatState snapshot.

    Doubles as the message store: turns are only ever appended in arrival
    order, and the whole list is dropped on reset.
    """

    def __init__(self, initial: ChatState | None = None) -> None:
        self._state = initial or ChatState()
        self._listeners: list[StateListener] = []
        self._epoch = 0

    @property
    def state(self) -> ChatState:
        """The current snapshot."""
        return self._state

    @property
    def messages(self) -> tuple[ChatTurn, ...]:
        return self._state.messages

    @property
    def epoch(self) -> int:
        """Number of resets so far.

        A request that started under an older epoch belongs to a discarded
        conversation and must not write into the current one.
        """
        return self._epoch

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with each new snapshot.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, **changes) -> ChatState:
        """Replace the snapshot with a copy carrying ``changes``."""
        self._state = self._state.model_copy(update=changes)
        self._notify()
        return self._state

    def append(self, turn: ChatTurn) -> ChatState:
        """Append one turn to the message list."""
        return self.update(messages=(*self._state.messages, turn))

    def reset_messages(self, **changes) -> ChatState:
        """Drop every turn and start a new epoch."""
        self._epoch += 1
        return self.update(messages=(), **changes)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                # Listener failures are logged and skipped
                logger.exception("State listener %r failed", listener)
