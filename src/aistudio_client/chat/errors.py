"""Error taxonomy for the chat client.

None of these escape the controller/dispatcher boundary: they are raised
internally and converted into the ``last_error`` field of the chat state.
"""


class ChatClientError(Exception):
    """Base class for chat client errors."""


class ValidationError(ChatClientError):
    """Invalid input supplied by the user (e.g. a blank API key)."""


class PreconditionError(ChatClientError):
    """An action was attempted before the chat was initialized."""


class RemoteCallError(ChatClientError):
    """The chat or image endpoint failed.

    The underlying transport or API exception is kept as ``__cause__``.
    """

    def __init__(self, message: str, operation: str = "chat"):
        super().__init__(message)
        self.operation = operation


class EmptyResultError(ChatClientError):
    """The endpoint answered without any usable content."""
