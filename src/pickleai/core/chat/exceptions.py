"""Chat-layer exceptions.

``PromptValidationError`` and ``UpstreamFailure`` are raised inside a turn
and end up in ``ChatState.error``.  The session registry errors are raised
to the HTTP layer, which maps them to status codes.
"""


class PromptValidationError(RuntimeError):
    """A composed system prompt failed the injection sanity check."""

    def __init__(self) -> None:
        super().__init__("Invalid system prompt generated")


class UpstreamFailure(RuntimeError):
    """The language model call failed, timed out or returned nothing."""


class SessionNotFound(LookupError):
    """No live chat session has the requested id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Chat session {session_id!r} not found")


class SessionBusy(RuntimeError):
    """A turn is already in flight for this session."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Chat session {session_id!r} is processing a message")


class SessionLimitReached(RuntimeError):
    """The registry holds its maximum number of sessions."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Session limit of {limit} reached")
