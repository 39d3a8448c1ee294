"""
Recovery exceptions.

RecoveryError subclasses signal that a recovery sequence cannot continue for
the current attempt (nothing to resubmit). They are raised and caught inside
the orchestrator; the session keeps its updated state and stays eligible for
the next matching retry event.
"""


class RecoveryError(Exception):
    """
    Base exception for recovery precondition failures.

    Attributes:
        message: Human-readable reason
        details: Structured context for logging (session id, counts, ...)
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NoMessagesError(RecoveryError):
    """Raised when the session's message history is empty."""
    pass


class NoUserMessageError(RecoveryError):
    """Raised when the history contains no message authored by the user."""
    pass


class NoResubmittableContentError(RecoveryError):
    """
    Raised when no part of the last user message can be resubmitted.

    Synthetic parts and parts missing required fields are filtered out; if
    nothing survives there is no prompt to send.
    """
    pass


class SessionNotTrackedError(Exception):
    """Raised when inspecting a session that has no retry state."""

    def __init__(self, session_id: str):
        super().__init__(f"Session not tracked: {session_id}")
        self.session_id = session_id
