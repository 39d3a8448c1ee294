"""
Custom exceptions for the host session client.

These exceptions give the recovery orchestrator and the API layer a single
hierarchy to catch, while keeping the failure modes distinguishable in logs.
"""


class SessionClientError(Exception):
    """
    Base exception for all session client errors.

    All host-call exceptions inherit from this to allow catching any
    client-related error with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class SessionConnectionError(SessionClientError):
    """
    Raised when the host's session API cannot be reached.

    Includes network errors, DNS failures, refused connections.
    Idempotent calls are retried with backoff before this is raised.
    """
    pass


class SessionTimeoutError(SessionConnectionError):
    """
    Raised when a host call exceeds the client timeout.

    Separate from generic connection errors so a hung prompt call can be told
    apart from an unreachable host.
    """
    pass


class SessionRequestError(SessionClientError):
    """
    Raised when the host rejects a request (4xx/5xx) or returns an unreadable body.
    """
    pass


class SessionNotFoundError(SessionRequestError):
    """
    Raised when the host does not know the session (404).

    Typically the session was deleted between the retry event and recovery.
    """
    pass
