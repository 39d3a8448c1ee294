"""
Abstract base client for the host's session API.

Defines the operations the recovery orchestrator needs from the host. This
abstraction allows swapping the transport (HTTP, in-process SDK, test double)
without changing the fallback core.
"""

from abc import ABC, abstractmethod

import structlog

from rate_limit_fallback.models.messages import PromptRequest, SessionMessage

logger = structlog.get_logger(__name__)


class BaseSessionClient(ABC):
    """
    Abstract base class for host session clients.

    Responsibilities:
    - Abort a session's in-flight turn
    - Read a session's message history
    - Revert a session to a given message
    - Submit a prompt to a session, optionally overriding the model

    Does NOT handle:
    - Deciding when to recover (that's the RecoveryOrchestrator's job)
    - Picking the model (that's the rotation policy's job)

    Every operation may raise a SessionClientError subclass; callers in the
    fallback core catch and log them.
    """

    @abstractmethod
    async def abort(self, session_id: str) -> None:
        """
        Abort the session's in-flight turn.

        Raises:
            SessionClientError: If the host call fails
        """
        pass

    @abstractmethod
    async def messages(self, session_id: str) -> list[SessionMessage]:
        """
        Fetch the session's message history, oldest first.

        Raises:
            SessionClientError: If the host call fails
        """
        pass

    @abstractmethod
    async def revert(self, session_id: str, message_id: str) -> None:
        """
        Revert the session to just before message_id.

        Raises:
            SessionClientError: If the host call fails
        """
        pass

    @abstractmethod
    async def prompt(self, session_id: str, request: PromptRequest) -> None:
        """
        Submit a prompt to the session.

        When request.model is None the host's default model applies.

        Raises:
            SessionClientError: If the host call fails
        """
        pass

    async def health_check(self) -> bool:
        """
        Check whether the host is reachable.

        Default implementation returns True (optimistic). Must not raise.
        """
        return True

    async def close(self) -> None:
        """
        Close client connections and cleanup resources.

        Default implementation does nothing.
        """
        logger.debug("Closing session client", client_class=self.__class__.__name__)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
