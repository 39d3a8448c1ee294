"""
Per-session retry state registry.
"""

from typing import Iterator, Optional

from rate_limit_fallback.models.fallback_models import SessionRetryState


class SessionStateStore:
    """
    Mapping from session id to SessionRetryState.

    Entries live until explicitly deleted (session deletion event); there is
    no implicit eviction. Keys are independent, so sessions can be handled
    concurrently as long as a single session's mutations are not interleaved.
    """

    def __init__(self) -> None:
        self._states: dict[str, SessionRetryState] = {}

    def get(self, session_id: str) -> Optional[SessionRetryState]:
        return self._states.get(session_id)

    def set(self, session_id: str, state: SessionRetryState) -> None:
        self._states[session_id] = state

    def delete(self, session_id: str) -> bool:
        """Remove a session's state. Returns True if it was tracked."""
        return self._states.pop(session_id, None) is not None

    def session_ids(self) -> list[str]:
        return list(self._states)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._states))
