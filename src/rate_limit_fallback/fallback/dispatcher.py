"""
Host event dispatcher.
"""

from typing import Any, Optional

import structlog

from rate_limit_fallback.fallback.orchestrator import RecoveryOrchestrator
from rate_limit_fallback.logging_config import EventLogger
from rate_limit_fallback.models.events import (
    IdleStatus,
    RetryStatus,
    SessionDeletedEvent,
    SessionStatusEvent,
    parse_event,
)

logger = structlog.get_logger(__name__)


class EventDispatcher:
    """
    Single entry point for host lifecycle events.

    Routes session.status events by status kind (retry -> recovery, idle ->
    cooldown reset, busy -> ignored) and session.deleted events to state
    cleanup. Unknown or malformed events are ignored. Never raises.
    """

    def __init__(self, orchestrator: RecoveryOrchestrator, event_logger: Optional[EventLogger] = None):
        self.orchestrator = orchestrator
        self.store = orchestrator.store
        self.event_logger = event_logger or orchestrator.event_logger

    async def handle(self, event: Any) -> None:
        parsed = parse_event(event)
        if parsed is None:
            return

        if isinstance(parsed, SessionStatusEvent):
            session_id = parsed.properties.session_id
            status = parsed.properties.status
            if isinstance(status, RetryStatus):
                await self.orchestrator.handle_retry(session_id, status.message)
            elif isinstance(status, IdleStatus):
                self.orchestrator.handle_idle(session_id)
            return

        if isinstance(parsed, SessionDeletedEvent):
            session_id = parsed.properties.info.id
            self.store.delete(session_id)
            self.event_logger.info("Session cleaned up", sessionID=session_id)
            logger.debug("Session state removed", session_id=session_id)

    async def __call__(self, event: Any) -> None:
        await self.handle(event)
