"""
Recovery orchestrator: the per-session fallback state machine.

Phases per session:
    IDLE -> (matching retry event) -> RECOVERING -> COOLDOWN
    COOLDOWN -> (idle event after cooldown end) -> IDLE
    any -> (session deleted) -> untracked

Recovery sequence for a matching retry event:
    1. Abort the session's in-flight turn
    2. Wait a grace delay, then fetch the message history
    3. Locate the most recent user message
    4. Revert the session to that message, then wait a grace delay
    5. Resubmit the message's parts on the model picked by the rotation policy

Usage:
    orchestrator = RecoveryOrchestrator(client, config, store, event_logger)
    await orchestrator.handle_retry(session_id, status_message)
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

import structlog

from rate_limit_fallback.client.base_client import BaseSessionClient
from rate_limit_fallback.config import FallbackConfig
from rate_limit_fallback.fallback.exceptions import (
    NoMessagesError,
    NoResubmittableContentError,
    NoUserMessageError,
    RecoveryError,
)
from rate_limit_fallback.fallback.patterns import PatternMatcher
from rate_limit_fallback.fallback.prompt_builder import build_prompt_request, find_last_user_message
from rate_limit_fallback.fallback.rotation import next_model
from rate_limit_fallback.fallback.state import SessionStateStore
from rate_limit_fallback.logging_config import EventLogger
from rate_limit_fallback.models.fallback_models import RotationDecision, SessionRetryState
from rate_limit_fallback.monitoring.metrics import (
    cooldown_skips_total,
    fallback_model_selections_total,
    rate_limit_detections_total,
    recoveries_total,
)

logger = structlog.get_logger(__name__)

_FAILURE_OUTCOMES: dict[type[RecoveryError], str] = {
    NoMessagesError: "no_messages",
    NoUserMessageError: "no_user_message",
    NoResubmittableContentError: "no_valid_parts",
}


def _now_ms() -> float:
    return time.time() * 1000


class RecoveryOrchestrator:
    """
    Drives rate-limit recovery for host sessions.

    State reads and updates for a session happen without an intervening
    await, so a session's bookkeeping is never observed half-updated. Failures
    during recovery are logged and swallowed; the session keeps its updated
    state and becomes eligible again once the cooldown lapses.

    Attributes:
        client: Host session client
        config: Plugin configuration snapshot
        store: Per-session retry state
        matcher: Rate-limit pattern matcher
        fallback_models: Parsed fallback models in rotation order
    """

    def __init__(
        self,
        client: BaseSessionClient,
        config: FallbackConfig,
        store: Optional[SessionStateStore] = None,
        event_logger: Optional[EventLogger] = None,
        abort_grace_ms: int = 100,
        revert_grace_ms: int = 500,
        clock: Optional[Callable[[], float]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the orchestrator.

        Args:
            client: Host session client
            config: Plugin configuration snapshot
            store: Session state store (a fresh one when omitted)
            event_logger: Fallback event log (disabled when omitted)
            abort_grace_ms: Delay after abort before reading the history
            revert_grace_ms: Delay after revert before resubmitting
            clock: Current time in epoch milliseconds (wall clock when omitted)
            sleep: Async sleep in seconds
        """
        self.client = client
        self.config = config
        self.store = store if store is not None else SessionStateStore()
        self.event_logger = event_logger or EventLogger(enabled=False)
        self.matcher = PatternMatcher(config.patterns)
        self.fallback_models = config.fallback_models
        self.abort_grace_ms = abort_grace_ms
        self.revert_grace_ms = revert_grace_ms
        self._clock = clock or _now_ms
        self._sleep = sleep

    async def handle_retry(self, session_id: str, message: Optional[str]) -> None:
        """
        Handle a retry status event for a session.

        Ignores messages that do not look like rate limits and triggers
        arriving during an active cooldown. Otherwise records the attempt,
        picks a model and runs the recovery sequence.
        """
        if not self.matcher.matches(message):
            return

        rate_limit_detections_total.inc()
        now = self._clock()
        state = self.store.get(session_id)

        if state is not None and state.in_cooldown(now):
            cooldown_skips_total.inc()
            self.event_logger.info(
                "Skipping fallback, cooldown active",
                sessionID=session_id,
                cooldownRemaining=state.cooldown_end_time - now,
            )
            return

        if state is None:
            state = SessionRetryState()
            self.store.set(session_id, state)
        state.engage(now, self.config.cooldown_ms)
        state.recovering = True

        decision = next_model(self.fallback_models, state.attempt_count)
        fallback_model_selections_total.labels(model=decision.label).inc()

        self.event_logger.info(
            "Rate limit detected, switching to fallback",
            sessionID=session_id,
            message=message,
            attempt=state.attempt_count,
            model=decision.label,
        )

        try:
            await self._recover(session_id, decision)
        finally:
            state.recovering = False

    async def _recover(self, session_id: str, decision: RotationDecision) -> None:
        """Run the recovery sequence; never raises."""
        try:
            await self.client.abort(session_id)
            await self._sleep(self.abort_grace_ms / 1000)

            history = await self.client.messages(session_id)
            if not history:
                raise NoMessagesError("No messages found in session", details={"sessionID": session_id})

            last_user = find_last_user_message(history)
            if last_user is None:
                raise NoUserMessageError(
                    "No user message found in session",
                    details={"sessionID": session_id, "messages": len(history)},
                )

            await self.client.revert(session_id, last_user.info.id)
            await self._sleep(self.revert_grace_ms / 1000)

            request = build_prompt_request(last_user, decision)
            await self.client.prompt(session_id, request)

        except RecoveryError as e:
            recoveries_total.labels(outcome=_FAILURE_OUTCOMES.get(type(e), "precondition")).inc()
            self.event_logger.error(e.message, **e.details)
            logger.warning(
                "Recovery aborted",
                session_id=session_id,
                reason=type(e).__name__,
                details=e.details,
            )
            return

        except Exception as e:
            # Host client failures must never reach the host's event loop
            recoveries_total.labels(outcome="client_error").inc()
            self.event_logger.error(
                "Failed to send fallback prompt",
                sessionID=session_id,
                error=str(e),
            )
            logger.error(
                "Recovery failed",
                session_id=session_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            return

        recoveries_total.labels(outcome="resubmitted").inc()
        self.event_logger.info(
            "Fallback prompt sent successfully",
            sessionID=session_id,
            messageID=last_user.info.id,
            model=decision.label,
        )

    def handle_idle(self, session_id: str) -> bool:
        """
        Handle an idle status event.

        Resets the session to IDLE when its cooldown has expired.

        Returns:
            True if the session was reset
        """
        state = self.store.get(session_id)
        if state is None or not state.fallback_active:
            return False
        if self._clock() < state.cooldown_end_time:
            return False

        state.reset()
        self.event_logger.info("Cooldown expired, fallback reset", sessionID=session_id)
        return True

    def state_for(self, session_id: str) -> Optional[SessionRetryState]:
        return self.store.get(session_id)
