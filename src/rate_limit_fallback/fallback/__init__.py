"""
Rate-limit fallback core.

This package implements the per-session retry/rotation state machine:

1. **Detection**: PatternMatcher gates retry events on rate-limit messages
2. **Cooldown**: SessionStateStore tracks attempts and cooldown windows
3. **Rotation**: next_model picks fallback / main model per attempt
4. **Recovery**: RecoveryOrchestrator aborts, reverts and resubmits

EventDispatcher is the entry point the host calls for every lifecycle event.

Usage:
    >>> from rate_limit_fallback.fallback import EventDispatcher, RecoveryOrchestrator
    >>> dispatcher = EventDispatcher(RecoveryOrchestrator(client, config))
    >>> await dispatcher.handle(event)
"""

from rate_limit_fallback.fallback.dispatcher import EventDispatcher
from rate_limit_fallback.fallback.exceptions import (
    NoMessagesError,
    NoResubmittableContentError,
    NoUserMessageError,
    RecoveryError,
    SessionNotTrackedError,
)
from rate_limit_fallback.fallback.orchestrator import RecoveryOrchestrator
from rate_limit_fallback.fallback.patterns import PatternMatcher
from rate_limit_fallback.fallback.rotation import next_model
from rate_limit_fallback.fallback.state import SessionStateStore

__all__ = [
    "EventDispatcher",
    "RecoveryOrchestrator",
    "PatternMatcher",
    "SessionStateStore",
    "next_model",
    "RecoveryError",
    "NoMessagesError",
    "NoUserMessageError",
    "NoResubmittableContentError",
    "SessionNotTrackedError",
]
