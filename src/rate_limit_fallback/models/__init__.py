"""
Data models for the rate-limit fallback service.

Includes:
- Enums (EventType, MessageRole, PartType, RecoveryPhase)
- Fallback models (FallbackModelSpec, RotationDecision, SessionRetryState)
- Host events (SessionStatusEvent, SessionDeletedEvent, parse_event)
- Session messages and prompt payloads (SessionMessage, PromptRequest, *PartInput)
"""

from rate_limit_fallback.models.enums import (
    EventType,
    MessageRole,
    PartType,
    RecoveryPhase,
)
from rate_limit_fallback.models.events import (
    BusyStatus,
    IdleStatus,
    RetryStatus,
    SessionDeletedEvent,
    SessionStatusEvent,
    parse_event,
)
from rate_limit_fallback.models.fallback_models import (
    FallbackModelSpec,
    RotationDecision,
    SessionRetryState,
)
from rate_limit_fallback.models.messages import (
    AgentPartInput,
    FilePartInput,
    MessageInfo,
    PromptPart,
    PromptRequest,
    SessionMessage,
    TextPartInput,
)

__all__ = [
    # Enums
    "EventType",
    "MessageRole",
    "PartType",
    "RecoveryPhase",
    # Fallback models
    "FallbackModelSpec",
    "RotationDecision",
    "SessionRetryState",
    # Events
    "RetryStatus",
    "IdleStatus",
    "BusyStatus",
    "SessionStatusEvent",
    "SessionDeletedEvent",
    "parse_event",
    # Messages
    "MessageInfo",
    "SessionMessage",
    "TextPartInput",
    "FilePartInput",
    "AgentPartInput",
    "PromptPart",
    "PromptRequest",
]
