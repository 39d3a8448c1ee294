"""
Enumerations for host events, message roles, message parts and recovery phases.

Values mirror the wire strings used by the host.
"""

from enum import Enum


class EventType(str, Enum):
    """Host event kinds routed by the dispatcher."""

    SESSION_STATUS = "session.status"
    SESSION_DELETED = "session.deleted"


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class PartType(str, Enum):
    """Message part kinds that can be resubmitted in a prompt."""

    TEXT = "text"
    FILE = "file"
    AGENT = "agent"


class RecoveryPhase(str, Enum):
    """
    Per-session recovery phase.

    IDLE: no fallback engaged (or never tracked)
    RECOVERING: a recovery sequence is in flight
    COOLDOWN: a fallback was engaged; new recoveries suppressed until cooldown ends
    """

    IDLE = "idle"
    RECOVERING = "recovering"
    COOLDOWN = "cooldown"
