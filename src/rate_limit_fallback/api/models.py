"""
API-specific request and response models for FastAPI endpoints.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class HostEventPayload(BaseModel):
    """
    Host event envelope accepted by POST /events.

    Only the envelope is checked here; properties are validated by the
    dispatcher, which ignores malformed payloads.
    """

    type: str = Field(description="Event kind", examples=["session.status", "session.deleted"])
    properties: dict[str, Any] = Field(
        default_factory=dict,
        description="Event-specific payload",
    )


class EventAcceptedResponse(BaseModel):
    status: str = Field(
        description="accepted, or disabled when the plugin is turned off",
        examples=["accepted", "disabled"],
    )
    event_type: str


class SessionStateResponse(BaseModel):
    """Retry state of a tracked session."""

    session_id: str
    phase: str = Field(examples=["idle", "recovering", "cooldown"])
    fallback_active: bool
    attempt_count: int = Field(ge=0)
    cooldown_end_time: float = Field(description="Epoch milliseconds")
    cooldown_remaining_ms: float = Field(ge=0)


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str = Field(
        description="Overall health status",
        examples=["healthy", "degraded"]
    )
    version: str
    plugin_enabled: bool
    tracked_sessions: int = Field(ge=0)
    services: dict[str, str] = Field(
        description="Status of individual services",
        examples=[{"host": "ok"}]
    )
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
