"""
Host event models.

Events arrive as loosely-typed mappings ({type, properties}). They are parsed
here into a tagged union so the dispatcher never reaches into raw payloads:

- SessionStatusEvent: status is a discriminated union over retry/idle/busy
- SessionDeletedEvent: carries the deleted session's info

Unknown event types are not modelled; parse_event returns None for them.
"""

from typing import Annotated, Any, Literal, Mapping, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from rate_limit_fallback.models.enums import EventType

logger = structlog.get_logger(__name__)


class RetryStatus(BaseModel):
    """Host is retrying a failed provider request."""
    model_config = ConfigDict(extra="ignore")

    type: Literal["retry"]
    attempt: Optional[int] = Field(default=None, description="Host-side retry attempt number")
    message: Optional[str] = Field(default=None, description="Provider error message shown to the user")
    next: Optional[float] = Field(default=None, description="Epoch ms of the host's next retry")


class IdleStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["idle"]


class BusyStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["busy"]


SessionStatus = Annotated[
    Union[RetryStatus, IdleStatus, BusyStatus],
    Field(discriminator="type"),
]


class SessionStatusProperties(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    session_id: str = Field(..., alias="sessionID", min_length=1)
    status: SessionStatus


class SessionStatusEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["session.status"]
    properties: SessionStatusProperties


class SessionInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)


class SessionDeletedProperties(BaseModel):
    model_config = ConfigDict(extra="ignore")

    info: SessionInfo


class SessionDeletedEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["session.deleted"]
    properties: SessionDeletedProperties


HostEvent = Annotated[
    Union[SessionStatusEvent, SessionDeletedEvent],
    Field(discriminator="type"),
]

_host_event_adapter: TypeAdapter[HostEvent] = TypeAdapter(HostEvent)

_KNOWN_EVENT_TYPES = {event_type.value for event_type in EventType}


def parse_event(raw: Any) -> Optional[Union[SessionStatusEvent, SessionDeletedEvent]]:
    """
    Parse a raw host event into its typed variant.

    Args:
        raw: Event mapping as delivered by the host

    Returns:
        The parsed event, or None when the event type is not handled or the
        payload is malformed. Never raises.
    """
    if not isinstance(raw, Mapping):
        logger.debug("Ignoring non-mapping event", payload_type=type(raw).__name__)
        return None

    event_type = raw.get("type")
    if not isinstance(event_type, str) or event_type not in _KNOWN_EVENT_TYPES:
        return None

    try:
        return _host_event_adapter.validate_python(dict(raw))
    except ValidationError as e:
        logger.debug(
            "Ignoring malformed event",
            event_type=event_type,
            errors=e.error_count(),
        )
        return None
