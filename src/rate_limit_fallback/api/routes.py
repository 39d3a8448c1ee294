"""
API routes for host event ingestion and state inspection.

The host (or a relay subscribed to its event stream) posts every lifecycle
event to POST /events. Events are handled inline, so the response to a
matching retry event is sent once its recovery sequence has finished.
"""

import time
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from rate_limit_fallback.api.dependencies import (
    get_event_dispatcher,
    get_session_client,
    get_settings,
)
from rate_limit_fallback.api.models import (
    ErrorResponse,
    EventAcceptedResponse,
    HealthResponse,
    HostEventPayload,
    SessionStateResponse,
)
from rate_limit_fallback.client.base_client import BaseSessionClient
from rate_limit_fallback.config import Settings
from rate_limit_fallback.fallback.dispatcher import EventDispatcher
from rate_limit_fallback.fallback.exceptions import SessionNotTrackedError

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post(
    "/events",
    response_model=EventAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Deliver a host lifecycle event",
    description="""
    Route one host event (session.status, session.deleted, ...) to the
    fallback state machine. Unknown or malformed events are accepted and
    ignored; recovery failures are logged, never returned.
    """,
)
async def receive_event(
    event: HostEventPayload,
    dispatcher: Optional[EventDispatcher] = Depends(get_event_dispatcher),
) -> EventAcceptedResponse:
    if dispatcher is None:
        return EventAcceptedResponse(status="disabled", event_type=event.type)

    await dispatcher.handle(event.model_dump())
    return EventAcceptedResponse(status="accepted", event_type=event.type)


@router.get(
    "/sessions/{session_id}/state",
    response_model=SessionStateResponse,
    summary="Inspect a session's retry state",
    responses={404: {"model": ErrorResponse, "description": "Session has no retry state"}},
)
async def get_session_state(
    session_id: str,
    dispatcher: Optional[EventDispatcher] = Depends(get_event_dispatcher),
) -> SessionStateResponse:
    state = dispatcher.orchestrator.state_for(session_id) if dispatcher else None
    if state is None:
        raise SessionNotTrackedError(session_id)

    now_ms = time.time() * 1000
    return SessionStateResponse(
        session_id=session_id,
        phase=state.phase.value,
        fallback_active=state.fallback_active,
        attempt_count=state.attempt_count,
        cooldown_end_time=state.cooldown_end_time,
        cooldown_remaining_ms=max(state.cooldown_end_time - now_ms, 0) if state.fallback_active else 0,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="""
    Check the health of the fallback service and the host it recovers.

    The service stays up when the host is unreachable (status "degraded"):
    events can still be received, only recoveries will fail.
    """,
)
async def health_check(
    settings: Settings = Depends(get_settings),
    client: BaseSessionClient = Depends(get_session_client),
    dispatcher: Optional[EventDispatcher] = Depends(get_event_dispatcher),
) -> JSONResponse:
    host_ok = await client.health_check()
    services = {"host": "ok" if host_ok else "unreachable"}
    health_status = "healthy" if host_ok else "degraded"

    logger.debug("Health check", status=health_status, services=services)

    response = HealthResponse(
        status=health_status,
        version=settings.APP_VERSION,
        plugin_enabled=dispatcher is not None,
        tracked_sessions=len(dispatcher.store) if dispatcher else 0,
        services=services,
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=response.model_dump(mode="json"),
    )
