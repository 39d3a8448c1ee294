"""Request tracing for the event webhook and inspection endpoints."""

import time
import uuid
from typing import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

# Polled endpoints; logged at debug so recovery logs stay readable
QUIET_PATHS = frozenset({"/health", "/metrics"})


def resolve_request_id(request: Request) -> str:
    """Reuse the relay's request id when it sent a usable one."""
    incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if incoming and len(incoming) <= MAX_REQUEST_ID_LENGTH:
        return incoming
    return uuid.uuid4().hex


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """
    Scope every log line of a request to its request id.

    A recovery triggered by POST /events runs inside the request, so its
    orchestrator and host client logs carry the same request_id as the
    webhook call that delivered the event.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = resolve_request_id(request)
        path = request.url.path
        started = time.perf_counter()

        with structlog.contextvars.bound_contextvars(
            request_id=request_id, method=request.method, path=path
        ):
            try:
                response = await call_next(request)
            except Exception:
                logger.exception("Request failed", elapsed_ms=_elapsed_ms(started))
                raise

            log = logger.debug if path in QUIET_PATHS else logger.info
            log("Request handled", status_code=response.status_code, elapsed_ms=_elapsed_ms(started))

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
