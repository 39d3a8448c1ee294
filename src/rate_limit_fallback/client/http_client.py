"""
HTTP session client for the host's server API.

Communicates with the host using httpx AsyncClient. Supports:
- Abort, message history, revert and prompt endpoints
- Optional project directory scoping (?directory=)
- Connection pooling and retry logic for idempotent calls
- Health checks
"""

import asyncio
import time
from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError

from rate_limit_fallback.client.base_client import BaseSessionClient
from rate_limit_fallback.client.exceptions import (
    SessionConnectionError,
    SessionNotFoundError,
    SessionRequestError,
    SessionTimeoutError,
)
from rate_limit_fallback.models.messages import PromptRequest, SessionMessage
from rate_limit_fallback.monitoring.metrics import host_request_latency_seconds

logger = structlog.get_logger(__name__)


class HostSessionClient(BaseSessionClient):
    """
    Host session client using httpx for async HTTP communication.

    API Endpoints:
    - POST /session/{id}/abort: Abort the in-flight turn
    - GET /session/{id}/message: Message history ([{info, parts}, ...])
    - POST /session/{id}/revert: Revert to a message ({messageID})
    - POST /session/{id}/message: Submit a prompt ({agent?, model?, parts})
    - GET /session: Session list (used as health check)

    Network errors, timeouts and 5xx responses are retried with exponential
    backoff, except for prompt: a resubmitted prompt the host may already have
    accepted is never sent twice.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:4096",
        timeout: int = 120,
        max_retries: int = 2,
        directory: Optional[str] = None,
        connection_limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize host session client.

        Args:
            base_url: Host server URL
            timeout: Request timeout in seconds
            max_retries: Attempts for idempotent calls on network/5xx errors
            directory: Project directory forwarded as the directory query parameter
            connection_limits: httpx connection pool limits (default: 10 max connections)
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(max_retries, 1)
        self.directory = directory

        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0,
            )

        self._client: Optional[httpx.AsyncClient] = None
        self._connection_limits = connection_limits
        self._transport = transport

        logger.info(
            "Host session client initialized",
            base_url=self.base_url,
            timeout=timeout,
            max_retries=self.max_retries,
            directory=directory,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                transport=self._transport,
                follow_redirects=True,
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    def _params(self) -> dict[str, str]:
        return {"directory": self.directory} if self.directory else {}

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json_body: Optional[dict[str, Any]] = None,
        retry: bool = True,
    ) -> httpx.Response:
        """
        Send a request with error mapping and optional retries.

        Raises:
            SessionTimeoutError: Request exceeded the timeout
            SessionConnectionError: Host unreachable
            SessionNotFoundError: Host returned 404
            SessionRequestError: Any other non-2xx response
        """
        attempts = self.max_retries if retry else 1
        start_time = time.time()

        for attempt in range(1, attempts + 1):
            last_error: Optional[Exception] = None
            retryable = True
            try:
                client = await self._get_client()
                response = await client.request(method, path, params=self._params(), json=json_body)
                response.raise_for_status()

                host_request_latency_seconds.labels(operation=operation, success="true").observe(
                    time.time() - start_time
                )
                return response

            except httpx.TimeoutException as e:
                logger.warning(
                    "Host request timeout",
                    operation=operation,
                    attempt=attempt,
                    max_retries=attempts,
                    timeout=self.timeout,
                    error=str(e),
                )
                last_error = SessionTimeoutError(
                    f"Request timeout after {self.timeout}s",
                    details={"operation": operation, "attempt": attempt, "timeout": self.timeout},
                )

            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                error_text = e.response.text

                logger.error(
                    "Host HTTP error",
                    operation=operation,
                    status_code=status_code,
                    error_text=error_text,
                    attempt=attempt,
                )

                if status_code == 404:
                    host_request_latency_seconds.labels(operation=operation, success="false").observe(
                        time.time() - start_time
                    )
                    raise SessionNotFoundError(
                        f"Session not found: {path}",
                        details={"operation": operation, "status": status_code},
                    )
                last_error = SessionRequestError(
                    f"Host returned {status_code} for {operation}",
                    details={"operation": operation, "status": status_code, "error": error_text},
                )
                if status_code < 500:
                    # Client error (4xx) - not retryable
                    retryable = False

            except httpx.TransportError as e:
                logger.warning(
                    "Host network error",
                    operation=operation,
                    attempt=attempt,
                    max_retries=attempts,
                    error=str(e),
                )
                last_error = SessionConnectionError(
                    f"Network error: {str(e)}",
                    details={"operation": operation, "attempt": attempt, "error_type": type(e).__name__},
                )

            if retryable and attempt < attempts:
                backoff = 2 ** attempt
                logger.info(f"Retrying {operation} after {backoff}s backoff...")
                await asyncio.sleep(backoff)
                continue

            host_request_latency_seconds.labels(operation=operation, success="false").observe(
                time.time() - start_time
            )
            raise last_error

        # Unreachable: the loop either returns or raises
        raise SessionConnectionError(f"No attempts made for {operation}")

    async def abort(self, session_id: str) -> None:
        await self._request("abort", "POST", f"/session/{session_id}/abort")
        logger.info("Session aborted", session_id=session_id)

    async def messages(self, session_id: str) -> list[SessionMessage]:
        response = await self._request("messages", "GET", f"/session/{session_id}/message")
        try:
            payload = response.json()
            if not isinstance(payload, list):
                raise ValueError("message history must be a JSON array")
            return [SessionMessage.model_validate(item) for item in payload]
        except (ValueError, ValidationError) as e:
            logger.error("Failed to parse message history", session_id=session_id, error=str(e))
            raise SessionRequestError(
                "Invalid message history from host",
                details={"session_id": session_id, "parse_error": str(e)},
            )

    async def revert(self, session_id: str, message_id: str) -> None:
        await self._request(
            "revert",
            "POST",
            f"/session/{session_id}/revert",
            json_body={"messageID": message_id},
        )
        logger.info("Session reverted", session_id=session_id, message_id=message_id)

    async def prompt(self, session_id: str, request: PromptRequest) -> None:
        await self._request(
            "prompt",
            "POST",
            f"/session/{session_id}/message",
            json_body=request.to_wire(),
            retry=False,
        )
        logger.info(
            "Prompt submitted",
            session_id=session_id,
            model=str(request.model) if request.model else "main",
            parts=len(request.parts),
        )

    async def health_check(self) -> bool:
        """Check host reachability with GET /session. Never raises."""
        start_time = time.time()
        healthy = False
        try:
            client = await self._get_client()
            response = await client.get("/session", params=self._params(), timeout=5.0)
            healthy = response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("Host health check failed", error=str(e))

        host_request_latency_seconds.labels(
            operation="health", success="true" if healthy else "false"
        ).observe(time.time() - start_time)
        return healthy

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed httpx AsyncClient")
        self._client = None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.base_url}, "
            f"timeout={self.timeout}s)"
        )
