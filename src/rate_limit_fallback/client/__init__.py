"""
Host session client layer.

- base_client.py: BaseSessionClient contract used by the recovery orchestrator
- http_client.py: HostSessionClient over the host's HTTP API (httpx)
- exceptions.py: SessionClientError hierarchy
"""

from rate_limit_fallback.client.base_client import BaseSessionClient
from rate_limit_fallback.client.exceptions import (
    SessionClientError,
    SessionConnectionError,
    SessionNotFoundError,
    SessionRequestError,
    SessionTimeoutError,
)
from rate_limit_fallback.client.http_client import HostSessionClient

__all__ = [
    "BaseSessionClient",
    "HostSessionClient",
    "SessionClientError",
    "SessionConnectionError",
    "SessionTimeoutError",
    "SessionRequestError",
    "SessionNotFoundError",
]
