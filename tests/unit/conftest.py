"""Unit test fixtures (mocks and stubs).

Provides mock objects for testing without a running host.
"""

from unittest.mock import AsyncMock, create_autospec

import pytest

from rate_limit_fallback.client.base_client import BaseSessionClient
from rate_limit_fallback.config import FallbackConfig
from rate_limit_fallback.fallback.orchestrator import RecoveryOrchestrator
from rate_limit_fallback.fallback.state import SessionStateStore
from rate_limit_fallback.logging_config import EventLogger


@pytest.fixture
def mock_session_client(session_history):
    """Mock BaseSessionClient returning the shared session history."""
    mock = AsyncMock(spec=BaseSessionClient)
    mock.abort = AsyncMock(return_value=None)
    mock.messages = AsyncMock(return_value=session_history)
    mock.revert = AsyncMock(return_value=None)
    mock.prompt = AsyncMock(return_value=None)
    mock.health_check = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def mock_event_logger():
    """EventLogger stand-in recording info/warn/error calls.

    Autospecced so calls are checked against the real method signatures.
    """
    return create_autospec(EventLogger, instance=True)


@pytest.fixture
def mock_sleep():
    return AsyncMock(return_value=None)


@pytest.fixture
def state_store() -> SessionStateStore:
    return SessionStateStore()


@pytest.fixture
def make_orchestrator(clock, mock_sleep, mock_event_logger, state_store):
    """Factory fixture building a RecoveryOrchestrator around a given client.

    Usage:
        def test_something(make_orchestrator, mock_session_client):
            orchestrator = make_orchestrator(mock_session_client)
    """
    def _create(client, config: FallbackConfig | None = None) -> RecoveryOrchestrator:
        return RecoveryOrchestrator(
            client=client,
            config=config or FallbackConfig(patterns=["rate limit"], cooldownMs=1000, fallbackModel="acme/small"),
            store=state_store,
            event_logger=mock_event_logger,
            abort_grace_ms=100,
            revert_grace_ms=500,
            clock=clock,
            sleep=mock_sleep,
        )

    return _create
