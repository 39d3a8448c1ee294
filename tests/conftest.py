"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

from pathlib import Path

import pytest

from fixtures.sessions import FakeClock, RecordingSessionClient, make_message
from rate_limit_fallback.config import FallbackConfig, Settings
from rate_limit_fallback.models.messages import SessionMessage


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Test settings with safe defaults for local testing.

    Grace delays are zero and the event log goes to a temporary directory.
    """
    return Settings(
        APP_NAME="Rate Limit Fallback (Test)",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        HOST_BASE_URL="http://localhost:4096",
        HOST_MAX_RETRIES=1,
        ABORT_GRACE_MS=0,
        REVERT_GRACE_MS=0,
        FALLBACK_CONFIG_PATH=str(tmp_path / "missing.json"),
        LOG_FILE_PATH=str(tmp_path / "logs" / "rate-limit-fallback.log"),
        PROMETHEUS_ENABLED=False,
    )


@pytest.fixture
def fallback_config() -> FallbackConfig:
    """Config from the end-to-end scenarios: one pattern, 1s cooldown, one fallback."""
    return FallbackConfig(patterns=["rate limit"], cooldownMs=1000, fallbackModel="acme/small")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def user_message() -> SessionMessage:
    return make_message(
        "msg_user_1",
        parts=[{"id": "prt_1", "type": "text", "text": "Refactor the parser"}],
        agent="build",
    )


@pytest.fixture
def session_history(user_message: SessionMessage) -> list[SessionMessage]:
    """History ending in an assistant reply cut short by the rate limit."""
    return [
        make_message("msg_user_0", parts=[{"type": "text", "text": "Hello"}]),
        make_message("msg_asst_0", role="assistant", parts=[{"type": "text", "text": "Hi!"}]),
        user_message,
        make_message("msg_asst_1", role="assistant", parts=[{"type": "step-start"}]),
    ]


@pytest.fixture
def recording_client(session_history: list[SessionMessage]) -> RecordingSessionClient:
    return RecordingSessionClient(history=session_history)
