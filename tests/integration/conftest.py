"""Integration test fixtures (plugin wired end to end).

The plugin is built through create_plugin exactly as the service builds it;
only the host is replaced by a RecordingSessionClient and the clock by a
FakeClock so cooldowns can elapse instantly.
"""

import pytest

from fixtures.sessions import RecordingSessionClient
from rate_limit_fallback.config import FallbackConfig
from rate_limit_fallback.plugin import create_plugin


@pytest.fixture
def host(session_history) -> RecordingSessionClient:
    """In-memory host whose session ends in a rate-limited assistant turn."""
    return RecordingSessionClient(history=session_history)


@pytest.fixture
def build_plugin(host, test_settings, clock):
    """Factory building the event dispatcher for a given config.

    Usage:
        def test_something(build_plugin):
            dispatcher = build_plugin(FallbackConfig(...))
    """
    def _create(config: FallbackConfig, client=None):
        return create_plugin(client or host, config, test_settings, clock=clock)

    return _create
