"""
Unit tests for HostSessionClient.

Uses httpx.MockTransport so no host server is needed.
"""

import json
from unittest.mock import AsyncMock

import httpx
import pytest
from prometheus_client import REGISTRY

from rate_limit_fallback.client import http_client
from rate_limit_fallback.client.exceptions import (
    SessionConnectionError,
    SessionNotFoundError,
    SessionRequestError,
    SessionTimeoutError,
)
from rate_limit_fallback.client.http_client import HostSessionClient
from rate_limit_fallback.models.fallback_models import FallbackModelSpec
from rate_limit_fallback.models.messages import PromptRequest, TextPartInput

HISTORY = [
    {"info": {"id": "msg_1", "role": "user", "sessionID": "ses_a", "agent": "build"},
     "parts": [{"id": "prt_1", "type": "text", "text": "hello"}]},
    {"info": {"id": "msg_2", "role": "assistant", "sessionID": "ses_a"}, "parts": []},
]


class HostStub:
    """Request recorder with a configurable response per call."""

    def __init__(self, responses=None):
        self.requests: list[httpx.Request] = []
        self.responses = list(responses or [])

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        if request.url.path.endswith("/message") and request.method == "GET":
            return httpx.Response(200, json=HISTORY)
        return httpx.Response(200, json=True)


@pytest.fixture
def no_backoff(monkeypatch):
    sleep = AsyncMock(return_value=None)
    monkeypatch.setattr(http_client.asyncio, "sleep", sleep)
    return sleep


def make_client(stub: HostStub, **kwargs) -> HostSessionClient:
    kwargs.setdefault("max_retries", 2)
    return HostSessionClient(
        base_url="http://host.test/",
        transport=httpx.MockTransport(stub),
        **kwargs,
    )


# ============================================================================
# Endpoints
# ============================================================================


@pytest.mark.asyncio
async def test_abort_posts_to_abort_endpoint():
    stub = HostStub()
    client = make_client(stub)

    await client.abort("ses_a")

    request = stub.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/session/ses_a/abort"
    await client.close()


@pytest.mark.asyncio
async def test_messages_parsed():
    stub = HostStub()
    client = make_client(stub)

    history = await client.messages("ses_a")

    assert stub.requests[0].method == "GET"
    assert stub.requests[0].url.path == "/session/ses_a/message"
    assert [m.info.id for m in history] == ["msg_1", "msg_2"]
    assert history[0].info.is_user
    assert history[0].info.agent == "build"
    assert history[0].parts[0]["text"] == "hello"
    await client.close()


@pytest.mark.asyncio
async def test_revert_sends_message_id():
    stub = HostStub()
    client = make_client(stub)

    await client.revert("ses_a", "msg_1")

    request = stub.requests[0]
    assert request.url.path == "/session/ses_a/revert"
    assert json.loads(request.content) == {"messageID": "msg_1"}
    await client.close()


@pytest.mark.asyncio
async def test_prompt_sends_wire_payload():
    stub = HostStub()
    client = make_client(stub)
    request = PromptRequest(
        parts=[TextPartInput(text="hello")],
        agent="build",
        model=FallbackModelSpec.parse("acme/small"),
    )

    await client.prompt("ses_a", request)

    sent = stub.requests[0]
    assert sent.method == "POST"
    assert sent.url.path == "/session/ses_a/message"
    assert json.loads(sent.content) == {
        "parts": [{"type": "text", "text": "hello"}],
        "agent": "build",
        "model": {"providerID": "acme", "modelID": "small"},
    }
    await client.close()


@pytest.mark.asyncio
async def test_directory_forwarded_as_query_param():
    stub = HostStub()
    client = make_client(stub, directory="/work/project")

    await client.abort("ses_a")

    assert stub.requests[0].url.params["directory"] == "/work/project"
    await client.close()


@pytest.mark.asyncio
async def test_no_directory_param_by_default():
    stub = HostStub()
    client = make_client(stub)

    await client.abort("ses_a")

    assert "directory" not in stub.requests[0].url.params
    await client.close()


# ============================================================================
# Error mapping and retries
# ============================================================================


@pytest.mark.asyncio
async def test_404_maps_to_not_found_without_retry(no_backoff):
    stub = HostStub([httpx.Response(404, text="not found")])
    client = make_client(stub)

    with pytest.raises(SessionNotFoundError):
        await client.abort("ses_gone")

    assert len(stub.requests) == 1
    no_backoff.assert_not_called()


@pytest.mark.asyncio
async def test_4xx_not_retried(no_backoff):
    stub = HostStub([httpx.Response(400, text="bad request")])
    client = make_client(stub)

    with pytest.raises(SessionRequestError) as exc_info:
        await client.revert("ses_a", "msg_x")

    assert exc_info.value.details["status"] == 400
    assert len(stub.requests) == 1


@pytest.mark.asyncio
async def test_5xx_retried_then_succeeds(no_backoff):
    stub = HostStub([httpx.Response(503, text="unavailable")])
    client = make_client(stub)

    await client.abort("ses_a")

    assert len(stub.requests) == 2
    no_backoff.assert_awaited_once_with(2)


@pytest.mark.asyncio
async def test_connection_error_after_retries(no_backoff):
    stub = HostStub([httpx.ConnectError("refused"), httpx.ConnectError("refused")])
    client = make_client(stub)

    with pytest.raises(SessionConnectionError) as exc_info:
        await client.messages("ses_a")

    assert not isinstance(exc_info.value, SessionTimeoutError)
    assert len(stub.requests) == 2


@pytest.mark.asyncio
async def test_timeout_maps_to_timeout_error(no_backoff):
    stub = HostStub([httpx.ReadTimeout("slow")])
    client = make_client(stub, max_retries=1)

    with pytest.raises(SessionTimeoutError):
        await client.abort("ses_a")


@pytest.mark.asyncio
async def test_prompt_never_retried(no_backoff):
    """A prompt the host may have accepted must not be sent twice."""
    stub = HostStub([httpx.Response(502, text="bad gateway")])
    client = make_client(stub, max_retries=3)

    with pytest.raises(SessionRequestError):
        await client.prompt("ses_a", PromptRequest(parts=[TextPartInput(text="hello")]))

    assert len(stub.requests) == 1
    no_backoff.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"info": {}}),
        httpx.Response(200, json=[{"parts": []}]),
    ],
)
async def test_invalid_history_raises_request_error(response):
    stub = HostStub([response])
    client = make_client(stub)

    with pytest.raises(SessionRequestError, match="Invalid message history"):
        await client.messages("ses_a")


# ============================================================================
# Health and lifecycle
# ============================================================================


@pytest.mark.asyncio
async def test_health_check_ok():
    stub = HostStub([httpx.Response(200, json=[])])
    client = make_client(stub)

    assert await client.health_check() is True
    assert stub.requests[0].url.path == "/session"


@pytest.mark.asyncio
async def test_health_check_never_raises():
    stub = HostStub([httpx.ConnectError("refused")])
    client = make_client(stub)

    assert await client.health_check() is False


@pytest.mark.asyncio
async def test_health_check_non_200():
    stub = HostStub([httpx.Response(500)])
    client = make_client(stub)

    assert await client.health_check() is False


@pytest.mark.asyncio
async def test_close_is_idempotent():
    client = make_client(HostStub())
    await client.abort("ses_a")

    await client.close()
    await client.close()

    assert client._client is None


def test_repr_and_base_url():
    client = HostSessionClient(base_url="http://host.test/", timeout=30)

    assert client.base_url == "http://host.test"
    assert repr(client) == "HostSessionClient(base_url=http://host.test, timeout=30s)"


def _health_count(success: str) -> float:
    return REGISTRY.get_sample_value(
        "host_request_latency_seconds_count", {"operation": "health", "success": success}
    ) or 0.0


@pytest.mark.asyncio
async def test_health_check_records_latency():
    ok_before, failed_before = _health_count("true"), _health_count("false")

    await make_client(HostStub([httpx.Response(200, json=[])])).health_check()
    await make_client(HostStub([httpx.ConnectError("refused")])).health_check()

    assert _health_count("true") == ok_before + 1
    assert _health_count("false") == failed_before + 1
