"""Tests for the LLM gateway client using httpx.MockTransport."""

import json

import httpx
import pytest

from regulon.core.errors import (
    UpstreamQuotaExhausted,
    UpstreamRateLimited,
    UpstreamTimeout,
    UpstreamUnavailable,
    to_http_exception,
)
from regulon.core.llm_gateway import LLMGateway

URL = "https://gateway.test/v1/chat/completions"
MESSAGES = [{"role": "user", "content": "What is GSTR-3B?"}]

SSE_BODY = (
    b'data: {"choices":[{"delta":{"content":"GSTR-3B is "}}]}\n\n'
    b'data: {"choices":[{"delta":{"content":"a monthly return."}}]}\n\n'
    b"data: [DONE]\n\n"
)


def _gateway(handler) -> LLMGateway:
    return LLMGateway(
        api_key="test-gateway-key",
        url=URL,
        model="test-model",
        timeout_seconds=5.0,
        transport=httpx.MockTransport(handler),
    )


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class TestComplete:
    @pytest.mark.asyncio
    async def test_returns_first_choice_content(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion("Draft body"))

        content = await _gateway(handler).complete(MESSAGES, purpose="draft")

        assert content == "Draft body"
        assert seen["auth"] == "Bearer test-gateway-key"
        assert seen["body"] == {"model": "test-model", "messages": MESSAGES, "stream": False}

    @pytest.mark.asyncio
    async def test_missing_content_is_empty_string(self):
        gateway = _gateway(lambda request: httpx.Response(200, json={"choices": []}))

        assert await gateway.complete(MESSAGES) == ""

    @pytest.mark.asyncio
    async def test_429_maps_to_rate_limited(self):
        gateway = _gateway(lambda request: httpx.Response(429, text="slow down"))

        with pytest.raises(UpstreamRateLimited) as exc_info:
            await gateway.complete(MESSAGES)

        assert exc_info.value.status_code == 429
        assert exc_info.value.retryable is True
        assert to_http_exception(exc_info.value).headers == {"Retry-After": "5"}

    @pytest.mark.asyncio
    async def test_402_maps_to_quota_exhausted(self):
        gateway = _gateway(lambda request: httpx.Response(402, text="payment required"))

        with pytest.raises(UpstreamQuotaExhausted) as exc_info:
            await gateway.complete(MESSAGES)

        assert exc_info.value.status_code == 402
        assert exc_info.value.retryable is False

    @pytest.mark.asyncio
    async def test_other_errors_map_to_unavailable(self):
        gateway = _gateway(lambda request: httpx.Response(503, text="overloaded"))

        with pytest.raises(UpstreamUnavailable) as exc_info:
            await gateway.complete(MESSAGES)

        assert exc_info.value.status_code == 500
        assert exc_info.value.upstream_status == 503

    @pytest.mark.asyncio
    async def test_timeout_maps_to_upstream_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamTimeout) as exc_info:
            await _gateway(handler).complete(MESSAGES)

        assert exc_info.value.status_code == 503
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_connection_error_maps_to_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamUnavailable):
            await _gateway(handler).complete(MESSAGES)


class TestOpenStream:
    @pytest.mark.asyncio
    async def test_stream_is_forwarded_verbatim(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200, content=SSE_BODY, headers={"Content-Type": "text/event-stream"}
            )

        chunks = await _gateway(handler).open_stream(MESSAGES, purpose="chat")
        received = b"".join([chunk async for chunk in chunks])

        assert received == SSE_BODY
        assert seen["body"]["stream"] is True

    @pytest.mark.asyncio
    async def test_stream_status_checked_before_first_chunk(self):
        gateway = _gateway(lambda request: httpx.Response(429, text="slow down"))

        with pytest.raises(UpstreamRateLimited):
            await gateway.open_stream(MESSAGES)

    @pytest.mark.asyncio
    async def test_stream_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(UpstreamTimeout):
            await _gateway(handler).open_stream(MESSAGES)
