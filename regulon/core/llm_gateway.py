"""Client for the OpenAI-compatible LLM chat-completions gateway."""

import logging
from collections.abc import AsyncIterator
from typing import Any, Optional

import httpx

from regulon.core.config import Settings, get_settings
from regulon.core.errors import (
    UpstreamError,
    UpstreamQuotaExhausted,
    UpstreamRateLimited,
    UpstreamTimeout,
    UpstreamUnavailable,
)
from regulon.core.logging import get_logger, log_with_context

logger = get_logger(__name__)

Message = dict[str, str]


def _error_for_status(status_code: int, body: str) -> UpstreamError:
    if status_code == 429:
        return UpstreamRateLimited()
    if status_code == 402:
        return UpstreamQuotaExhausted()
    return UpstreamUnavailable(f"AI gateway error: {status_code}", upstream_status=status_code)


class LLMGateway:
    """Thin async wrapper over the gateway's chat-completions endpoint.

    Non-2xx responses are mapped onto the upstream error taxonomy so callers
    can tell "retry shortly" (429) from "billing problem" (402).
    """

    def __init__(
        self,
        api_key: str,
        url: str,
        model: str,
        timeout_seconds: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.url = url
        self.model = model
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport)

    def _payload(self, messages: list[Message], stream: bool) -> dict[str, Any]:
        return {"model": self.model, "messages": messages, "stream": stream}

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def complete(self, messages: list[Message], purpose: str = "completion") -> str:
        """Run a buffered completion and return the first choice's content."""
        async with self._client() as client:
            try:
                response = await client.post(
                    self.url, headers=self._headers, json=self._payload(messages, stream=False)
                )
            except httpx.TimeoutException as e:
                log_with_context(logger, logging.WARNING, "AI gateway timeout", purpose=purpose)
                raise UpstreamTimeout() from e
            except httpx.HTTPError as e:
                log_with_context(
                    logger, logging.ERROR, f"AI gateway transport error: {e}", purpose=purpose
                )
                raise UpstreamUnavailable(f"AI gateway unreachable: {e.__class__.__name__}") from e

            if response.status_code >= 400:
                log_with_context(
                    logger,
                    logging.ERROR,
                    "AI gateway error",
                    purpose=purpose,
                    status=response.status_code,
                    body=response.text[:500],
                )
                raise _error_for_status(response.status_code, response.text)

            try:
                data = response.json()
            except ValueError as e:
                raise UpstreamUnavailable("AI gateway returned a non-JSON body") from e

        choices = data.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content") or ""
        logger.debug(f"AI gateway {purpose}: {len(content)} chars")
        return content

    async def open_stream(self, messages: list[Message], purpose: str = "stream") -> AsyncIterator[bytes]:
        """Start a streaming completion.

        The upstream status is checked before this returns, so throttling and
        quota errors surface as exceptions rather than mid-stream. The returned
        iterator yields the upstream SSE bytes verbatim and closes the
        connection when exhausted.
        """
        client = self._client()
        request = client.build_request(
            "POST", self.url, headers=self._headers, json=self._payload(messages, stream=True)
        )
        try:
            response = await client.send(request, stream=True)
        except httpx.TimeoutException as e:
            await client.aclose()
            log_with_context(logger, logging.WARNING, "AI gateway timeout", purpose=purpose)
            raise UpstreamTimeout() from e
        except httpx.HTTPError as e:
            await client.aclose()
            log_with_context(
                logger, logging.ERROR, f"AI gateway transport error: {e}", purpose=purpose
            )
            raise UpstreamUnavailable(f"AI gateway unreachable: {e.__class__.__name__}") from e

        if response.status_code >= 400:
            body = (await response.aread()).decode("utf-8", errors="replace")
            await response.aclose()
            await client.aclose()
            log_with_context(
                logger,
                logging.ERROR,
                "AI gateway error",
                purpose=purpose,
                status=response.status_code,
                body=body[:500],
            )
            raise _error_for_status(response.status_code, body)

        async def passthrough() -> AsyncIterator[bytes]:
            try:
                async for chunk in response.aiter_raw():
                    yield chunk
            finally:
                await response.aclose()
                await client.aclose()

        return passthrough()


def get_llm_gateway(settings: Optional[Settings] = None) -> LLMGateway:
    """Build a gateway client from settings."""
    settings = settings or get_settings()
    return LLMGateway(
        api_key=settings.LLM_GATEWAY_API_KEY,
        url=settings.LLM_GATEWAY_URL,
        model=settings.LLM_MODEL,
        timeout_seconds=settings.LLM_TIMEOUT_SECONDS,
    )
