"""OpenAI-compatible chat-completions provider.

Talks to any endpoint implementing ``POST {base_url}/chat/completions`` with
bearer authentication. Each call is a single attempt with a bounded timeout;
nothing is retried.

Usage:
    provider = OpenAIProvider(model="gpt-4o-mini")
    result = await provider.complete(messages, api_key="sk-...")
"""
import logging
from typing import Any, List, Optional

import httpx

from ..errors import UpstreamError
from .base import ChatMessage, CompletionProvider, CompletionResult

logger = logging.getLogger(__name__)


def extract_reply_content(data: Any) -> Optional[str]:
    """Pull ``choices[0].message.content`` out of a response body.

    Returns None instead of raising when any level is missing.
    """
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None


class OpenAIProvider(CompletionProvider):
    """CompletionProvider implementation using the OpenAI HTTP API.

    Attributes:
        base_url: API root, e.g. ``https://api.openai.com/v1``.
        model: Model identifier sent with every request.
        max_tokens: Fixed cap on the reply length.
        temperature: Fixed sampling temperature.
        timeout: Deadline in seconds for the whole upstream call.
    """

    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: int = 500,
        temperature: float = 0.2,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the OpenAI provider.

        Args:
            base_url: API root. Defaults to the public OpenAI endpoint.
            model: Model to use. Defaults to gpt-4o-mini.
            max_tokens: Maximum tokens in the reply.
            temperature: Sampling temperature.
            timeout: Request deadline in seconds.
            transport: Optional httpx transport, used by tests.
        """
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.model = model or self.DEFAULT_MODEL
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self._transport = transport

    def build_payload(self, messages: List[ChatMessage]) -> dict:
        return {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    def _create_client(self, api_key: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
            transport=self._transport,
        )

    async def complete(self, messages: List[ChatMessage], api_key: str) -> CompletionResult:
        payload = self.build_payload(messages)

        try:
            async with self._create_client(api_key) as client:
                response = await client.post("/chat/completions", json=payload)
        except httpx.TimeoutException as exc:
            logger.error("OpenAI request timed out after %.1fs: %s", self.timeout, exc)
            raise UpstreamError(
                "Upstream request timed out",
                detail=str(exc) or exc.__class__.__name__,
                status_code=504,
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("OpenAI request failed: %s", exc)
            raise UpstreamError(
                "Upstream request failed",
                detail=str(exc) or exc.__class__.__name__,
            ) from exc

        if not response.is_success:
            error_text = response.text
            logger.error("OpenAI error (%d): %s", response.status_code, error_text)
            raise UpstreamError("OpenAI API error", detail=error_text)

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("OpenAI returned a non-JSON body: %s", response.text[:200])
            raise UpstreamError("Invalid response from OpenAI API", detail=response.text) from exc

        content = extract_reply_content(data)
        if content is None:
            logger.warning("OpenAI response had no choices[0].message.content")

        return CompletionResult(content=content, raw=data if isinstance(data, dict) else {})
