"""Tests for the OpenAI-compatible completion provider."""
import httpx
import pytest

from filechat.ai_provider import (
    ChatMessage,
    CompletionProvider,
    OpenAIProvider,
    extract_reply_content,
)
from filechat.errors import UpstreamError

MESSAGES = [
    ChatMessage(role="system", content="be brief"),
    ChatMessage(role="user", content="Hello"),
]


def provider_for(handler, **kwargs) -> OpenAIProvider:
    return OpenAIProvider(transport=httpx.MockTransport(handler), **kwargs)


class TestCompletionProviderInterface:
    def test_cannot_instantiate_abstract_class(self):
        with pytest.raises(TypeError):
            CompletionProvider()

    def test_openai_provider_implements_interface(self):
        assert isinstance(OpenAIProvider(), CompletionProvider)


class TestOpenAIProviderInit:
    def test_defaults(self):
        provider = OpenAIProvider()
        assert provider.base_url == OpenAIProvider.DEFAULT_BASE_URL
        assert provider.model == "gpt-4o-mini"
        assert provider.max_tokens == 500
        assert provider.temperature == 0.2

    def test_custom_values(self):
        provider = OpenAIProvider(base_url="https://llm.internal/v1/", model="local-model", timeout=5)
        assert provider.base_url == "https://llm.internal/v1"
        assert provider.model == "local-model"
        assert provider.timeout == 5

    def test_build_payload(self):
        payload = OpenAIProvider(max_tokens=100, temperature=0.0).build_payload(MESSAGES)
        assert payload == {
            "model": "gpt-4o-mini",
            "messages": [
                {"role": "system", "content": "be brief"},
                {"role": "user", "content": "Hello"},
            ],
            "max_tokens": 100,
            "temperature": 0.0,
        }


class TestExtractReplyContent:
    def test_first_choice_content(self):
        data = {"choices": [{"message": {"content": "one"}}, {"message": {"content": "two"}}]}
        assert extract_reply_content(data) == "one"

    @pytest.mark.parametrize(
        "data",
        [None, [], "text", {}, {"choices": None}, {"choices": []}, {"choices": ["x"]},
         {"choices": [{"message": None}]}, {"choices": [{"message": {"content": 42}}]}],
    )
    def test_missing_levels_return_none(self, data):
        assert extract_reply_content(data) is None

    def test_empty_string_is_kept(self):
        assert extract_reply_content({"choices": [{"message": {"content": ""}}]}) == ""


class TestOpenAIProviderComplete:
    @pytest.mark.asyncio
    async def test_success(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"choices": [{"message": {"content": "Hi"}}]})

        result = await provider_for(handler).complete(MESSAGES, api_key="sk-1")
        assert result.content == "Hi"
        assert result.raw["choices"][0]["message"]["content"] == "Hi"
        assert seen[0].headers["authorization"] == "Bearer sk-1"
        assert seen[0].headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_missing_choices_returns_none_content(self):
        result = await provider_for(lambda r: httpx.Response(200, json={"id": "x"})).complete(
            MESSAGES, api_key="sk-1"
        )
        assert result.content is None

    @pytest.mark.asyncio
    async def test_error_status_raises_with_raw_body(self):
        handler = lambda r: httpx.Response(429, text="rate limited")
        with pytest.raises(UpstreamError) as exc_info:
            await provider_for(handler).complete(MESSAGES, api_key="sk-1")
        assert exc_info.value.error_detail == "rate limited"
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_timeout_raises_504(self):
        def handler(request):
            raise httpx.ConnectTimeout("too slow")

        with pytest.raises(UpstreamError) as exc_info:
            await provider_for(handler).complete(MESSAGES, api_key="sk-1")
        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("no route to host")

        with pytest.raises(UpstreamError) as exc_info:
            await provider_for(handler).complete(MESSAGES, api_key="sk-1")
        assert exc_info.value.error_detail == "no route to host"

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        with pytest.raises(UpstreamError) as exc_info:
            await provider_for(lambda r: httpx.Response(200, text="oops")).complete(MESSAGES, api_key="k")
        assert exc_info.value.error_detail == "oops"
