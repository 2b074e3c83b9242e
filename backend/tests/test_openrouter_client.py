"""Tests for the OpenRouter chat completions client."""

import json

import httpx
import pytest

from motionkit.config import Settings
from motionkit.exceptions import AIProviderError
from motionkit.services.openrouter_client import OpenRouterClient, parse_completion

COMPLETION = {
    "id": "gen-1",
    "choices": [
        {
            "finish_reason": "tool_calls",
            "message": {
                "role": "assistant",
                "content": None,
                "tool_calls": [
                    {
                        "id": "call_1",
                        "type": "function",
                        "function": {"name": "create_layer", "arguments": '{"type": "text"}'},
                    }
                ],
            },
        }
    ],
    "usage": {"prompt_tokens": 1200, "completion_tokens": 40},
}


def _settings(**overrides) -> Settings:
    return Settings(**{"openrouter_api_key": "sk-test", **overrides})


class TestParseCompletion:
    def test_tool_calls_and_usage(self):
        completion = parse_completion(COMPLETION)
        assert completion.content == ""
        assert completion.finish_reason == "tool_calls"
        assert completion.tool_calls[0].name == "create_layer"
        assert json.loads(completion.tool_calls[0].arguments) == {"type": "text"}
        assert (completion.prompt_tokens, completion.completion_tokens) == (1200, 40)

    def test_assistant_message_echoes_tool_calls(self):
        message = parse_completion(COMPLETION).assistant_message()
        assert message["role"] == "assistant"
        assert message["tool_calls"][0]["id"] == "call_1"
        assert message["tool_calls"][0]["function"]["name"] == "create_layer"

    def test_no_choices(self):
        with pytest.raises(AIProviderError):
            parse_completion({"choices": []})


class TestComplete:
    @pytest.mark.asyncio
    async def test_posts_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=COMPLETION)

        client = OpenRouterClient(_settings(), transport=httpx.MockTransport(handler))
        tools = [{"type": "function", "function": {"name": "create_layer", "parameters": {}}}]
        completion = await client.complete("moonshotai/kimi-k2", [{"role": "user", "content": "hi"}], tools)

        assert seen["url"] == "https://openrouter.ai/api/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"]["model"] == "moonshotai/kimi-k2"
        assert seen["body"]["tools"] == tools
        assert completion.tool_calls[0].id == "call_1"

    @pytest.mark.asyncio
    async def test_omits_empty_tools(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200, json={"choices": [{"message": {"content": "Hello"}, "finish_reason": "stop"}]}
            )

        client = OpenRouterClient(_settings(), transport=httpx.MockTransport(handler))
        completion = await client.complete("openai/gpt-4o", [{"role": "user", "content": "hi"}])

        assert "tools" not in seen["body"]
        assert completion.content == "Hello"
        assert completion.tool_calls == []

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        client = OpenRouterClient(_settings(openrouter_api_key=""))
        with pytest.raises(AIProviderError, match="OPENROUTER_API_KEY"):
            await client.complete("openai/gpt-4o", [])

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(429, text="rate limited"))
        client = OpenRouterClient(_settings(), transport=transport)
        with pytest.raises(AIProviderError, match="429"):
            await client.complete("openai/gpt-4o", [])

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = OpenRouterClient(_settings(), transport=httpx.MockTransport(handler))
        with pytest.raises(AIProviderError, match="timed out"):
            await client.complete("openai/gpt-4o", [])
