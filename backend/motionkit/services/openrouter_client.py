"""Async client for OpenRouter's OpenAI-compatible chat completions API."""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from motionkit.config import Settings, get_settings
from motionkit.exceptions import AIProviderError

logger = logging.getLogger(__name__)


@dataclass
class ToolCall:
    id: str
    name: str
    arguments: str

    def to_message(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class ChatCompletion:
    content: str
    tool_calls: list[ToolCall] = field(default_factory=list)
    finish_reason: str | None = None
    prompt_tokens: int = 0
    completion_tokens: int = 0

    def assistant_message(self) -> dict[str, Any]:
        message: dict[str, Any] = {"role": "assistant", "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [call.to_message() for call in self.tool_calls]
        return message


def parse_completion(result: dict[str, Any]) -> ChatCompletion:
    choices = result.get("choices") or []
    if not choices:
        raise AIProviderError("AI provider returned no choices")
    choice = choices[0]
    message = choice.get("message") or {}
    usage = result.get("usage") or {}

    tool_calls = [
        ToolCall(
            id=call.get("id", ""),
            name=call.get("function", {}).get("name", ""),
            arguments=call.get("function", {}).get("arguments") or "{}",
        )
        for call in message.get("tool_calls") or []
    ]
    return ChatCompletion(
        content=message.get("content") or "",
        tool_calls=tool_calls,
        finish_reason=choice.get("finish_reason"),
        prompt_tokens=usage.get("prompt_tokens", 0),
        completion_tokens=usage.get("completion_tokens", 0),
    )


class OpenRouterClient:
    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    async def complete(
        self,
        model_id: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> ChatCompletion:
        """Request one completion.

        Raises:
            AIProviderError: On missing credentials, HTTP errors or timeouts
        """
        if not self.settings.openrouter_api_key:
            raise AIProviderError("OPENROUTER_API_KEY is not configured")

        payload: dict[str, Any] = {
            "model": model_id,
            "messages": messages,
            "temperature": self.settings.chat_temperature,
            "max_tokens": self.settings.chat_max_tokens,
        }
        if tools:
            payload["tools"] = tools

        try:
            async with httpx.AsyncClient(
                base_url=self.settings.openrouter_base_url,
                timeout=self.settings.chat_timeout_s,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    "/chat/completions",
                    headers={
                        "Authorization": f"Bearer {self.settings.openrouter_api_key}",
                        "Content-Type": "application/json",
                        "X-Title": self.settings.app_name,
                    },
                    json=payload,
                )
        except httpx.TimeoutException as exc:
            logger.error("OpenRouter API timeout")
            raise AIProviderError("AI provider timed out") from exc
        except httpx.HTTPError as exc:
            logger.error(f"OpenRouter API request failed: {exc}")
            raise AIProviderError(f"AI provider request failed: {exc}") from exc

        if response.status_code != 200:
            logger.error(f"OpenRouter API error: {response.status_code} - {response.text}")
            raise AIProviderError(f"AI provider error (HTTP {response.status_code})")

        return parse_completion(response.json())
