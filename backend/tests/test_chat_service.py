"""Tests for the chat orchestrator tool loop."""

import json
from unittest.mock import AsyncMock

import pytest

from motionkit.config import Settings
from motionkit.exceptions import AIAccessDeniedError, AIProviderError, ChatSessionError
from motionkit.schemas.chat import ChatMessage
from motionkit.services.access_service import InMemoryAccessChecker
from motionkit.services.chat_service import ChatService
from motionkit.services.openrouter_client import ChatCompletion, ToolCall
from motionkit.services.usage_service import InMemoryUsageLogger

USER_ID = "user-1"


def _call(call_id: str, name: str, arguments: dict | str) -> ToolCall:
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    return ToolCall(id=call_id, name=name, arguments=arguments)


def _tool_step(*calls: ToolCall) -> ChatCompletion:
    return ChatCompletion(content="", tool_calls=list(calls), prompt_tokens=100, completion_tokens=20)


def _answer(text: str) -> ChatCompletion:
    return ChatCompletion(content=text, finish_reason="stop", prompt_tokens=150, completion_tokens=30)


@pytest.fixture
def usage() -> InMemoryUsageLogger:
    return InMemoryUsageLogger()


@pytest.fixture
def access(usage) -> InMemoryAccessChecker:
    checker = InMemoryAccessChecker(usage=usage)
    checker.enable(USER_ID)
    return checker


@pytest.fixture
def client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def chat(client, access, usage) -> ChatService:
    return ChatService(client, access, usage, settings=Settings(openrouter_api_key="test-key"))


class TestToolLoop:
    @pytest.mark.asyncio
    async def test_positional_alias_within_turn(self, chat, client, empty_project):
        client.complete.side_effect = [
            _tool_step(
                _call("c1", "create_layer", {"type": "text", "props": {"content": "Hi"}}),
                _call(
                    "c2",
                    "animate_layer",
                    {"layer": "layer_0", "keyframes": [{"property": "opacity", "time": 0, "value": 0}]},
                ),
            ),
            _answer("Added a title that fades in."),
        ]

        result = await chat.run_turn(empty_project, "Add a title", user_id=USER_ID)

        assert result.message == "Added a title that fades in."
        assert [call.name for call in result.tool_calls] == ["create_layer", "animate_layer"]
        assert all(call.success for call in result.tool_calls)
        assert result.mutations_applied == 2
        assert result.steps == 2
        layer = result.project.layers[0]
        assert layer.keyframes[0].property == "opacity"
        # Caller's project is untouched
        assert empty_project.layers == []

    @pytest.mark.asyncio
    async def test_aliases_reset_between_turns(self, chat, client, empty_project):
        client.complete.side_effect = [
            _tool_step(_call("c1", "create_layer", {"type": "shape"})),
            _answer("Done"),
            _tool_step(_call("c2", "remove_layer", {"layer": "layer_0"})),
            _answer("Could not find it"),
        ]

        first = await chat.run_turn(empty_project, "Add a box", user_id=USER_ID)
        second = await chat.run_turn(first.project, "Remove it", user_id=USER_ID)

        record = second.tool_calls[0]
        assert not record.success
        assert record.result["error_code"] == "LAYER_NOT_FOUND"
        assert len(second.project.layers) == 1

    @pytest.mark.asyncio
    async def test_failed_call_is_reported_to_model(self, chat, client, project):
        client.complete.side_effect = [
            _tool_step(_call("c1", "edit_layer", {"layer": "Missing", "updates": {"visible": False}})),
            _answer("That layer does not exist."),
        ]

        result = await chat.run_turn(project, "Hide it", user_id=USER_ID)

        messages = client.complete.call_args_list[-1].args[1]
        tool_messages = [m for m in messages if m["role"] == "tool"]
        assert tool_messages[0]["tool_call_id"] == "c1"
        assert json.loads(tool_messages[0]["content"])["error_code"] == "LAYER_NOT_FOUND"
        assert result.project.model_dump() == project.model_dump()

    @pytest.mark.asyncio
    async def test_invalid_json_arguments(self, chat, client, project):
        client.complete.side_effect = [
            _tool_step(_call("c1", "remove_layer", "{not json")),
            _answer("Sorry"),
        ]

        result = await chat.run_turn(project, "Remove L1", user_id=USER_ID)

        record = result.tool_calls[0]
        assert record.result["error_code"] == "VALIDATION_ERROR"
        assert "not valid JSON" in record.result["error"]
        assert len(result.project.layers) == 2

    @pytest.mark.asyncio
    async def test_unknown_tool(self, chat, client, project):
        client.complete.side_effect = [
            _tool_step(_call("c1", "render_video", {})),
            _answer("I cannot render videos."),
        ]

        result = await chat.run_turn(project, "Render", user_id=USER_ID)

        assert result.tool_calls[0].result["error_code"] == "UNKNOWN_TOOL"

    @pytest.mark.asyncio
    async def test_stops_after_max_steps(self, client, access, usage, project):
        chat = ChatService(
            client, access, usage, settings=Settings(openrouter_api_key="test-key", chat_max_steps=3)
        )
        client.complete.return_value = _tool_step(
            _call("c", "edit_layer", {"layer": "L1", "updates": {"locked": True}})
        )

        result = await chat.run_turn(project, "Loop forever", user_id=USER_ID)

        assert result.steps == 3
        assert client.complete.await_count == 3

    @pytest.mark.asyncio
    async def test_history_and_tools_sent(self, chat, client, project):
        client.complete.side_effect = [_answer("Hello")]
        history = [
            ChatMessage(role="user", content="Earlier question"),
            ChatMessage(role="assistant", content="Earlier answer"),
        ]

        await chat.run_turn(project, "Hi", history, user_id=USER_ID, model_id="openai/gpt-4o")

        model_id, messages, tools = client.complete.call_args.args
        assert model_id == "openai/gpt-4o"
        assert messages[0]["role"] == "system"
        assert '"L1"' in messages[0]["content"]
        assert [m["content"] for m in messages[1:4]] == ["Earlier question", "Earlier answer", "Hi"]
        assert len(tools) == 9


class TestAccessAndUsage:
    @pytest.mark.asyncio
    async def test_access_denied(self, client, usage, project):
        chat = ChatService(client, InMemoryAccessChecker(usage=usage), usage)

        with pytest.raises(AIAccessDeniedError):
            await chat.run_turn(project, "Add a title", user_id="stranger")

        client.complete.assert_not_called()
        assert usage.records == []

    @pytest.mark.asyncio
    async def test_usage_logged(self, chat, client, usage, empty_project):
        client.complete.side_effect = [
            _tool_step(_call("c1", "create_layer", {"type": "hologram"})),
            _answer("Unknown layer type"),
        ]

        result = await chat.run_turn(empty_project, "Add a hologram", user_id=USER_ID)

        assert len(usage.records) == 1
        record = usage.records[0]
        assert record.user_id == USER_ID
        assert record.model_id == result.model_id == "moonshotai/kimi-k2"
        assert record.prompt_tokens == 250
        assert record.completion_tokens == 50
        assert record.metadata["tool_calls"] == 1
        assert record.metadata["failed_tool_calls"] == 1

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, chat, client, project):
        client.complete.side_effect = AIProviderError("AI provider timed out")

        with pytest.raises(AIProviderError):
            await chat.run_turn(project, "Hi", user_id=USER_ID)

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self, chat, client, project):
        client.complete.side_effect = RuntimeError("boom")

        with pytest.raises(ChatSessionError, match="boom"):
            await chat.run_turn(project, "Hi", user_id=USER_ID)
