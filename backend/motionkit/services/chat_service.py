"""Interactive chat orchestrator.

Runs one user turn as a tool loop: the model is called with the tool
catalog, every tool call it emits is applied in order to the same in-memory
project, the results are fed back, and the loop repeats until the model
answers without tool calls. A fresh :class:`AuthoringSession` is created per
turn, so ``layer_N`` aliases count from zero again on the next turn.
"""

import json
import logging
from typing import Any

from motionkit.config import Settings, get_settings
from motionkit.exceptions import (
    AIAccessDeniedError,
    ChatSessionError,
    MotionKitError,
    ValidationError,
)
from motionkit.schemas.animation import Project
from motionkit.schemas.chat import ChatMessage, ChatTurnResult, ToolCallRecord
from motionkit.services.access_service import AccessChecker
from motionkit.services.ai_models import get_model
from motionkit.services.layer_resolver import AuthoringSession
from motionkit.services.openrouter_client import OpenRouterClient, ToolCall
from motionkit.services.system_prompt import build_system_prompt
from motionkit.services.tool_registry import execute_tool, tool_definitions
from motionkit.services.usage_service import UsageLogger, UsageRecord

logger = logging.getLogger(__name__)


def _parse_arguments(call: ToolCall) -> dict[str, Any]:
    """Decode tool call arguments.

    Raises:
        ValidationError: If the arguments are not a JSON object
    """
    try:
        arguments = json.loads(call.arguments or "{}")
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Arguments of {call.name} are not valid JSON: {exc.msg}") from exc
    if not isinstance(arguments, dict):
        raise ValidationError(f"Arguments of {call.name} must be a JSON object")
    return arguments


class ChatService:
    def __init__(
        self,
        client: OpenRouterClient,
        access_checker: AccessChecker,
        usage_logger: UsageLogger,
        settings: Settings | None = None,
    ):
        self.client = client
        self.access_checker = access_checker
        self.usage_logger = usage_logger
        self.settings = settings or get_settings()

    def _build_messages(
        self, project: Project, prompt: str, history: list[ChatMessage]
    ) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": build_system_prompt(project)}
        ]
        limit = self.settings.chat_history_limit
        for msg in history[-limit:] if limit > 0 else []:
            messages.append({"role": msg.role, "content": msg.content})
        messages.append({"role": "user", "content": prompt})
        return messages

    def _run_tool_call(
        self, call: ToolCall, project: Project, session: AuthoringSession
    ) -> tuple[Project, ToolCallRecord]:
        try:
            arguments = _parse_arguments(call)
        except ValidationError as exc:
            logger.warning(f"[Chat] {exc.message}")
            return project, ToolCallRecord(
                tool_call_id=call.id, name=call.name, result=exc.to_result()
            )

        outcome = execute_tool(call.name, arguments, project, session)
        record = ToolCallRecord(
            tool_call_id=call.id, name=call.name, arguments=arguments, result=outcome.result
        )
        return outcome.project, record

    async def run_turn(
        self,
        project: Project,
        prompt: str,
        history: list[ChatMessage] | None = None,
        *,
        user_id: str,
        model_id: str | None = None,
    ) -> ChatTurnResult:
        """Run one user turn against ``project``.

        Raises:
            AIAccessDeniedError: If the user may not use AI; nothing is mutated
            AIProviderError: If the model provider fails
            ChatSessionError: On unexpected failures while running the turn
        """
        decision = await self.access_checker.check(user_id)
        if not decision.allowed:
            logger.warning(f"[Chat] AI access denied for user {user_id}: {decision.reason}")
            raise AIAccessDeniedError(decision.reason)

        model = get_model(model_id)
        session = AuthoringSession()
        messages = self._build_messages(project, prompt, history or [])
        tools = tool_definitions()
        logger.info(
            f"[Chat] Turn for project {project.id} with {model.name} ({model.id}), "
            f"system prompt {len(messages[0]['content'])} chars"
        )

        records: list[ToolCallRecord] = []
        prompt_tokens = completion_tokens = steps = 0
        final_message = ""

        try:
            while steps < self.settings.chat_max_steps:
                completion = await self.client.complete(model.id, messages, tools)
                steps += 1
                prompt_tokens += completion.prompt_tokens
                completion_tokens += completion.completion_tokens
                messages.append(completion.assistant_message())
                final_message = completion.content

                if not completion.tool_calls:
                    break

                for call in completion.tool_calls:
                    project, record = self._run_tool_call(call, project, session)
                    records.append(record)
                    messages.append(
                        {
                            "role": "tool",
                            "tool_call_id": call.id,
                            "content": json.dumps(record.result, ensure_ascii=False),
                        }
                    )
            else:
                logger.warning(
                    f"[Chat] Turn stopped after {steps} steps for project {project.id}"
                )
        except MotionKitError:
            raise
        except Exception as exc:
            logger.exception(f"[Chat] Unexpected error during turn for project {project.id}")
            raise ChatSessionError(f"Chat session failed: {exc}") from exc

        await self.usage_logger.log_usage(
            UsageRecord(
                user_id=user_id,
                model_id=model.id,
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                metadata={
                    "project_id": project.id,
                    "steps": steps,
                    "tool_calls": len(records),
                    "failed_tool_calls": sum(1 for r in records if not r.success),
                },
            )
        )
        logger.info(
            f"[Chat] Turn finished: {len(records)} tool calls, "
            f"tokens {prompt_tokens}+{completion_tokens}"
        )

        return ChatTurnResult(
            message=final_message,
            project=project,
            tool_calls=records,
            model_id=model.id,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            steps=steps,
        )
