from typing import Any, Literal

from pydantic import BaseModel, Field

from motionkit.schemas.animation import Project


class ChatMessage(BaseModel):
    """A single chat message."""

    role: Literal["user", "assistant"]
    content: str


class ToolCallRecord(BaseModel):
    """A tool call executed during a turn, in execution order."""

    tool_call_id: str
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    result: dict[str, Any]

    @property
    def success(self) -> bool:
        return bool(self.result.get("success"))


class ChatTurnResult(BaseModel):
    """Outcome of one user turn."""

    message: str = Field(description="Final assistant message in natural language")
    project: Project = Field(description="Project after every successful mutation of the turn")
    tool_calls: list[ToolCallRecord] = Field(default_factory=list)
    model_id: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    steps: int = 0

    @property
    def mutations_applied(self) -> int:
        return sum(1 for call in self.tool_calls if call.success)
