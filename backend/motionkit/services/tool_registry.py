"""Command table of the agent tools.

Both the chat orchestrator and the MCP server dispatch through
:func:`execute_tool`, so a tool behaves identically on either boundary.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel

from motionkit.exceptions import UnknownToolError
from motionkit.schemas.animation import Project
from motionkit.services import mutations
from motionkit.services.layer_resolver import AuthoringSession
from motionkit.services.mutations import MutationOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: type[BaseModel]
    handler: Callable[..., MutationOutcome]

    def definition(self) -> dict[str, Any]:
        """Function-calling schema for chat completion APIs."""
        parameters = self.input_model.model_json_schema()
        parameters.pop("title", None)
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }


def _spec(name: str, description: str, handler: Callable[..., MutationOutcome]) -> ToolSpec:
    return ToolSpec(name, description, handler.input_model, handler)  # type: ignore[attr-defined]


TOOL_REGISTRY: dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        _spec(
            "create_layer",
            "Create a layer of a given type with props, transform, style, timing and an "
            "optional entrance preset. The new layer can be referenced as layer_N "
            "(N = creation order in this turn, starting at 0).",
            mutations.create_layer,
        ),
        _spec(
            "edit_layer",
            "Change an existing layer. Only the provided fields change; transform, style "
            "and props are merged into the current values.",
            mutations.edit_layer,
        ),
        _spec(
            "animate_layer",
            "Add keyframes to a layer (or apply a preset). A keyframe at an existing time "
            "for the same property replaces that keyframe.",
            mutations.animate_layer,
        ),
        _spec(
            "update_keyframe",
            "Change the time, value or interpolation of one keyframe by id.",
            mutations.update_keyframe,
        ),
        _spec(
            "remove_keyframe",
            "Delete one keyframe by id.",
            mutations.remove_keyframe,
        ),
        _spec(
            "remove_layer",
            "Delete a layer and its keyframes. Children of a removed group move to the root.",
            mutations.remove_layer,
        ),
        _spec(
            "group_layers",
            "Put two or more layers into a new group layer.",
            mutations.group_layers,
        ),
        _spec(
            "ungroup_layers",
            "Dissolve a group: its children move to the group's parent and the group is deleted.",
            mutations.ungroup_layers,
        ),
        _spec(
            "configure_project",
            "Change project settings: name, width, height, duration (s), fps, background, font_family.",
            mutations.configure_project,
        ),
    )
}


def available_tools() -> list[str]:
    return list(TOOL_REGISTRY.keys())


def tool_definitions() -> list[dict[str, Any]]:
    return [spec.definition() for spec in TOOL_REGISTRY.values()]


def execute_tool(
    name: str,
    arguments: dict[str, Any],
    project: Project,
    session: AuthoringSession,
) -> MutationOutcome:
    """Run a registered tool; unknown names produce a failure result."""
    spec = TOOL_REGISTRY.get(name)
    if spec is None:
        error = UnknownToolError(name, available_tools())
        logger.warning(error.message)
        return MutationOutcome(project, error.to_result())
    return spec.handler(project, arguments, session)
