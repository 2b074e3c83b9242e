"""MCP server for MotionKit projects.

FastMCP-based server exposing the mutation tools to external agents.

Run as standalone:
    python -m motionkit.mcp.server

Or run with mcp CLI:
    mcp run motionkit.mcp.server:mcp_server
"""

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from motionkit.config import get_settings
from motionkit.engine.evaluator import resolve_at
from motionkit.engine.property_paths import animatable_paths
from motionkit.exceptions import ProjectNotFoundError, StorageError
from motionkit.schemas.animation import Project
from motionkit.schemas.background import background_to_css
from motionkit.services.layer_resolver import AuthoringSession
from motionkit.services.project_repository import (
    HttpProjectRepository,
    ProjectRepository,
    new_project,
)
from motionkit.services.tool_registry import execute_tool

logger = logging.getLogger(__name__)

settings = get_settings()

mcp_server = FastMCP(
    name=settings.mcp_server_name,
    instructions=(
        "Build animation projects layer by layer. Start a new one with create_project. "
        "Reference layers by id or exact name; "
        "call describe_project first to list ids."
    ),
)

_repository: ProjectRepository | None = None


def configure_repository(repository: ProjectRepository | None) -> None:
    """Replace the document store, e.g. with an in-memory one in tests."""
    global _repository
    _repository = repository


def get_repository() -> ProjectRepository:
    global _repository
    if _repository is None:
        _repository = HttpProjectRepository(settings)
    return _repository


# =============================================================================
# Helpers
# =============================================================================


def _format_response(data: dict[str, Any] | list[Any]) -> str:
    """Format a result as readable text."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def _compact(arguments: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in arguments.items() if value is not None}


async def apply_mutation(project_id: str, tool_name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    """Load, mutate and save one project; returns the tool result.

    The document is saved only when the mutation succeeds. Concurrent calls
    on the same project are not serialized (last write wins).
    """
    repository = get_repository()
    try:
        project = await repository.get_project(project_id)
    except (ProjectNotFoundError, StorageError) as exc:
        logger.warning(f"[MCP] {tool_name} could not load project {project_id}: {exc.message}")
        return exc.to_result()

    outcome = execute_tool(tool_name, arguments, project, AuthoringSession.stateless())
    if not outcome.success:
        return outcome.result

    try:
        await repository.save_project(outcome.project)
    except (ProjectNotFoundError, StorageError) as exc:
        logger.error(f"[MCP] {tool_name} could not save project {project_id}: {exc.message}")
        return exc.to_result()
    return outcome.result


def describe(project: Project) -> dict[str, Any]:
    return {
        "id": project.id,
        "name": project.name,
        "width": project.width,
        "height": project.height,
        "duration": project.duration,
        "fps": project.fps,
        "background": background_to_css(project.background),
        "font_family": project.font_family,
        "layers": [
            {
                "id": layer.id,
                "name": layer.name,
                "type": layer.type,
                "parent_id": layer.parent_id,
                "visible": layer.visible,
                "locked": layer.locked,
                "enter_time": layer.enter_time,
                "exit_time": layer.exit_time,
                "transform": layer.transform.model_dump(),
                "opacity": layer.style.opacity,
                "props": layer.props,
                "animatable": animatable_paths(layer),
                "keyframes": [
                    {
                        "id": kf.id,
                        "property": kf.property,
                        "time": kf.time,
                        "value": kf.value,
                        "interpolation": kf.interpolation.model_dump(exclude_none=True),
                    }
                    for kf in layer.keyframes
                ],
            }
            for layer in project.layers
        ],
    }


# =============================================================================
# Read Tools
# =============================================================================


@mcp_server.tool()
async def describe_project(project_id: str) -> str:
    """Describe a project: settings, layers, keyframes and animatable properties.

    Start here to learn layer ids and keyframe ids.

    Args:
        project_id: Project id
    """
    try:
        project = await get_repository().get_project(project_id)
    except (ProjectNotFoundError, StorageError) as exc:
        return _format_response(exc.to_result())
    return _format_response(describe(project))


@mcp_server.tool()
async def preview_frame(project_id: str, time: float) -> str:
    """Resolve every layer's animated values at a point in time.

    Args:
        project_id: Project id
        time: Seconds from project start (clamped to the duration)
    """
    try:
        project = await get_repository().get_project(project_id)
    except (ProjectNotFoundError, StorageError) as exc:
        return _format_response(exc.to_result())
    clamped = max(0.0, min(time, project.duration))
    states = resolve_at(project, clamped)
    return _format_response({"time": clamped, "layers": [state.to_dict() for state in states]})


# =============================================================================
# Write Tools: Layers
# =============================================================================


@mcp_server.tool()
async def create_layer(
    project_id: str,
    type: str,
    name: str | None = None,
    props: dict[str, Any] | None = None,
    transform: dict[str, Any] | None = None,
    style: dict[str, Any] | None = None,
    parent: str | None = None,
    visible: bool = True,
    locked: bool = False,
    enter_time: float | None = None,
    exit_time: float | None = None,
    content_duration: float | None = None,
    content_offset: float | None = None,
    animation: dict[str, Any] | None = None,
) -> str:
    """Create a layer.

    Args:
        project_id: Project id
        type: Layer type (text, shape, image, icon, button, progress, divider,
            mouse, code, terminal, video, audio, group)
        name: Layer name (defaults to "<Type> <n>")
        props: Type specific props merged over the type defaults
        transform: x, y, z, rotation_x/y/z (radians), scale_x/y/z, anchor
        style: opacity (0-1), blur, filters, drop_shadow
        parent: Id or name of a group layer to nest the layer in
        visible: Visibility flag
        locked: Lock flag
        enter_time: Seconds when the layer appears
        exit_time: Seconds when the layer disappears
        content_duration: Source media length in seconds (video/audio)
        content_offset: Start offset inside the source media in seconds
        animation: Preset {id, start_time, duration}, e.g. {"id": "fade-in"}
    """
    arguments = _compact(
        {
            "type": type,
            "name": name,
            "props": props,
            "transform": transform,
            "style": style,
            "parent": parent,
            "enter_time": enter_time,
            "exit_time": exit_time,
            "content_duration": content_duration,
            "content_offset": content_offset,
            "animation": animation,
        }
    )
    arguments["visible"] = visible
    arguments["locked"] = locked
    return _format_response(await apply_mutation(project_id, "create_layer", arguments))


@mcp_server.tool()
async def edit_layer(project_id: str, layer: str, updates: dict[str, Any]) -> str:
    """Change fields of a layer.

    Args:
        project_id: Project id
        layer: Layer id or exact name
        updates: Fields to change: name, visible, locked, transform, style,
            props, parent, enter_time, exit_time, content_duration,
            content_offset. Use null to clear parent or timing fields.
    """
    return _format_response(
        await apply_mutation(project_id, "edit_layer", {"layer": layer, "updates": updates})
    )


@mcp_server.tool()
async def remove_layer(project_id: str, layer: str) -> str:
    """Delete a layer and its keyframes.

    Args:
        project_id: Project id
        layer: Layer id or exact name
    """
    return _format_response(await apply_mutation(project_id, "remove_layer", {"layer": layer}))


@mcp_server.tool()
async def group_layers(project_id: str, layers: list[str], name: str = "Group") -> str:
    """Group two or more layers under a new group layer.

    Args:
        project_id: Project id
        layers: Layer ids or names
        name: Group name
    """
    return _format_response(
        await apply_mutation(project_id, "group_layers", {"layers": layers, "name": name})
    )


@mcp_server.tool()
async def ungroup_layers(project_id: str, group: str) -> str:
    """Dissolve a group layer, moving its children to the group's parent.

    Args:
        project_id: Project id
        group: Group layer id or exact name
    """
    return _format_response(await apply_mutation(project_id, "ungroup_layers", {"group": group}))


# =============================================================================
# Write Tools: Keyframes
# =============================================================================


@mcp_server.tool()
async def animate_layer(
    project_id: str,
    layer: str,
    keyframes: list[dict[str, Any]] | None = None,
    preset: dict[str, Any] | None = None,
) -> str:
    """Add keyframes to a layer.

    Args:
        project_id: Project id
        layer: Layer id or exact name
        keyframes: Entries {property, time, value, interpolation?}; a keyframe
            at an existing time for the same property replaces it
        preset: Preset {id, start_time, duration}, e.g. {"id": "slide-in-left"}
    """
    arguments = _compact({"layer": layer, "keyframes": keyframes, "preset": preset})
    return _format_response(await apply_mutation(project_id, "animate_layer", arguments))


@mcp_server.tool()
async def update_keyframe(
    project_id: str, layer: str, keyframe_id: str, updates: dict[str, Any]
) -> str:
    """Change time, value or interpolation of a keyframe.

    Args:
        project_id: Project id
        layer: Layer id or exact name
        keyframe_id: Keyframe id (see describe_project)
        updates: Any of time, value, interpolation
    """
    return _format_response(
        await apply_mutation(
            project_id,
            "update_keyframe",
            {"layer": layer, "keyframe_id": keyframe_id, "updates": updates},
        )
    )


@mcp_server.tool()
async def remove_keyframe(project_id: str, layer: str, keyframe_id: str) -> str:
    """Delete a keyframe.

    Args:
        project_id: Project id
        layer: Layer id or exact name
        keyframe_id: Keyframe id
    """
    return _format_response(
        await apply_mutation(
            project_id, "remove_keyframe", {"layer": layer, "keyframe_id": keyframe_id}
        )
    )


# =============================================================================
# Write Tools: Project
# =============================================================================


@mcp_server.tool()
async def create_project(
    name: str | None = None,
    width: int | None = None,
    height: int | None = None,
) -> str:
    """Create an empty project. Returns its id for the other tools.

    Unset fields use the server defaults.

    Args:
        name: Project name
        width: Canvas width in pixels
        height: Canvas height in pixels
    """
    project = new_project(name, settings)
    overrides = _compact({"width": width, "height": height})
    if overrides:
        outcome = execute_tool("configure_project", overrides, project, AuthoringSession.stateless())
        if not outcome.success:
            return _format_response(outcome.result)
        project = outcome.project

    try:
        await get_repository().create_project(project)
    except StorageError as exc:
        logger.error(f"[MCP] create_project failed: {exc.message}")
        return _format_response(exc.to_result())
    return _format_response(
        {
            "success": True,
            "project_id": project.id,
            "message": f'Created project "{project.name}" (id: {project.id})',
            "project": describe(project),
        }
    )


@mcp_server.tool()
async def configure_project(
    project_id: str,
    name: str | None = None,
    width: int | None = None,
    height: int | None = None,
    duration: float | None = None,
    fps: float | None = None,
    background: str | dict[str, Any] | None = None,
    font_family: str | None = None,
) -> str:
    """Change project settings.

    Args:
        project_id: Project id
        name: Project name
        width: Canvas width in pixels
        height: Canvas height in pixels
        duration: Duration in seconds
        fps: Frames per second
        background: Hex color or gradient {type: linear|radial|conic, stops: [...]}
        font_family: Default font
    """
    arguments = _compact(
        {
            "name": name,
            "width": width,
            "height": height,
            "duration": duration,
            "fps": fps,
            "background": background,
            "font_family": font_family,
        }
    )
    return _format_response(await apply_mutation(project_id, "configure_project", arguments))


# =============================================================================
# Main Entry Point
# =============================================================================


def main() -> None:
    logging.basicConfig(level=settings.log_level)
    logger.info(f"Starting {settings.mcp_server_name} (API: {settings.project_api_url})")
    mcp_server.run()


if __name__ == "__main__":
    main()
