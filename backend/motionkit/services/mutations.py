"""Mutation operations applied by the agent tools.

Every operation takes the current project, a tool input and the authoring
session, and returns a :class:`MutationOutcome`. Operations are
all-or-nothing: handlers work on a deep copy of the project, and on any
user-facing failure the original project object is returned untouched
together with a structured failure result. User errors never raise past
this module; :class:`InvariantViolation` does, because it signals a defect.

    outcome = animate_layer(project, {"layer": "Title", "keyframes": [...]}, session)
    if outcome.success:
        project = outcome.project
"""

import functools
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from motionkit.config import get_settings
from motionkit.engine.evaluator import evaluate
from motionkit.engine.invariants import check_invariants, check_layer_timing, same_time
from motionkit.engine.presets import expand_preset, get_preset
from motionkit.engine.property_paths import resolve_property
from motionkit.exceptions import (
    DuplicateKeyframeTimeError,
    InvalidFieldValueError,
    KeyframeNotFoundError,
    MotionKitError,
    NotAGroupError,
    OutOfBoundsError,
    TooManyLayersError,
    ValidationError,
)
from motionkit.layers.registry import get_layer_definition, validate_props
from motionkit.schemas.animation import (
    Interpolation,
    Keyframe,
    KeyframeValue,
    Layer,
    LayerStyle,
    Project,
    Transform,
)
from motionkit.schemas.tools import (
    AnimateLayerInput,
    ConfigureProjectInput,
    CreateLayerInput,
    EditLayerInput,
    GroupLayersInput,
    PresetInput,
    RemoveKeyframeInput,
    RemoveLayerInput,
    UngroupLayersInput,
    UpdateKeyframeInput,
)
from motionkit.services.layer_resolver import AuthoringSession, resolve_layer

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)


@dataclass
class MutationOutcome:
    """Project after the mutation (the original one on failure) and the tool result."""

    project: Project
    result: dict[str, Any]

    @property
    def success(self) -> bool:
        return bool(self.result.get("success"))


def format_validation_errors(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error["loc"])
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts)


def mutation(input_model: type[InputT]):
    """Wrap a handler into an all-or-nothing mutation operation.

    The handler receives a deep copy of the project, the parsed input and the
    session, edits the copy in place and returns the success details. It
    signals user errors by raising :class:`MotionKitError`.
    """

    def decorator(
        handler: Callable[[Project, InputT, AuthoringSession], dict[str, Any]],
    ) -> Callable[..., MutationOutcome]:
        operation = handler.__name__

        @functools.wraps(handler)
        def wrapper(
            project: Project,
            data: InputT | dict[str, Any],
            session: AuthoringSession | None = None,
        ) -> MutationOutcome:
            if session is None:
                session = AuthoringSession.stateless()

            try:
                payload = data if isinstance(data, input_model) else input_model.model_validate(data)
            except PydanticValidationError as exc:
                error = ValidationError(f"Invalid {operation} input: {format_validation_errors(exc)}")
                logger.warning(f"{operation} rejected: {error.message}")
                return MutationOutcome(project, error.to_result())

            working = project.model_copy(deep=True)
            try:
                details = handler(working, payload, session)
            except MotionKitError as exc:
                logger.warning(f"{operation} failed on project {project.id}: {exc.message}")
                return MutationOutcome(project, exc.to_result())

            check_invariants(working)
            logger.info(f"{operation} applied to project {project.id}: {details.get('message')}")
            return MutationOutcome(working, {"success": True, **details})

        wrapper.input_model = input_model  # type: ignore[attr-defined]
        return wrapper

    return decorator


# =============================================================================
# Helpers
# =============================================================================


def _check_time(time: float, project: Project, field: str = "time") -> None:
    if not math.isfinite(time) or time < 0 or time > project.duration:
        raise OutOfBoundsError(
            f"Keyframe time {time}s is outside the project (0 to {project.duration}s)",
            field=field,
        )


def _resolve_group(ref: str, project: Project, session: AuthoringSession) -> Layer:
    group = resolve_layer(ref, project, session)
    if group.type != "group":
        raise NotAGroupError(group.id, group.name)
    return group


def _is_descendant(project: Project, layer_id: str, ancestor_id: str) -> bool:
    """True if ``layer_id`` sits somewhere below ``ancestor_id``."""
    current = project.find_layer(layer_id)
    seen: set[str] = set()
    while current is not None and current.parent_id is not None and current.id not in seen:
        seen.add(current.id)
        if current.parent_id == ancestor_id:
            return True
        current = project.find_layer(current.parent_id)
    return False


def _default_layer_name(project: Project, layer_type: str) -> str:
    display_name = get_layer_definition(layer_type).display_name
    count = sum(1 for layer in project.layers if layer.type == layer_type)
    return f"{display_name} {count + 1}"


def _upsert_keyframe(
    project: Project,
    layer: Layer,
    path: str,
    time: float,
    value: Any,
    interpolation: Interpolation | None,
) -> tuple[Keyframe, bool]:
    """Validate one keyframe and write it; returns (keyframe, created).

    A keyframe already sitting at ``time`` for ``path`` is edited in place and
    keeps its id. The caller re-sorts the keyframe list.
    """
    descriptor = resolve_property(layer, path)
    _check_time(time, project)
    checked: KeyframeValue = descriptor.check_value(value, layer)
    if interpolation is None:
        interpolation = descriptor.default_interpolation()
    descriptor.check_interpolation(interpolation)

    for index, existing in enumerate(layer.keyframes):
        if existing.property == path and same_time(existing.time, time):
            replaced = existing.model_copy(update={"value": checked, "interpolation": interpolation})
            layer.keyframes[index] = replaced
            return replaced, False

    keyframe = Keyframe(time=time, property=path, value=checked, interpolation=interpolation)
    layer.keyframes.append(keyframe)
    return keyframe, True


def _sort_keyframes(layer: Layer) -> None:
    layer.keyframes.sort(key=lambda kf: kf.time)


def _apply_preset(project: Project, layer: Layer, preset_input: PresetInput) -> tuple[int, int, list[str]]:
    preset = get_preset(preset_input.id)
    added = updated = 0
    ids: list[str] = []
    for placed in expand_preset(
        preset, layer, start_time=preset_input.start_time, duration=preset_input.duration
    ):
        keyframe, created = _upsert_keyframe(
            project, layer, placed.property, placed.time, placed.value, placed.interpolation
        )
        ids.append(keyframe.id)
        if created:
            added += 1
        else:
            updated += 1
    return added, updated, ids


_POSITION_PATHS = ("position.x", "position.y")


def _bake_group_transform(group: Layer, child: Layer) -> None:
    """Express the child's transform in the group's parent space.

    Static values and the keyframes of position, rotation.z, scale and
    opacity are mapped alike, so animated children keep their placement.
    The group's own keyframes are not composed in.
    """
    g = group.transform
    cos_r = math.cos(g.rotation_z)
    sin_r = math.sin(g.rotation_z)

    def place(x: float, y: float) -> tuple[float, float]:
        local_x = x * g.scale_x
        local_y = y * g.scale_y
        return g.x + local_x * cos_r - local_y * sin_r, g.y + local_x * sin_r + local_y * cos_r

    scalar_maps: dict[str, Callable[[float], float]] = {
        "rotation.z": lambda value: value + g.rotation_z,
        "scale.x": lambda value: value * g.scale_x,
        "scale.y": lambda value: value * g.scale_y,
        "opacity": lambda value: value * group.style.opacity,
    }

    # Sample positions before any keyframe is rewritten
    position_times = sorted({kf.time for kf in child.keyframes if kf.property in _POSITION_PATHS})
    placed = {
        time: place(evaluate(child, "position.x", time), evaluate(child, "position.y", time))
        for time in position_times
    }

    keyframes: list[Keyframe] = []
    for keyframe in child.keyframes:
        if keyframe.property in scalar_maps:
            value = scalar_maps[keyframe.property](float(keyframe.value))
            keyframe = keyframe.model_copy(update={"value": value})
        elif keyframe.property in _POSITION_PATHS:
            axis = _POSITION_PATHS.index(keyframe.property)
            keyframe = keyframe.model_copy(update={"value": placed[keyframe.time][axis]})
        keyframes.append(keyframe)

    # A rotated group mixes the axes: each axis needs a keyframe wherever the other has one
    if position_times and abs(sin_r) > 1e-12:
        for path in _POSITION_PATHS:
            axis = _POSITION_PATHS.index(path)
            existing = {kf.time for kf in keyframes if kf.property == path}
            for keyframe in [kf for kf in keyframes if kf.property in _POSITION_PATHS and kf.property != path]:
                if any(same_time(keyframe.time, time) for time in existing):
                    continue
                keyframes.append(
                    Keyframe(
                        time=keyframe.time,
                        property=path,
                        value=placed[keyframe.time][axis],
                        interpolation=keyframe.interpolation,
                    )
                )
    child.keyframes = keyframes

    c = child.transform
    x, y = place(c.x, c.y)
    child.transform = c.model_copy(
        update={
            "x": x,
            "y": y,
            "rotation_z": scalar_maps["rotation.z"](c.rotation_z),
            "scale_x": scalar_maps["scale.x"](c.scale_x),
            "scale_y": scalar_maps["scale.y"](c.scale_y),
        }
    )
    child.style = child.style.model_copy(update={"opacity": scalar_maps["opacity"](child.style.opacity)})
    _sort_keyframes(child)


def _restored_parent(project: Project, group: Layer, child: Layer) -> str | None:
    """Parent a child returns to on ungroup.

    The group it was moved out of by ``group_layers``, while that layer still
    exists, is a group and would not create a cycle; otherwise the group's
    own parent.
    """
    previous_id = group.props.get("member_parents", {}).get(child.id)
    if previous_id is None:
        return group.parent_id
    previous = project.find_layer(previous_id)
    if (
        previous is None
        or previous.type != "group"
        or previous.id == group.id
        or previous.id == child.id
        or _is_descendant(project, previous.id, child.id)
    ):
        return group.parent_id
    return previous.id


# =============================================================================
# Layer Operations
# =============================================================================


@mutation(CreateLayerInput)
def create_layer(project: Project, data: CreateLayerInput, session: AuthoringSession) -> dict[str, Any]:
    definition = get_layer_definition(data.type)

    max_layers = get_settings().max_layers
    if len(project.layers) >= max_layers:
        raise TooManyLayersError(len(project.layers) + 1, max_layers)

    props = validate_props(data.type, data.props or {})
    transform = Transform.model_validate(data.transform.model_dump(exclude_none=True) if data.transform else {})
    style = LayerStyle.model_validate(data.style.model_dump(exclude_none=True) if data.style else {})

    parent_id = None
    if data.parent is not None:
        parent_id = _resolve_group(data.parent, project, session).id

    layer = Layer(
        name=data.name or _default_layer_name(project, data.type),
        type=definition.layer_type,
        transform=transform,
        style=style,
        visible=data.visible,
        locked=data.locked,
        props=props,
        enter_time=data.enter_time,
        exit_time=data.exit_time,
        content_duration=data.content_duration,
        content_offset=data.content_offset,
        parent_id=parent_id,
    )
    check_layer_timing(layer)
    project.layers.append(layer)

    details: dict[str, Any] = {}
    if data.animation is not None:
        added, _, keyframe_ids = _apply_preset(project, layer, data.animation)
        _sort_keyframes(layer)
        details["keyframes_added"] = added
        details["keyframe_ids"] = keyframe_ids

    if not session.allow_positional_aliases:
        return {
            "layer_id": layer.id,
            "layer_name": layer.name,
            "message": f'Created {data.type} layer "{layer.name}" (id: {layer.id})',
            **details,
        }

    # Register last so a failed creation never consumes an alias
    index = session.register_created(layer.id)
    return {
        "layer_id": layer.id,
        "layer_index": index,
        "layer_name": layer.name,
        "message": f'Created {data.type} layer "{layer.name}" (layer_{index})',
        **details,
    }


@mutation(EditLayerInput)
def edit_layer(project: Project, data: EditLayerInput, session: AuthoringSession) -> dict[str, Any]:
    layer = resolve_layer(data.layer, project, session)
    updates = data.updates
    provided = updates.model_fields_set
    changed: list[str] = []

    if updates.name is not None:
        layer.name = updates.name
        changed.append("name")
    if updates.visible is not None:
        layer.visible = updates.visible
        changed.append("visible")
    if updates.locked is not None:
        layer.locked = updates.locked
        changed.append("locked")

    if updates.transform is not None:
        patch = updates.transform.model_dump(exclude_none=True)
        layer.transform = Transform.model_validate({**layer.transform.model_dump(), **patch})
        changed.extend(f"transform.{key}" for key in patch)
    if updates.style is not None:
        patch = updates.style.model_dump(exclude_none=True)
        layer.style = LayerStyle.model_validate({**layer.style.model_dump(), **patch})
        changed.extend(f"style.{key}" for key in patch)
    if updates.props is not None:
        layer.props = validate_props(layer.type, {**layer.props, **updates.props})
        changed.extend(f"props.{key}" for key in updates.props)

    # Timing fields and parent accept an explicit null to clear them
    for field in ("enter_time", "exit_time", "content_duration", "content_offset"):
        if field in provided:
            setattr(layer, field, getattr(updates, field))
            changed.append(field)
    check_layer_timing(layer)

    if "parent" in provided:
        if updates.parent is None:
            layer.parent_id = None
        else:
            parent = _resolve_group(updates.parent, project, session)
            if parent.id == layer.id or _is_descendant(project, parent.id, layer.id):
                raise InvalidFieldValueError(
                    f'Cannot move "{layer.name}" into "{parent.name}": the group is inside it',
                    field="parent",
                )
            layer.parent_id = parent.id
        changed.append("parent")

    return {
        "layer_id": layer.id,
        "updated_fields": changed,
        "message": f'Updated layer "{layer.name}"' if changed else f'No changes for layer "{layer.name}"',
    }


@mutation(RemoveLayerInput)
def remove_layer(project: Project, data: RemoveLayerInput, session: AuthoringSession) -> dict[str, Any]:
    layer = resolve_layer(data.layer, project, session)
    project.layers = [other for other in project.layers if other.id != layer.id]

    released = []
    for other in project.layers:
        if other.parent_id == layer.id:
            other.parent_id = None
            released.append(other.id)

    return {
        "layer_id": layer.id,
        "unparented_layer_ids": released,
        "message": f'Removed layer "{layer.name}"',
    }


@mutation(GroupLayersInput)
def group_layers(project: Project, data: GroupLayersInput, session: AuthoringSession) -> dict[str, Any]:
    member_ids: list[str] = []
    for ref in data.layers:
        layer_id = resolve_layer(ref, project, session).id
        if layer_id not in member_ids:
            member_ids.append(layer_id)
    if len(member_ids) < 2:
        raise InvalidFieldValueError("group_layers needs at least two distinct layers", field="layers")

    positions = {layer.id: index for index, layer in enumerate(project.layers)}
    members = sorted((project.find_layer(layer_id) for layer_id in member_ids), key=lambda layer: positions[layer.id])
    parents = {member.parent_id for member in members}
    group_parent = parents.pop() if len(parents) == 1 else None

    # Members pulled out of another group remember it for ungroup_layers
    member_parents = {
        member.id: member.parent_id
        for member in members
        if member.parent_id is not None and member.parent_id != group_parent
    }
    group = Layer(
        name=data.name,
        type="group",
        props=validate_props("group", {"member_parents": member_parents}),
        parent_id=group_parent,
    )
    project.layers.insert(positions[members[0].id], group)

    for member in members:
        member.parent_id = group.id

    return {
        "group_id": group.id,
        "group_name": group.name,
        "layer_ids": [member.id for member in members],
        "moved_from_other_groups": list(member_parents),
        "message": f'Grouped {len(members)} layers into "{group.name}"',
    }


@mutation(UngroupLayersInput)
def ungroup_layers(project: Project, data: UngroupLayersInput, session: AuthoringSession) -> dict[str, Any]:
    group = _resolve_group(data.group, project, session)

    children = project.children_of(group.id)
    for child in children:
        _bake_group_transform(group, child)
        child.parent_id = _restored_parent(project, group, child)
    project.layers = [layer for layer in project.layers if layer.id != group.id]

    return {
        "group_id": group.id,
        "layer_ids": [child.id for child in children],
        "message": f'Ungrouped "{group.name}" ({len(children)} layers released)',
    }


# =============================================================================
# Keyframe Operations
# =============================================================================


@mutation(AnimateLayerInput)
def animate_layer(project: Project, data: AnimateLayerInput, session: AuthoringSession) -> dict[str, Any]:
    layer = resolve_layer(data.layer, project, session)
    added = updated = 0
    keyframe_ids: list[str] = []

    if data.preset is not None:
        preset_added, preset_updated, preset_ids = _apply_preset(project, layer, data.preset)
        added += preset_added
        updated += preset_updated
        keyframe_ids.extend(preset_ids)

    for entry in data.keyframes:
        keyframe, created = _upsert_keyframe(
            project, layer, entry.property, entry.time, entry.value, entry.interpolation
        )
        keyframe_ids.append(keyframe.id)
        if created:
            added += 1
        else:
            updated += 1

    _sort_keyframes(layer)
    return {
        "layer_id": layer.id,
        "keyframes_added": added,
        "keyframes_updated": updated,
        "keyframe_ids": keyframe_ids,
        "message": f'Added {added} and updated {updated} keyframes on "{layer.name}"',
    }


def _find_keyframe(layer: Layer, keyframe_id: str) -> int:
    for index, keyframe in enumerate(layer.keyframes):
        if keyframe.id == keyframe_id:
            return index
    raise KeyframeNotFoundError(keyframe_id, layer.id)


@mutation(UpdateKeyframeInput)
def update_keyframe(project: Project, data: UpdateKeyframeInput, session: AuthoringSession) -> dict[str, Any]:
    layer = resolve_layer(data.layer, project, session)
    index = _find_keyframe(layer, data.keyframe_id)
    keyframe = layer.keyframes[index]
    descriptor = resolve_property(layer, keyframe.property)
    updates = data.updates
    changes: dict[str, Any] = {}

    if updates.time is not None:
        _check_time(updates.time, project)
        for other in layer.keyframes:
            if (
                other.id != keyframe.id
                and other.property == keyframe.property
                and same_time(other.time, updates.time)
            ):
                raise DuplicateKeyframeTimeError(keyframe.property, updates.time, other.id)
        changes["time"] = updates.time

    if updates.value is not None:
        changes["value"] = descriptor.check_value(updates.value, layer)

    if updates.interpolation is not None:
        descriptor.check_interpolation(updates.interpolation)
        changes["interpolation"] = updates.interpolation

    layer.keyframes[index] = keyframe.model_copy(update=changes)
    _sort_keyframes(layer)
    return {
        "layer_id": layer.id,
        "keyframe_id": keyframe.id,
        "updated_fields": list(changes),
        "message": f"Updated keyframe {keyframe.id} ({keyframe.property}) on \"{layer.name}\"",
    }


@mutation(RemoveKeyframeInput)
def remove_keyframe(project: Project, data: RemoveKeyframeInput, session: AuthoringSession) -> dict[str, Any]:
    layer = resolve_layer(data.layer, project, session)
    index = _find_keyframe(layer, data.keyframe_id)
    removed = layer.keyframes.pop(index)
    return {
        "layer_id": layer.id,
        "keyframe_id": removed.id,
        "message": f'Removed {removed.property} keyframe at {removed.time}s from "{layer.name}"',
    }


# =============================================================================
# Project Operations
# =============================================================================


def _check_range(field: str, value: float, min_value: float, max_value: float) -> None:
    if not math.isfinite(value) or value < min_value or value > max_value:
        raise OutOfBoundsError(field=field, value=value, min_value=min_value, max_value=max_value)


@mutation(ConfigureProjectInput)
def configure_project(
    project: Project, data: ConfigureProjectInput, session: AuthoringSession
) -> dict[str, Any]:
    settings = get_settings()
    changes: list[str] = []

    if data.name is not None:
        if not data.name.strip():
            raise InvalidFieldValueError("Project name cannot be empty", field="name")
        project.name = data.name
        changes.append(f'name="{data.name}"')

    for field in ("width", "height"):
        value = getattr(data, field)
        if value is not None:
            _check_range(field, value, settings.min_canvas_size, settings.max_canvas_size)
            setattr(project, field, value)
            changes.append(f"{field}={value}")

    if data.duration is not None:
        if not data.duration > 0:
            raise OutOfBoundsError(field="duration", value=data.duration, min_value=0)
        _check_range("duration", data.duration, 0, settings.max_duration_s)
        latest = max((kf.time for layer in project.layers for kf in layer.keyframes), default=0.0)
        if latest > data.duration:
            raise OutOfBoundsError(
                f"Duration {data.duration}s would cut off keyframes up to {latest}s; "
                "move or remove them first",
                field="duration",
            )
        project.duration = data.duration
        changes.append(f"duration={data.duration}s")

    if data.fps is not None:
        if not data.fps > 0:
            raise OutOfBoundsError(field="fps", value=data.fps, min_value=0)
        _check_range("fps", data.fps, 0, settings.max_fps)
        project.fps = data.fps
        changes.append(f"fps={data.fps}")

    if data.background is not None:
        project.background = data.background
        changes.append("background")

    if data.font_family is not None:
        if not data.font_family.strip():
            raise InvalidFieldValueError("Font family cannot be empty", field="font_family")
        project.font_family = data.font_family
        changes.append(f'font_family="{data.font_family}"')

    if not changes:
        return {"message": "No changes specified", "changes": []}
    return {"message": f"Updated project: {', '.join(changes)}", "changes": changes}
