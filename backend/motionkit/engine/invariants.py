"""Structural invariants of a project document.

Mutation operations validate their input up front, so a failure here means
a handler produced a broken document: :class:`InvariantViolation` is raised,
never returned to the agent.
"""

import math

from motionkit.exceptions import InvariantViolation, MotionKitError, OutOfBoundsError
from motionkit.layers.registry import validate_props
from motionkit.schemas.animation import Layer, Project

TIME_EPSILON = 1e-9


def same_time(a: float, b: float) -> bool:
    return math.isclose(a, b, rel_tol=0.0, abs_tol=TIME_EPSILON)


def check_layer_timing(layer: Layer) -> None:
    """Validate the visible window and media trim of a layer.

    Raises:
        OutOfBoundsError: If the timing fields contradict each other
    """
    if layer.enter_time is not None and layer.exit_time is not None:
        if layer.enter_time >= layer.exit_time:
            raise OutOfBoundsError(
                f"enter_time ({layer.enter_time}) must be before exit_time ({layer.exit_time})",
                field="enter_time",
            )
    if layer.content_duration is not None and layer.content_offset is not None:
        if layer.content_offset > layer.content_duration:
            raise OutOfBoundsError(
                f"content_offset ({layer.content_offset}) exceeds "
                f"content_duration ({layer.content_duration})",
                field="content_offset",
            )
    if (
        layer.content_duration is not None
        and layer.enter_time is not None
        and layer.exit_time is not None
    ):
        available = layer.content_duration - (layer.content_offset or 0.0)
        window = layer.exit_time - layer.enter_time
        if window > available + TIME_EPSILON:
            raise OutOfBoundsError(
                f"Visible window ({window}s) is longer than the available media ({available}s)",
                field="exit_time",
            )


def _check_keyframes(layer: Layer, duration: float) -> None:
    seen_ids: set[str] = set()
    last_time_by_property: dict[str, float] = {}
    previous_time = -math.inf

    for keyframe in layer.keyframes:
        if keyframe.id in seen_ids:
            raise InvariantViolation(f"duplicate keyframe id {keyframe.id}", layer_id=layer.id)
        seen_ids.add(keyframe.id)

        if keyframe.time < previous_time:
            raise InvariantViolation("keyframes are not sorted by time", layer_id=layer.id)
        previous_time = keyframe.time

        if keyframe.time < 0 or keyframe.time > duration + TIME_EPSILON:
            raise InvariantViolation(
                f"keyframe {keyframe.id} at {keyframe.time}s is outside 0..{duration}s",
                layer_id=layer.id,
            )

        last = last_time_by_property.get(keyframe.property)
        if last is not None and same_time(last, keyframe.time):
            raise InvariantViolation(
                f"two keyframes animate {keyframe.property} at {keyframe.time}s",
                layer_id=layer.id,
            )
        last_time_by_property[keyframe.property] = keyframe.time


def _check_hierarchy(project: Project) -> None:
    layers = {layer.id: layer for layer in project.layers}
    for layer in project.layers:
        if layer.parent_id is None:
            continue
        parent = layers.get(layer.parent_id)
        if parent is None:
            raise InvariantViolation(f"parent {layer.parent_id} does not exist", layer_id=layer.id)
        if parent.type != "group":
            raise InvariantViolation(f"parent {parent.id} is not a group", layer_id=layer.id)

        seen = {layer.id}
        current: Layer | None = parent
        while current is not None:
            if current.id in seen:
                raise InvariantViolation("parent chain contains a cycle", layer_id=layer.id)
            seen.add(current.id)
            current = layers.get(current.parent_id) if current.parent_id else None


def check_invariants(project: Project) -> None:
    """Raise :class:`InvariantViolation` if the document is inconsistent."""
    layer_ids: set[str] = set()
    for layer in project.layers:
        if layer.id in layer_ids:
            raise InvariantViolation(f"duplicate layer id {layer.id}", layer_id=layer.id)
        layer_ids.add(layer.id)

        _check_keyframes(layer, project.duration)
        try:
            validate_props(layer.type, layer.props)
            check_layer_timing(layer)
        except MotionKitError as exc:
            raise InvariantViolation(exc.message, layer_id=layer.id) from exc

    _check_hierarchy(project)
