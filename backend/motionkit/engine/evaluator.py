"""Keyframe interpolation evaluator.

Computes the value of a layer property at an arbitrary time from the layer's
keyframes. Each segment between two consecutive keyframes ``k0`` and ``k1``
is interpolated with the interpolation descriptor stored on ``k0``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from motionkit.engine.property_paths import (
    BUILTIN_PROPERTIES,
    COLOR_PATH,
    PROPS_PREFIX,
    resolve_property,
)
from motionkit.schemas.animation import (
    ContinuousInterpolation,
    DiscreteInterpolation,
    Keyframe,
    KeyframeValue,
    Layer,
    Project,
    QuantizedInterpolation,
    TextInterpolation,
)
from motionkit.utils.interpolation import (
    EasingFunction,
    bezier,
    blend_colors,
    get_easing_function,
    lerp,
    round_half_up,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Segment Interpolation
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def easing_for(interpolation: ContinuousInterpolation) -> EasingFunction:
    if interpolation.strategy == "cubic-bezier" and interpolation.bezier is not None:
        points = interpolation.bezier
        return bezier(points.x1, points.y1, points.x2, points.y2)
    return get_easing_function(interpolation.strategy)


def _common_prefix_length(a: list[str] | str, b: list[str] | str) -> int:
    count = 0
    for left, right in zip(a, b):
        if left != right:
            break
        count += 1
    return count


def reveal_chars(start: str, target: str, progress: float) -> str:
    """Reveal ``round(progress * len(target))`` leading characters of target.

    Rounds half up, so revealing "Welcome" at 0.5 shows 4 characters. Text
    already shared with the start value stays visible.
    """
    count = round_half_up(progress * len(target))
    count = max(count, _common_prefix_length(start, target))
    return target[: min(count, len(target))]


def reveal_words(start: str, target: str, progress: float, separator: str = " ") -> str:
    words = target.split(separator)
    start_words = start.split(separator) if start else []
    count = round_half_up(progress * len(words))
    count = max(count, _common_prefix_length(start_words, words))
    return separator.join(words[: min(count, len(words))])


def _step(interpolation: DiscreteInterpolation, k0: Keyframe, k1: Keyframe, progress: float):
    if interpolation.strategy == "step-start":
        return k1.value if progress > 0 else k0.value
    if interpolation.strategy == "step-mid":
        return k1.value if progress >= 0.5 else k0.value
    return k0.value


def interpolate_segment(k0: Keyframe, k1: Keyframe, progress: float) -> KeyframeValue:
    """Value between two keyframes at linear progress ``progress`` in [0, 1)."""
    interpolation = k0.interpolation
    start, end = k0.value, k1.value

    if isinstance(interpolation, ContinuousInterpolation):
        if _is_number(start) and _is_number(end):
            return lerp(start, end, easing_for(interpolation)(progress))
        if isinstance(start, str) and isinstance(end, str):
            blended = blend_colors(start, end, easing_for(interpolation)(progress))
            return end if blended is None else blended
        return start

    if isinstance(interpolation, QuantizedInterpolation):
        if not (_is_number(start) and _is_number(end)):
            return start
        value = lerp(start, end, progress)
        if interpolation.strategy == "snap-grid" and interpolation.increment:
            return round_half_up(value / interpolation.increment) * interpolation.increment
        return float(round_half_up(value))

    if isinstance(interpolation, TextInterpolation):
        if not (isinstance(start, str) and isinstance(end, str)):
            return start
        if interpolation.strategy == "word-reveal":
            return reveal_words(start, end, progress, interpolation.separator)
        return reveal_chars(start, end, progress)

    return _step(interpolation, k0, k1, progress)


# =============================================================================
# Property Evaluation
# =============================================================================


def evaluate_keyframes(keyframes: list[Keyframe], time: float) -> KeyframeValue:
    """Evaluate a non-empty, time-sorted keyframe list of a single property."""
    first, last = keyframes[0], keyframes[-1]
    if time <= first.time:
        return first.value
    if time >= last.time:
        return last.value

    for k0, k1 in zip(keyframes, keyframes[1:]):
        if k0.time <= time < k1.time:
            if time == k0.time:
                return k0.value
            span = k1.time - k0.time
            progress = (time - k0.time) / span if span > 0 else 0.0
            return interpolate_segment(k0, k1, progress)

    return last.value


def evaluate(layer: Layer, path: str, time: float) -> KeyframeValue:
    """Value of ``path`` on ``layer`` at ``time`` seconds.

    Raises:
        InvalidPropertyPathError: If the path is not animatable on the layer
    """
    descriptor = resolve_property(layer, path)
    keyframes = layer.keyframes_for(path)
    if not keyframes:
        return descriptor.static_value(layer)
    return evaluate_keyframes(keyframes, time)


# =============================================================================
# Layer and Frame Resolution
# =============================================================================


def is_visible_at(layer: Layer, time: float) -> bool:
    if not layer.visible:
        return False
    if layer.enter_time is not None and time < layer.enter_time:
        return False
    if layer.exit_time is not None and time >= layer.exit_time:
        return False
    return True


def media_time(layer: Layer, time: float) -> float | None:
    """Position inside the layer's source media at project time ``time``."""
    if layer.content_duration is None:
        return None
    local = time - (layer.enter_time or 0.0) + (layer.content_offset or 0.0)
    return max(0.0, min(local, layer.content_duration))


@dataclass
class ResolvedLayerState:
    """Every animatable value of a layer at one instant."""

    layer_id: str
    name: str
    type: str
    parent_id: str | None
    visible: bool
    transform: dict[str, float]
    opacity: float
    blur: float
    props: dict[str, Any] = field(default_factory=dict)
    media_time: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "layer_id": self.layer_id,
            "name": self.name,
            "type": self.type,
            "parent_id": self.parent_id,
            "visible": self.visible,
            "transform": self.transform,
            "opacity": self.opacity,
            "blur": self.blur,
            "props": self.props,
            "media_time": self.media_time,
        }


def evaluate_layer(layer: Layer, time: float) -> ResolvedLayerState:
    values = {path: evaluate(layer, path, time) for path in BUILTIN_PROPERTIES}

    props = dict(layer.props)
    for keyframe_path in {kf.property for kf in layer.keyframes}:
        if keyframe_path.startswith(PROPS_PREFIX):
            props[keyframe_path[len(PROPS_PREFIX):]] = evaluate(layer, keyframe_path, time)
    if any(kf.property == COLOR_PATH for kf in layer.keyframes):
        props[COLOR_PATH] = evaluate(layer, COLOR_PATH, time)

    return ResolvedLayerState(
        layer_id=layer.id,
        name=layer.name,
        type=layer.type,
        parent_id=layer.parent_id,
        visible=is_visible_at(layer, time),
        transform={
            "x": values["position.x"],
            "y": values["position.y"],
            "z": values["position.z"],
            "rotation_x": values["rotation.x"],
            "rotation_y": values["rotation.y"],
            "rotation_z": values["rotation.z"],
            "scale_x": values["scale.x"],
            "scale_y": values["scale.y"],
        },
        opacity=values["opacity"],
        blur=values["blur"],
        props=props,
        media_time=media_time(layer, time),
    )


def frame_time(project: Project, frame: int) -> float:
    """Project time in seconds of a frame index, clamped to the duration."""
    return max(0.0, min(frame / project.fps, project.duration))


def resolve_at(project: Project, time: float) -> list[ResolvedLayerState]:
    """Resolve every layer at ``time``; hidden groups hide their descendants."""
    states = [evaluate_layer(layer, time) for layer in project.layers]
    by_id = {state.layer_id: state for state in states}

    for state in states:
        parent_id = state.parent_id
        seen: set[str] = set()
        while state.visible and parent_id is not None and parent_id not in seen:
            seen.add(parent_id)
            parent = by_id.get(parent_id)
            if parent is None:
                break
            if not parent.visible:
                state.visible = False
            parent_id = parent.parent_id
    return states


def resolve_frame(project: Project, frame: int) -> list[ResolvedLayerState]:
    """Resolve every layer at a frame index for frame-accurate rendering."""
    time = frame_time(project, frame)
    logger.debug(f"Resolving frame {frame} ({time:.4f}s) of project {project.id}")
    return resolve_at(project, time)
