"""Named animation presets.

Preset keyframe times are normalized to [0, 1] and scaled onto the timeline
as ``start_time + t * duration``. Position values are offsets from the
layer's current position.
"""

import math
from dataclasses import dataclass
from typing import Literal

from motionkit.exceptions import InvalidFieldValueError
from motionkit.schemas.animation import ContinuousInterpolation, Interpolation, Layer

PresetId = Literal[
    "fade-in",
    "fade-out",
    "slide-in-left",
    "slide-in-right",
    "slide-in-top",
    "slide-in-bottom",
    "bounce",
    "scale-in",
    "rotate-in",
]

_EASE_OUT = ContinuousInterpolation(strategy="ease-out")
_EASE_IN = ContinuousInterpolation(strategy="ease-in")
_EASE_IN_OUT = ContinuousInterpolation(strategy="ease-in-out")
_LINEAR = ContinuousInterpolation(strategy="linear")


@dataclass(frozen=True)
class PresetKeyframe:
    time: float
    property: str
    value: float
    interpolation: Interpolation


@dataclass(frozen=True)
class AnimationPreset:
    id: str
    name: str
    keyframes: tuple[PresetKeyframe, ...]


def _two_point(prop: str, start: float, end: float, easing: Interpolation) -> tuple[PresetKeyframe, ...]:
    return (PresetKeyframe(0, prop, start, easing), PresetKeyframe(1, prop, end, _LINEAR))


ANIMATION_PRESETS: dict[str, AnimationPreset] = {
    preset.id: preset
    for preset in (
        AnimationPreset("fade-in", "Fade In", _two_point("opacity", 0, 1, _EASE_OUT)),
        AnimationPreset("fade-out", "Fade Out", _two_point("opacity", 1, 0, _EASE_IN)),
        AnimationPreset("slide-in-left", "Slide In Left", _two_point("position.x", -500, 0, _EASE_OUT)),
        AnimationPreset("slide-in-right", "Slide In Right", _two_point("position.x", 500, 0, _EASE_OUT)),
        AnimationPreset("slide-in-top", "Slide In Top", _two_point("position.y", -300, 0, _EASE_OUT)),
        AnimationPreset("slide-in-bottom", "Slide In Bottom", _two_point("position.y", 300, 0, _EASE_OUT)),
        AnimationPreset(
            "bounce",
            "Bounce",
            (
                PresetKeyframe(0, "scale.y", 1, _EASE_IN_OUT),
                PresetKeyframe(0.3, "scale.y", 1.2, _EASE_IN_OUT),
                PresetKeyframe(0.6, "scale.y", 0.9, _EASE_IN_OUT),
                PresetKeyframe(1, "scale.y", 1, _LINEAR),
            ),
        ),
        AnimationPreset(
            "scale-in",
            "Scale In",
            _two_point("scale.x", 0, 1, _EASE_OUT) + _two_point("scale.y", 0, 1, _EASE_OUT),
        ),
        AnimationPreset(
            "rotate-in",
            "Rotate In",
            _two_point("rotation.z", -math.pi, 0, _EASE_OUT) + _two_point("opacity", 0, 1, _EASE_OUT),
        ),
    )
}

_RELATIVE_PROPERTIES = {"position.x": "x", "position.y": "y"}


def get_preset(preset_id: str) -> AnimationPreset:
    preset = ANIMATION_PRESETS.get(preset_id)
    if preset is None:
        raise InvalidFieldValueError(
            f"Unknown animation preset: {preset_id}. "
            f"Available: {', '.join(ANIMATION_PRESETS)}",
            field="preset",
        )
    return preset


def expand_preset(
    preset: AnimationPreset,
    layer: Layer,
    *,
    start_time: float = 0.0,
    duration: float = 1.0,
) -> list[PresetKeyframe]:
    """Place a preset on the timeline of ``layer``."""
    placed = []
    for keyframe in preset.keyframes:
        value = keyframe.value
        attribute = _RELATIVE_PROPERTIES.get(keyframe.property)
        if attribute is not None:
            value += getattr(layer.transform, attribute)
        placed.append(
            PresetKeyframe(
                time=start_time + keyframe.time * duration,
                property=keyframe.property,
                value=value,
                interpolation=keyframe.interpolation,
            )
        )
    return placed
