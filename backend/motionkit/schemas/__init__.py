from motionkit.schemas.animation import (
    ContinuousInterpolation,
    DiscreteInterpolation,
    Interpolation,
    Keyframe,
    Layer,
    LayerStyle,
    Project,
    QuantizedInterpolation,
    TextInterpolation,
    Transform,
)
from motionkit.schemas.background import Background, ConicGradient, LinearGradient, RadialGradient

__all__ = [
    "Project",
    "Layer",
    "Keyframe",
    "Transform",
    "LayerStyle",
    "Interpolation",
    "ContinuousInterpolation",
    "DiscreteInterpolation",
    "QuantizedInterpolation",
    "TextInterpolation",
    "Background",
    "LinearGradient",
    "RadialGradient",
    "ConicGradient",
]
