"""Property path addressing for keyframe targets.

A property path is either a built-in dotted path that maps onto the layer
transform or style (``position.x``, ``rotation.z``, ``scale.y``, ``opacity``,
``blur``), ``color`` for layer types whose props define a color, or a dynamic
``props.<name>`` path into the per-type props schema.

Both mutation operations (to type-check keyframes) and the evaluator (to read
static values) go through :func:`resolve_property`.
"""

import math
from dataclasses import dataclass
from typing import Any

from motionkit.exceptions import (
    InterpolationMismatchError,
    InvalidPropertyPathError,
    OutOfBoundsError,
    ValueTypeMismatchError,
)
from motionkit.layers.base import ValueKind
from motionkit.layers.registry import get_layer_definition, validate_props
from motionkit.schemas.animation import (
    ContinuousInterpolation,
    DiscreteInterpolation,
    Interpolation,
    KeyframeValue,
    Layer,
    TextInterpolation,
)

PROPS_PREFIX = "props."


@dataclass(frozen=True)
class _BuiltIn:
    section: str
    attribute: str
    min_value: float | None = None
    max_value: float | None = None


BUILTIN_PROPERTIES: dict[str, _BuiltIn] = {
    "position.x": _BuiltIn("transform", "x"),
    "position.y": _BuiltIn("transform", "y"),
    "position.z": _BuiltIn("transform", "z"),
    "rotation.x": _BuiltIn("transform", "rotation_x"),
    "rotation.y": _BuiltIn("transform", "rotation_y"),
    "rotation.z": _BuiltIn("transform", "rotation_z"),
    "scale.x": _BuiltIn("transform", "scale_x", min_value=0),
    "scale.y": _BuiltIn("transform", "scale_y", min_value=0),
    "opacity": _BuiltIn("style", "opacity", min_value=0, max_value=1),
    "blur": _BuiltIn("style", "blur", min_value=0),
}

COLOR_PATH = "color"


@dataclass(frozen=True)
class PropertyDescriptor:
    """Typed description of an animatable property on one layer."""

    path: str
    kind: ValueKind
    text_reveal: bool = False
    enumerated: bool = False
    min_value: float | None = None
    max_value: float | None = None
    props_key: str | None = None
    layer_type: str | None = None

    @property
    def allowed_families(self) -> tuple[str, ...]:
        if self.kind == "number":
            return ("continuous", "discrete", "quantized")
        if self.kind == "color":
            return ("continuous", "discrete")
        if self.kind == "string" and self.text_reveal:
            return ("text", "discrete")
        return ("discrete",)

    @property
    def default_family(self) -> str:
        return self.default_interpolation().family

    def default_interpolation(self) -> Interpolation:
        if self.kind in ("number", "color"):
            return ContinuousInterpolation(strategy="ease-in-out")
        if self.kind == "string" and self.text_reveal:
            return TextInterpolation(strategy="char-reveal")
        return DiscreteInterpolation(strategy="step-end")

    def check_interpolation(self, interpolation: Interpolation) -> None:
        if interpolation.family not in self.allowed_families:
            raise InterpolationMismatchError(
                self.path, interpolation.family, list(self.allowed_families)
            )

    def check_value(self, value: Any, layer: Layer | None = None) -> KeyframeValue:
        """Type-check and bound-check a keyframe value; returns it normalized.

        For ``props.*`` paths the value is also validated against the props
        schema of the layer type, merged over the layer's current props.
        """
        if self.kind == "number":
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueTypeMismatchError(self.path, "number", value)
            if not math.isfinite(value):
                raise ValueTypeMismatchError(self.path, "finite number", value)
            value = float(value)
            too_low = self.min_value is not None and value < self.min_value
            too_high = self.max_value is not None and value > self.max_value
            if too_low or too_high:
                raise OutOfBoundsError(
                    field=self.path,
                    value=value,
                    min_value=self.min_value,
                    max_value=self.max_value,
                )
        elif self.kind == "boolean":
            if not isinstance(value, bool):
                raise ValueTypeMismatchError(self.path, "boolean", value)
        elif not isinstance(value, str):
            raise ValueTypeMismatchError(self.path, self.kind, value)

        if self.props_key is not None and self.layer_type is not None:
            current = dict(layer.props) if layer is not None else {}
            current[self.props_key] = value
            validate_props(self.layer_type, current)
        return value

    def static_value(self, layer: Layer) -> KeyframeValue:
        """The layer's un-animated value for this property."""
        builtin = BUILTIN_PROPERTIES.get(self.path)
        if builtin is not None:
            return getattr(getattr(layer, builtin.section), builtin.attribute)
        key = self.props_key or COLOR_PATH
        if key in layer.props:
            return layer.props[key]
        return get_layer_definition(layer.type).default_props().get(key)


def _describe_prop(layer: Layer, key: str, path: str) -> PropertyDescriptor:
    definition = get_layer_definition(layer.type)
    fields = definition.prop_fields()
    field = fields.get(key)
    if field is None:
        if key in definition.props_model.model_fields:
            raise InvalidPropertyPathError(path, reason=f"props.{key} is not animatable")
        available = ", ".join(f"props.{name}" for name in fields) or "none"
        raise InvalidPropertyPathError(
            path,
            reason=f"{layer.type} layers have no prop '{key}'; animatable props: {available}",
        )
    return PropertyDescriptor(
        path=path,
        kind=field.kind,
        text_reveal=field.text_reveal,
        enumerated=field.enumerated,
        props_key=key,
        layer_type=layer.type,
    )


def resolve_property(layer: Layer, path: str) -> PropertyDescriptor:
    """Resolve a property path against a layer.

    Raises:
        InvalidPropertyPathError: If the path does not address an animatable
            property of this layer's type
    """
    builtin = BUILTIN_PROPERTIES.get(path)
    if builtin is not None:
        return PropertyDescriptor(
            path=path,
            kind="number",
            min_value=builtin.min_value,
            max_value=builtin.max_value,
        )

    if path == COLOR_PATH:
        field = get_layer_definition(layer.type).prop_fields().get(COLOR_PATH)
        if field is None or field.kind != "color":
            raise InvalidPropertyPathError(path, reason=f"{layer.type} layers have no color")
        return PropertyDescriptor(
            path=path, kind="color", props_key=COLOR_PATH, layer_type=layer.type
        )

    if path.startswith(PROPS_PREFIX):
        key = path[len(PROPS_PREFIX):]
        if not key or "." in key:
            raise InvalidPropertyPathError(path, reason="expected props.<name>")
        return _describe_prop(layer, key, path)

    raise InvalidPropertyPathError(path)


def animatable_paths(layer: Layer) -> list[str]:
    """Every property path that may be keyframed on this layer."""
    paths = list(BUILTIN_PROPERTIES)
    fields = get_layer_definition(layer.type).prop_fields()
    color = fields.get(COLOR_PATH)
    if color is not None and color.kind == "color":
        paths.append(COLOR_PATH)
    paths.extend(f"{PROPS_PREFIX}{name}" for name in fields)
    return paths
