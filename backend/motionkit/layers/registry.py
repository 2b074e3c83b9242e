"""Layer type registry: layer type -> props schema and metadata."""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from motionkit.exceptions import InvalidLayerTypeError, PropsValidationError
from motionkit.layers.base import LayerDefinition
from motionkit.layers.definitions import (
    AudioProps,
    ButtonProps,
    CodeProps,
    DividerProps,
    GroupProps,
    IconProps,
    ImageProps,
    MouseProps,
    ProgressProps,
    ShapeProps,
    TerminalProps,
    TextProps,
    VideoProps,
)

LAYER_REGISTRY: dict[str, LayerDefinition] = {
    definition.layer_type: definition
    for definition in (
        LayerDefinition("text", "Text", TextProps, "Styled text; content can be revealed over time"),
        LayerDefinition("shape", "Shape", ShapeProps, "Rectangle, ellipse, triangle, polygon or star"),
        LayerDefinition("image", "Image", ImageProps, "Bitmap image from a URL"),
        LayerDefinition("icon", "Icon", IconProps, "Vector icon by name"),
        LayerDefinition("button", "Button", ButtonProps, "UI button mockup"),
        LayerDefinition("progress", "Progress", ProgressProps, "Progress bar or ring (0-1)"),
        LayerDefinition("divider", "Divider", DividerProps, "Horizontal rule"),
        LayerDefinition("mouse", "Mouse", MouseProps, "Mouse pointer for UI walkthroughs"),
        LayerDefinition("code", "Code", CodeProps, "Syntax highlighted code block"),
        LayerDefinition("terminal", "Terminal", TerminalProps, "Terminal window with typed output"),
        LayerDefinition("video", "Video", VideoProps, "Video clip", is_media=True),
        LayerDefinition("audio", "Audio", AudioProps, "Audio track", is_media=True),
        LayerDefinition("group", "Group", GroupProps, "Container that transforms its children"),
    )
}


def available_layer_types() -> list[str]:
    return list(LAYER_REGISTRY.keys())


def get_layer_definition(layer_type: str) -> LayerDefinition:
    definition = LAYER_REGISTRY.get(layer_type)
    if definition is None:
        raise InvalidLayerTypeError(layer_type, available_layer_types())
    return definition


def _format_props_errors(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error["loc"])
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts)


def validate_props(layer_type: str, props: dict[str, Any]) -> dict[str, Any]:
    """Validate props for a layer type and return them with defaults filled in.

    Raises:
        InvalidLayerTypeError: If the type is not registered
        PropsValidationError: If the props do not match the type schema
    """
    definition = get_layer_definition(layer_type)
    try:
        model = definition.props_model.model_validate(props)
    except PydanticValidationError as exc:
        raise PropsValidationError(layer_type, _format_props_errors(exc)) from exc
    return model.model_dump(mode="json")
