"""Building blocks for per-type layer props schemas.

Every layer type registers a pydantic props model. Field metadata on those
models drives property path addressing: the kind of each field decides which
keyframe values and interpolation families are accepted for ``props.<name>``.
"""

import types
import typing
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.fields import FieldInfo

ValueKind = Literal["number", "string", "color", "boolean"]


class LayerProps(BaseModel):
    """Base for props models. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")


def ColorField(default: str, description: str | None = None) -> Any:
    """A string prop that holds a color and interpolates per channel."""
    return Field(default=default, description=description, json_schema_extra={"kind": "color"})


def TextField(default: str, description: str | None = None) -> Any:
    """A string prop whose content can be revealed by text interpolation."""
    return Field(default=default, description=description, json_schema_extra={"text_reveal": True})


@dataclass(frozen=True)
class PropField:
    """Animatable description of a single props field."""

    name: str
    kind: ValueKind
    text_reveal: bool = False
    enumerated: bool = False
    description: str | None = None


@dataclass(frozen=True)
class LayerDefinition:
    """Registry entry for a layer type."""

    layer_type: str
    display_name: str
    props_model: type[LayerProps]
    description: str = ""
    is_media: bool = False

    def default_props(self) -> dict[str, Any]:
        return self.props_model().model_dump(mode="json")

    def prop_fields(self) -> dict[str, PropField]:
        return describe_props(self.props_model)


def _unwrap_optional(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _field_from_info(name: str, info: FieldInfo) -> PropField | None:
    extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
    annotation = _unwrap_optional(info.annotation)

    if extra.get("kind") == "color":
        return PropField(name, "color", description=info.description)
    if annotation is bool:
        return PropField(name, "boolean", description=info.description)
    if annotation in (int, float):
        return PropField(name, "number", description=info.description)
    if annotation is str:
        return PropField(
            name,
            "string",
            text_reveal=bool(extra.get("text_reveal")),
            description=info.description,
        )
    if typing.get_origin(annotation) is Literal:
        return PropField(name, "string", enumerated=True, description=info.description)
    # Lists, nested objects and the like are not animatable
    return None


def describe_props(model: type[LayerProps]) -> dict[str, PropField]:
    fields: dict[str, PropField] = {}
    for name, info in model.model_fields.items():
        field = _field_from_info(name, info)
        if field is not None:
            fields[name] = field
    return fields
