"""Input schemas of the mutation tools.

These are shared by the chat tool catalog and the MCP server. Layer
references accept an id, a layer name, or (chat only) a ``layer_N`` alias.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from motionkit.engine.presets import PresetId
from motionkit.schemas.animation import (
    AnchorPoint,
    DropShadow,
    Interpolation,
    KeyframeValue,
    StyleFilter,
)
from motionkit.schemas.background import Background

LAYER_REF_DESCRIPTION = (
    "Layer id, exact layer name, or layer_N for the Nth layer created in this turn"
)


class ToolInput(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


def LayerRefField(description: str = LAYER_REF_DESCRIPTION) -> Any:
    return Field(
        ...,
        validation_alias=AliasChoices("layer", "layer_id"),
        description=description,
    )


# =============================================================================
# Patches
# =============================================================================


class TransformPatch(ToolInput):
    x: float | None = None
    y: float | None = None
    z: float | None = None
    rotation_x: float | None = Field(default=None, description="Radians")
    rotation_y: float | None = Field(default=None, description="Radians")
    rotation_z: float | None = Field(default=None, description="Radians")
    scale_x: float | None = Field(default=None, ge=0)
    scale_y: float | None = Field(default=None, ge=0)
    scale_z: float | None = Field(default=None, ge=0)
    anchor: AnchorPoint | None = None


class StylePatch(ToolInput):
    opacity: float | None = Field(default=None, ge=0, le=1)
    blur: float | None = Field(default=None, ge=0)
    filters: list[StyleFilter] | None = None
    drop_shadow: DropShadow | None = None


class PresetInput(ToolInput):
    id: PresetId
    start_time: float = Field(default=0.0, ge=0, description="Seconds")
    duration: float = Field(default=1.0, gt=0, description="Seconds")


# =============================================================================
# Layer Tools
# =============================================================================


class CreateLayerInput(ToolInput):
    type: str = Field(..., description="Layer type, e.g. text, shape, image, group")
    name: str | None = None
    visible: bool = True
    locked: bool = False
    transform: TransformPatch | None = None
    style: StylePatch | None = None
    props: dict[str, Any] | None = Field(
        default=None, description="Type specific props merged over the type defaults"
    )
    parent: str | None = Field(default=None, description="Group layer to nest the new layer in")
    enter_time: float | None = Field(default=None, ge=0)
    exit_time: float | None = Field(default=None, ge=0)
    content_duration: float | None = Field(default=None, ge=0)
    content_offset: float | None = Field(default=None, ge=0)
    animation: PresetInput | None = Field(default=None, description="Entrance preset to apply")


class LayerUpdates(ToolInput):
    """Partial layer update. Timing fields and parent may be set to null to clear them."""

    name: str | None = None
    visible: bool | None = None
    locked: bool | None = None
    transform: TransformPatch | None = None
    style: StylePatch | None = None
    props: dict[str, Any] | None = None
    parent: str | None = None
    enter_time: float | None = Field(default=None, ge=0)
    exit_time: float | None = Field(default=None, ge=0)
    content_duration: float | None = Field(default=None, ge=0)
    content_offset: float | None = Field(default=None, ge=0)


class EditLayerInput(ToolInput):
    layer: str = LayerRefField()
    updates: LayerUpdates


class RemoveLayerInput(ToolInput):
    layer: str = LayerRefField()


class GroupLayersInput(ToolInput):
    layers: list[str] = Field(
        ...,
        min_length=2,
        validation_alias=AliasChoices("layers", "layer_ids"),
        description="At least two layer references to group",
    )
    name: str = "Group"


class UngroupLayersInput(ToolInput):
    group: str = Field(
        ...,
        validation_alias=AliasChoices("group", "group_id", "layer"),
        description="Group layer reference",
    )


# =============================================================================
# Keyframe Tools
# =============================================================================


class KeyframeInput(ToolInput):
    property: str = Field(
        ...,
        description="position.x|y|z, rotation.x|y|z, scale.x|y, opacity, blur, color or props.<name>",
    )
    time: float = Field(..., description="Seconds from project start")
    value: KeyframeValue
    interpolation: Interpolation | None = Field(
        default=None, description="Omit to use the default for the property"
    )


class AnimateLayerInput(ToolInput):
    layer: str = LayerRefField()
    keyframes: list[KeyframeInput] = Field(default_factory=list)
    preset: PresetInput | None = None

    @model_validator(mode="after")
    def _require_keyframes_or_preset(self) -> "AnimateLayerInput":
        if not self.keyframes and self.preset is None:
            raise ValueError("provide keyframes or a preset")
        return self


class KeyframeUpdates(ToolInput):
    time: float | None = None
    value: KeyframeValue | None = None
    interpolation: Interpolation | None = None

    @model_validator(mode="after")
    def _require_change(self) -> "KeyframeUpdates":
        if self.time is None and self.value is None and self.interpolation is None:
            raise ValueError("provide at least one of time, value or interpolation")
        return self


class UpdateKeyframeInput(ToolInput):
    layer: str = LayerRefField()
    keyframe_id: str
    updates: KeyframeUpdates


class RemoveKeyframeInput(ToolInput):
    layer: str = LayerRefField()
    keyframe_id: str


# =============================================================================
# Project Tools
# =============================================================================


class ConfigureProjectInput(ToolInput):
    name: str | None = None
    width: int | None = None
    height: int | None = None
    duration: float | None = Field(default=None, description="Seconds")
    fps: float | None = None
    background: Background | None = None
    font_family: str | None = None
