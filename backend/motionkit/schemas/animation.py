import uuid
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, model_validator

from motionkit.schemas.background import Background


def new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# Interpolation
# =============================================================================

ContinuousStrategy = Literal[
    "linear",
    "ease-in",
    "ease-out",
    "ease-in-out",
    "cubic-bezier",
    "ease-in-quad",
    "ease-out-quad",
    "ease-in-out-quad",
    "ease-in-cubic",
    "ease-out-cubic",
    "ease-in-out-cubic",
    "ease-in-sine",
    "ease-out-sine",
    "ease-in-out-sine",
    "ease-in-expo",
    "ease-out-expo",
    "ease-in-out-expo",
    "ease-in-back",
    "ease-out-back",
    "ease-in-out-back",
]

InterpolationFamily = Literal["continuous", "discrete", "quantized", "text"]


class BezierPoints(BaseModel):
    """Control points of a CSS-style cubic-bezier curve."""

    x1: float = Field(..., ge=0, le=1)
    y1: float
    x2: float = Field(..., ge=0, le=1)
    y2: float


class ContinuousInterpolation(BaseModel):
    family: Literal["continuous"] = "continuous"
    strategy: ContinuousStrategy = "ease-in-out"
    bezier: BezierPoints | None = None

    @model_validator(mode="after")
    def _require_bezier(self) -> "ContinuousInterpolation":
        if self.strategy == "cubic-bezier" and self.bezier is None:
            raise ValueError("cubic-bezier interpolation requires bezier control points")
        return self


class DiscreteInterpolation(BaseModel):
    family: Literal["discrete"] = "discrete"
    strategy: Literal["step-end", "step-start", "step-mid"] = "step-end"


class QuantizedInterpolation(BaseModel):
    family: Literal["quantized"] = "quantized"
    strategy: Literal["integer", "snap-grid"] = "integer"
    increment: float | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _require_increment(self) -> "QuantizedInterpolation":
        if self.strategy == "snap-grid" and self.increment is None:
            raise ValueError("snap-grid interpolation requires a positive increment")
        return self


class TextInterpolation(BaseModel):
    family: Literal["text"] = "text"
    strategy: Literal["char-reveal", "word-reveal"] = "char-reveal"
    separator: str = Field(default=" ", min_length=1)


Interpolation = Annotated[
    ContinuousInterpolation | DiscreteInterpolation | QuantizedInterpolation | TextInterpolation,
    Field(discriminator="family"),
]

KeyframeValue = bool | float | str


# =============================================================================
# Layer
# =============================================================================

LayerType = Literal[
    "text",
    "shape",
    "image",
    "icon",
    "button",
    "progress",
    "divider",
    "mouse",
    "code",
    "terminal",
    "video",
    "audio",
    "group",
]

AnchorPoint = Literal[
    "top-left",
    "top-center",
    "top-right",
    "center-left",
    "center",
    "center-right",
    "bottom-left",
    "bottom-center",
    "bottom-right",
]


class Transform(BaseModel):
    x: float = 0
    y: float = 0
    z: float = 0
    # Rotations are in radians
    rotation_x: float = 0
    rotation_y: float = 0
    rotation_z: float = 0
    scale_x: float = Field(default=1.0, ge=0)
    scale_y: float = Field(default=1.0, ge=0)
    scale_z: float = Field(default=1.0, ge=0)
    anchor: AnchorPoint = "center"


class StyleFilter(BaseModel):
    type: Literal[
        "brightness", "contrast", "saturate", "grayscale", "sepia", "invert", "hue-rotate"
    ]
    amount: float


class DropShadow(BaseModel):
    x: float = 0
    y: float = 4
    blur: float = Field(default=8, ge=0)
    color: str = "rgba(0, 0, 0, 0.5)"


class LayerStyle(BaseModel):
    opacity: float = Field(default=1.0, ge=0, le=1)
    blur: float = Field(default=0, ge=0)
    filters: list[StyleFilter] = Field(default_factory=list)
    drop_shadow: DropShadow | None = None


class Keyframe(BaseModel):
    """A control point: the value of one property at one time."""

    id: str = Field(default_factory=new_id)
    time: float = Field(..., ge=0, description="Seconds from project start")
    property: str
    value: KeyframeValue
    interpolation: Interpolation = Field(default_factory=ContinuousInterpolation)


class Layer(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    type: LayerType
    transform: Transform = Field(default_factory=Transform)
    style: LayerStyle = Field(default_factory=LayerStyle)
    visible: bool = True
    locked: bool = False
    keyframes: list[Keyframe] = Field(default_factory=list)
    props: dict[str, Any] = Field(default_factory=dict)

    # Visible window within the project timeline
    enter_time: float | None = Field(default=None, ge=0)
    exit_time: float | None = Field(default=None, ge=0)

    # Media layers: total source length and where playback starts in it
    content_duration: float | None = Field(default=None, ge=0)
    content_offset: float | None = Field(default=None, ge=0)

    parent_id: str | None = None

    def keyframes_for(self, path: str) -> list[Keyframe]:
        """Keyframes animating one property, in time order."""
        return [kf for kf in self.keyframes if kf.property == path]


# =============================================================================
# Project
# =============================================================================


class Project(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = "Untitled Project"
    width: int = Field(default=1920, gt=0)
    height: int = Field(default=1080, gt=0)
    duration: float = Field(default=10.0, gt=0, description="Seconds")
    fps: float = Field(default=30, gt=0)
    background: Background = "#000000"
    font_family: str = "Inter"
    layers: list[Layer] = Field(default_factory=list)

    def find_layer(self, layer_id: str) -> Layer | None:
        for layer in self.layers:
            if layer.id == layer_id:
                return layer
        return None

    def children_of(self, group_id: str) -> list[Layer]:
        return [layer for layer in self.layers if layer.parent_id == group_id]
