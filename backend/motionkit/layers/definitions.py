from typing import Literal

from pydantic import Field

from motionkit.layers.base import ColorField, LayerProps, TextField


class TextProps(LayerProps):
    content: str = TextField("Text", "Text to display")
    font_size: float = Field(default=48, gt=0)
    font_family: str | None = Field(default=None, description="Overrides the project font")
    font_weight: int = Field(default=400, ge=100, le=900)
    color: str = ColorField("#ffffff")
    text_align: Literal["left", "center", "right"] = "center"
    line_height: float = Field(default=1.2, gt=0)
    letter_spacing: float = 0
    width: float | None = Field(default=None, gt=0, description="Wrap width in pixels")


class ShapeProps(LayerProps):
    shape_type: Literal["rectangle", "ellipse", "triangle", "polygon", "star"] = "rectangle"
    width: float = Field(default=200, ge=0)
    height: float = Field(default=200, ge=0)
    fill: str = ColorField("#4a90e2")
    stroke_color: str = ColorField("#000000")
    stroke_width: float = Field(default=0, ge=0)
    corner_radius: float = Field(default=0, ge=0)
    sides: int = Field(default=6, ge=3, description="Polygon and star point count")


class ImageProps(LayerProps):
    src: str = ""
    width: float = Field(default=400, ge=0)
    height: float = Field(default=300, ge=0)
    object_fit: Literal["cover", "contain", "fill"] = "cover"
    border_radius: float = Field(default=0, ge=0)


class IconProps(LayerProps):
    icon: str = Field(default="star", description="Icon name from the icon set")
    size: float = Field(default=64, gt=0)
    color: str = ColorField("#ffffff")
    stroke_width: float = Field(default=2, ge=0)


class ButtonProps(LayerProps):
    label: str = TextField("Click me")
    width: float = Field(default=200, ge=0)
    height: float = Field(default=56, ge=0)
    background_color: str = ColorField("#4a90e2")
    color: str = ColorField("#ffffff", "Label color")
    border_radius: float = Field(default=12, ge=0)
    font_size: float = Field(default=20, gt=0)
    pressed: bool = False


class ProgressProps(LayerProps):
    progress: float = Field(default=0.5, ge=0, le=1)
    variant: Literal["bar", "circle"] = "bar"
    width: float = Field(default=400, ge=0)
    height: float = Field(default=16, ge=0)
    color: str = ColorField("#4a90e2")
    track_color: str = ColorField("#333333")
    border_radius: float = Field(default=8, ge=0)


class DividerProps(LayerProps):
    width: float = Field(default=400, ge=0)
    thickness: float = Field(default=2, ge=0)
    color: str = ColorField("#ffffff")
    line_style: Literal["solid", "dashed", "dotted"] = "solid"


class MouseProps(LayerProps):
    pointer: Literal["arrow", "hand", "text"] = "arrow"
    size: float = Field(default=32, gt=0)
    color: str = ColorField("#ffffff")
    clicking: bool = False


class CodeProps(LayerProps):
    code: str = TextField("console.log('hello');")
    language: str = "javascript"
    theme: Literal["dark", "light"] = "dark"
    font_size: float = Field(default=18, gt=0)
    show_line_numbers: bool = True
    width: float = Field(default=640, ge=0)
    height: float = Field(default=360, ge=0)


class TerminalProps(LayerProps):
    content: str = TextField("npm install")
    prompt: str = "$"
    title: str = "Terminal"
    font_size: float = Field(default=16, gt=0)
    width: float = Field(default=640, ge=0)
    height: float = Field(default=360, ge=0)


class VideoProps(LayerProps):
    src: str = ""
    width: float = Field(default=640, ge=0)
    height: float = Field(default=360, ge=0)
    volume: float = Field(default=1.0, ge=0, le=1)
    muted: bool = False
    playback_rate: float = Field(default=1.0, gt=0)


class AudioProps(LayerProps):
    src: str = ""
    volume: float = Field(default=1.0, ge=0, le=1)
    muted: bool = False


class GroupProps(LayerProps):
    member_parents: dict[str, str] = Field(
        default_factory=dict,
        description="Group each member was moved out of by group_layers; restored on ungroup",
    )
