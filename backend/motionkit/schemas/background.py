"""Project background schemas: a solid color string or a gradient object."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class ColorStop(BaseModel):
    color: str = Field(..., description="Color value (hex, rgb, or rgba)")
    position: float = Field(..., ge=0, le=100, description="Position in percentage (0-100)")


class GradientCenter(BaseModel):
    x: float = Field(default=50, ge=0, le=100)
    y: float = Field(default=50, ge=0, le=100)


class LinearGradient(BaseModel):
    type: Literal["linear"] = "linear"
    angle: float = Field(default=180, ge=0, le=360, description="0 = top to bottom, 90 = left to right")
    stops: list[ColorStop] = Field(..., min_length=2)


class RadialGradient(BaseModel):
    type: Literal["radial"] = "radial"
    shape: Literal["circle", "ellipse"] = "circle"
    size: Literal["closest-side", "closest-corner", "farthest-side", "farthest-corner"] = (
        "farthest-corner"
    )
    position: GradientCenter = Field(default_factory=GradientCenter)
    stops: list[ColorStop] = Field(..., min_length=2)


class ConicGradient(BaseModel):
    type: Literal["conic"] = "conic"
    angle: float = Field(default=0, ge=0, le=360, description="Starting angle in degrees")
    position: GradientCenter = Field(default_factory=GradientCenter)
    stops: list[ColorStop] = Field(..., min_length=2)


Gradient = Annotated[
    LinearGradient | RadialGradient | ConicGradient,
    Field(discriminator="type"),
]

# Solid colors are stored as a bare string
Background = str | Gradient


def background_to_css(value: Background) -> str:
    """Render a background as a CSS value, e.g. for prompts and previews."""
    if isinstance(value, str):
        return value

    stops = ", ".join(f"{s.color} {s.position:g}%" for s in value.stops)
    if isinstance(value, LinearGradient):
        return f"linear-gradient({value.angle:g}deg, {stops})"
    pos = f"{value.position.x:g}% {value.position.y:g}%"
    if isinstance(value, RadialGradient):
        return f"radial-gradient({value.shape} {value.size} at {pos}, {stops})"
    return f"conic-gradient(from {value.angle:g}deg at {pos}, {stops})"
