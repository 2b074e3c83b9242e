"""Easing curves and value blending helpers for keyframe animation.

Easing functions map linear progress ``p`` in [0, 1] to eased progress.
The evaluator looks them up by the hyphenated strategy names stored on
keyframes:

    from motionkit.utils.interpolation import get_easing_function

    ease = get_easing_function("ease-in-out")
    value = lerp(0.0, 100.0, ease(0.25))
"""

import math
from typing import Callable


EasingFunction = Callable[[float], float]


# =============================================================================
# Easing Functions
# =============================================================================


def linear(t: float) -> float:
    """Linear easing (no easing)."""
    return t


def ease_in_cubic(t: float) -> float:
    return t * t * t


def ease_out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4 * t * t * t
    return 1 - (-2 * t + 2) ** 3 / 2


def ease_in_quad(t: float) -> float:
    return t * t


def ease_out_quad(t: float) -> float:
    return 1 - (1 - t) * (1 - t)


def ease_in_out_quad(t: float) -> float:
    if t < 0.5:
        return 2 * t * t
    return 1 - (-2 * t + 2) ** 2 / 2


def ease_in_sine(t: float) -> float:
    return 1 - math.cos((t * math.pi) / 2)


def ease_out_sine(t: float) -> float:
    return math.sin((t * math.pi) / 2)


def ease_in_out_sine(t: float) -> float:
    return -(math.cos(math.pi * t) - 1) / 2


def ease_in_expo(t: float) -> float:
    return 0 if t == 0 else 2 ** (10 * t - 10)


def ease_out_expo(t: float) -> float:
    return 1 if t == 1 else 1 - 2 ** (-10 * t)


def ease_in_out_expo(t: float) -> float:
    if t == 0:
        return 0
    if t == 1:
        return 1
    if t < 0.5:
        return 2 ** (20 * t - 10) / 2
    return (2 - 2 ** (-20 * t + 10)) / 2


_BACK_C1 = 1.70158


def ease_in_back(t: float) -> float:
    """Ease in with overshoot below 0."""
    c3 = _BACK_C1 + 1
    return c3 * t * t * t - _BACK_C1 * t * t


def ease_out_back(t: float) -> float:
    """Ease out with overshoot above 1."""
    c3 = _BACK_C1 + 1
    return 1 + c3 * (t - 1) ** 3 + _BACK_C1 * (t - 1) ** 2


def ease_in_out_back(t: float) -> float:
    c2 = _BACK_C1 * 1.525
    if t < 0.5:
        return ((2 * t) ** 2 * ((c2 + 1) * 2 * t - c2)) / 2
    return ((2 * t - 2) ** 2 * ((c2 + 1) * (t * 2 - 2) + c2) + 2) / 2


def bezier(x1: float, y1: float, x2: float, y2: float) -> EasingFunction:
    """Create a cubic bezier easing function with CSS semantics.

    The curve runs from (0, 0) to (1, 1) through control points
    (x1, y1) and (x2, y2). For a progress value ``p`` the curve parameter
    ``s`` with x(s) = p is found by Newton-Raphson, falling back to
    bisection when the slope flattens out, and y(s) is returned.

    Args:
        x1, y1: First control point (x1 in [0, 1])
        x2, y2: Second control point (x2 in [0, 1])

    Returns:
        Easing function (p -> eased progress)
    """

    def _coord(s: float, c1: float, c2: float) -> float:
        return 3 * (1 - s) ** 2 * s * c1 + 3 * (1 - s) * s**2 * c2 + s**3

    def _slope(s: float, c1: float, c2: float) -> float:
        return 3 * (1 - s) ** 2 * c1 + 6 * (1 - s) * s * (c2 - c1) + 3 * s**2 * (1 - c2)

    def _bezier(p: float) -> float:
        if p <= 0:
            return 0.0
        if p >= 1:
            return 1.0

        epsilon = 1e-7
        s = p
        for _ in range(8):
            error = _coord(s, x1, x2) - p
            if abs(error) < epsilon:
                return _coord(s, y1, y2)
            dx = _slope(s, x1, x2)
            if abs(dx) < 1e-6:
                break
            s -= error / dx

        # Bisection: x(s) is monotonic on [0, 1] while x1 and x2 are in [0, 1]
        lo, hi = 0.0, 1.0
        s = p
        for _ in range(64):
            x = _coord(s, x1, x2)
            if abs(x - p) < epsilon:
                break
            if x < p:
                lo = s
            else:
                hi = s
            s = (lo + hi) / 2
        return _coord(s, y1, y2)

    return _bezier


# CSS named curves
ease_in = bezier(0.42, 0, 1.0, 1.0)
ease_out = bezier(0, 0, 0.58, 1.0)
ease_in_out = bezier(0.42, 0, 0.58, 1.0)


# Strategy name -> function lookup for keyframe interpolation descriptors
EASING_FUNCTIONS: dict[str, EasingFunction] = {
    "linear": linear,
    "ease-in": ease_in,
    "ease-out": ease_out,
    "ease-in-out": ease_in_out,
    "ease-in-quad": ease_in_quad,
    "ease-out-quad": ease_out_quad,
    "ease-in-out-quad": ease_in_out_quad,
    "ease-in-cubic": ease_in_cubic,
    "ease-out-cubic": ease_out_cubic,
    "ease-in-out-cubic": ease_in_out_cubic,
    "ease-in-sine": ease_in_sine,
    "ease-out-sine": ease_out_sine,
    "ease-in-out-sine": ease_in_out_sine,
    "ease-in-expo": ease_in_expo,
    "ease-out-expo": ease_out_expo,
    "ease-in-out-expo": ease_in_out_expo,
    "ease-in-back": ease_in_back,
    "ease-out-back": ease_out_back,
    "ease-in-out-back": ease_in_out_back,
}


def get_easing_function(name: str) -> EasingFunction:
    """Get an easing function by strategy name.

    Raises:
        ValueError: If the easing name is not recognized
    """
    fn = EASING_FUNCTIONS.get(name)
    if fn is None:
        raise ValueError(
            f"Unknown easing function: {name}. "
            f"Available: {', '.join(EASING_FUNCTIONS.keys())}"
        )
    return fn


# =============================================================================
# Value Helpers
# =============================================================================


def lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (Python's round() is banker's)."""
    return math.floor(value + 0.5)


def parse_hex_color(color_str: str) -> tuple[int, int, int] | None:
    """Parse ``#rrggbb`` or ``#rgb`` into an (r, g, b) tuple, or None if not hex."""
    hex_c = color_str.strip().lstrip("#")
    if len(hex_c) == 3:
        hex_c = "".join(c * 2 for c in hex_c)
    if len(hex_c) != 6 or not all(c in "0123456789abcdefABCDEF" for c in hex_c):
        return None
    return int(hex_c[0:2], 16), int(hex_c[2:4], 16), int(hex_c[4:6], 16)


def format_hex_color(rgb: tuple[int, int, int]) -> str:
    r, g, b = (max(0, min(255, c)) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def blend_colors(start: str, end: str, t: float) -> str | None:
    """Blend two hex colors channel by channel; None when either is not hex."""
    a = parse_hex_color(start)
    b = parse_hex_color(end)
    if a is None or b is None:
        return None
    return format_hex_color(
        (
            round_half_up(lerp(a[0], b[0], t)),
            round_half_up(lerp(a[1], b[1], t)),
            round_half_up(lerp(a[2], b[2], t)),
        )
    )
