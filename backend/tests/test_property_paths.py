"""Tests for property path addressing and the layer type registry."""

import pytest

from motionkit.engine.property_paths import animatable_paths, resolve_property
from motionkit.exceptions import (
    InterpolationMismatchError,
    InvalidLayerTypeError,
    InvalidPropertyPathError,
    OutOfBoundsError,
    PropsValidationError,
    ValueTypeMismatchError,
)
from motionkit.layers.registry import available_layer_types, get_layer_definition, validate_props
from motionkit.schemas.animation import DiscreteInterpolation, Layer, TextInterpolation


@pytest.fixture
def text_layer() -> Layer:
    return Layer(name="Title", type="text", props=validate_props("text", {"content": "Hi"}))


@pytest.fixture
def shape_layer() -> Layer:
    return Layer(name="Box", type="shape", props=validate_props("shape", {}))


class TestLayerRegistry:
    """Tests for the per-type props schemas."""

    def test_closed_set_of_types(self):
        assert {"text", "shape", "image", "group"} <= set(available_layer_types())

    def test_defaults_are_filled(self):
        props = validate_props("text", {"content": "Hello"})
        assert props["content"] == "Hello"
        assert props["font_size"] == 48

    def test_unknown_prop_rejected(self):
        with pytest.raises(PropsValidationError, match="bogus"):
            validate_props("shape", {"bogus": 1})

    def test_wrong_prop_type_rejected(self):
        with pytest.raises(PropsValidationError):
            validate_props("progress", {"progress": 2})

    def test_unknown_type(self):
        with pytest.raises(InvalidLayerTypeError, match="Available types"):
            get_layer_definition("hologram")


class TestResolveProperty:
    """Tests for resolve_property()."""

    def test_builtin_paths(self, text_layer):
        for path in ("position.x", "rotation.z", "scale.y", "opacity", "blur"):
            descriptor = resolve_property(text_layer, path)
            assert descriptor.kind == "number"
            assert descriptor.default_family == "continuous"

    def test_color_only_for_types_with_color(self, text_layer, shape_layer):
        assert resolve_property(text_layer, "color").kind == "color"
        with pytest.raises(InvalidPropertyPathError):
            resolve_property(shape_layer, "color")

    def test_props_path(self, shape_layer):
        descriptor = resolve_property(shape_layer, "props.fill")
        assert descriptor.kind == "color"
        assert descriptor.props_key == "fill"

    def test_unknown_props_key(self, shape_layer):
        with pytest.raises(InvalidPropertyPathError, match="no prop 'content'"):
            resolve_property(shape_layer, "props.content")

    def test_malformed_paths(self, text_layer):
        for path in ("position", "props.", "props.a.b", "scale.z", ""):
            with pytest.raises(InvalidPropertyPathError):
                resolve_property(text_layer, path)

    def test_text_content_defaults_to_char_reveal(self, text_layer):
        interpolation = resolve_property(text_layer, "props.content").default_interpolation()
        assert isinstance(interpolation, TextInterpolation)
        assert interpolation.strategy == "char-reveal"

    def test_boolean_and_enum_default_to_steps(self, text_layer, shape_layer):
        assert isinstance(
            resolve_property(shape_layer, "props.shape_type").default_interpolation(),
            DiscreteInterpolation,
        )
        button = Layer(name="B", type="button", props=validate_props("button", {}))
        assert resolve_property(button, "props.pressed").allowed_families == ("discrete",)

    def test_animatable_paths_lists_props(self, text_layer):
        paths = animatable_paths(text_layer)
        assert "opacity" in paths
        assert "color" in paths
        assert "props.content" in paths


class TestCheckValue:
    """Tests for value and interpolation checks."""

    def test_number_rejects_string_and_bool(self, text_layer):
        descriptor = resolve_property(text_layer, "position.x")
        with pytest.raises(ValueTypeMismatchError):
            descriptor.check_value("10", text_layer)
        with pytest.raises(ValueTypeMismatchError):
            descriptor.check_value(True, text_layer)

    def test_opacity_bounds(self, text_layer):
        descriptor = resolve_property(text_layer, "opacity")
        assert descriptor.check_value(1, text_layer) == 1.0
        with pytest.raises(OutOfBoundsError):
            descriptor.check_value(1.5, text_layer)

    def test_props_value_checked_against_schema(self, text_layer):
        descriptor = resolve_property(text_layer, "props.font_size")
        with pytest.raises(PropsValidationError):
            descriptor.check_value(-4, text_layer)

    def test_text_family_not_allowed_for_numbers(self, text_layer):
        descriptor = resolve_property(text_layer, "opacity")
        with pytest.raises(InterpolationMismatchError):
            descriptor.check_interpolation(TextInterpolation())

    def test_static_value(self, text_layer):
        assert resolve_property(text_layer, "scale.x").static_value(text_layer) == 1.0
        assert resolve_property(text_layer, "props.content").static_value(text_layer) == "Hi"
