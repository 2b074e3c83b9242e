from motionkit.layers.base import LayerDefinition, PropField
from motionkit.layers.registry import (
    LAYER_REGISTRY,
    available_layer_types,
    get_layer_definition,
    validate_props,
)

__all__ = [
    "LayerDefinition",
    "PropField",
    "LAYER_REGISTRY",
    "available_layer_types",
    "get_layer_definition",
    "validate_props",
]
