from motionkit.engine.evaluator import evaluate, evaluate_layer, resolve_frame
from motionkit.engine.invariants import check_invariants
from motionkit.engine.property_paths import PropertyDescriptor, resolve_property

__all__ = [
    "evaluate",
    "evaluate_layer",
    "resolve_frame",
    "check_invariants",
    "PropertyDescriptor",
    "resolve_property",
]
