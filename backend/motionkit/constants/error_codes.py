"""Error codes dictionary for mutation and boundary failures.

This is the single source of truth for all error codes, their retryability,
and the recovery hint handed back to the agent. Used by exceptions to build
machine-readable failure results.
"""

from typing import Any, TypedDict


class ErrorCodeSpec(TypedDict, total=False):
    """Specification for an error code."""

    retryable: bool
    suggested_action: str
    suggested_tool: str
    suggested_fix: str
    parameters: dict[str, Any]


# Error codes dictionary - single source of truth
ERROR_CODES: dict[str, ErrorCodeSpec] = {
    # ==========================================================================
    # Reference errors (retryable after re-reading the project)
    # ==========================================================================
    "PROJECT_NOT_FOUND": {
        "retryable": True,
        "suggested_action": "refresh_ids",
        "suggested_fix": "Check the project id",
    },
    "LAYER_NOT_FOUND": {
        "retryable": True,
        "suggested_action": "refresh_ids",
        "suggested_tool": "describe_project",
        "suggested_fix": "Use one of the listed layer ids or names",
    },
    "KEYFRAME_NOT_FOUND": {
        "retryable": True,
        "suggested_action": "refresh_ids",
        "suggested_tool": "describe_project",
        "suggested_fix": "Use a keyframe id listed for this layer",
    },
    # ==========================================================================
    # Validation errors (not retryable, fix input)
    # ==========================================================================
    "VALIDATION_ERROR": {
        "retryable": False,
        "suggested_fix": "Fix the reported fields and call the tool again",
    },
    "INVALID_PROPERTY_PATH": {
        "retryable": False,
        "suggested_fix": (
            "Use position.x, position.y, position.z, rotation.x, rotation.y, rotation.z, "
            "scale.x, scale.y, opacity, blur, color or props.<name>"
        ),
    },
    "OUT_OF_BOUNDS": {
        "retryable": False,
    },
    "INVALID_FIELD_VALUE": {
        "retryable": False,
    },
    "VALUE_TYPE_MISMATCH": {
        "retryable": False,
        "suggested_fix": "Match the value type of the animated property",
    },
    "INTERPOLATION_MISMATCH": {
        "retryable": False,
        "suggested_fix": "Pick an interpolation family allowed for the property",
    },
    "INVALID_PROPS": {
        "retryable": False,
        "suggested_fix": "Only use props defined for the layer type",
    },
    "INVALID_LAYER_TYPE": {
        "retryable": False,
    },
    "NOT_A_GROUP": {
        "retryable": False,
        "suggested_fix": "Pass the id or name of a group layer",
    },
    "DUPLICATE_KEYFRAME_TIME": {
        "retryable": False,
        "suggested_fix": "Edit the existing keyframe at that time instead",
    },
    "POSITIONAL_ALIAS_NOT_ALLOWED": {
        "retryable": False,
        "suggested_fix": "Reference layers by id or name",
    },
    "TOO_MANY_LAYERS": {
        "retryable": False,
    },
    "UNKNOWN_TOOL": {
        "retryable": False,
    },
    # ==========================================================================
    # Boundary errors
    # ==========================================================================
    "AI_ACCESS_DENIED": {
        "retryable": False,
    },
    "AI_PROVIDER_ERROR": {
        "retryable": True,
        "suggested_action": "wait_and_retry",
        "parameters": {"delay_ms": 1000},
    },
    "CHAT_SESSION_ERROR": {
        "retryable": False,
    },
    "DOCUMENT_CORRUPTED": {
        "retryable": False,
    },
    "STORAGE_ERROR": {
        "retryable": True,
        "suggested_action": "wait_and_retry",
        "parameters": {"delay_ms": 1000},
    },
    "INTERNAL_ERROR": {
        "retryable": False,
    },
}


def get_error_spec(code: str) -> ErrorCodeSpec:
    """Get error specification by code.

    Args:
        code: The error code

    Returns:
        ErrorCodeSpec with retryable flag and suggested actions
    """
    return ERROR_CODES.get(code, {"retryable": False})


def is_retryable(code: str) -> bool:
    """Check if an error code is retryable."""
    spec = get_error_spec(code)
    return spec.get("retryable", False)
