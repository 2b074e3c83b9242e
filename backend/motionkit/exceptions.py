"""Custom exceptions for the motionkit core.

User-facing failures carry machine-readable error codes and a suggested
recovery hint so that an AI agent can correct its next tool call. Mutation
handlers convert them into failure results instead of letting them escape.
"""

from typing import Any

from motionkit.constants.error_codes import get_error_spec, is_retryable
from motionkit.schemas.envelope import ErrorInfo, ErrorLocation, SuggestedAction


class MotionKitError(Exception):
    """Base exception for all motionkit errors.

    Provides structured error information for tool results.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        location: ErrorLocation | None = None,
        suggested_fix: str | None = None,
    ):
        self.message = message or self.__class__.message
        if code:
            self.code = code
        self.location = location
        self.suggested_fix = suggested_fix
        super().__init__(self.message)

    def to_error_info(self) -> ErrorInfo:
        """Convert exception to ErrorInfo."""
        spec = get_error_spec(self.code)
        retryable = is_retryable(self.code)

        suggested_actions: list[SuggestedAction] = []
        if "suggested_action" in spec:
            action = SuggestedAction(
                action=spec["suggested_action"],
                tool=spec.get("suggested_tool"),
                parameters=spec.get("parameters", {}),
            )
            suggested_actions.append(action)

        # Explicit override from the exception wins over the code default
        suggested_fix = self.suggested_fix or spec.get("suggested_fix")

        return ErrorInfo(
            code=self.code,
            message=self.message,
            location=self.location,
            retryable=retryable,
            suggested_fix=suggested_fix,
            suggested_actions=suggested_actions,
        )

    def to_result(self) -> dict[str, Any]:
        """Render as a failed tool result the agent can read."""
        info = self.to_error_info()
        result: dict[str, Any] = {
            "success": False,
            "error": info.message,
            "message": info.message,
            "error_code": info.code,
        }
        if info.suggested_fix:
            result["suggested_fix"] = info.suggested_fix
        if info.location is not None:
            result["location"] = info.location.model_dump(exclude_none=True)
        return result


# =============================================================================
# Reference Errors
# =============================================================================


class ResourceNotFoundError(MotionKitError):
    """Base class for unresolvable references."""


class ProjectNotFoundError(ResourceNotFoundError):
    """Project not found."""

    code = "PROJECT_NOT_FOUND"
    message = "Project not found"

    def __init__(self, project_id: str | None = None):
        message = f"Project not found: {project_id}" if project_id else self.message
        super().__init__(message)


class LayerNotFoundError(ResourceNotFoundError):
    """Layer reference did not match an id, a name or a live positional alias."""

    code = "LAYER_NOT_FOUND"
    message = "Layer not found"

    def __init__(
        self,
        ref: str | None = None,
        *,
        available: list[tuple[str, str]] | None = None,
        reason: str | None = None,
    ):
        message = f'Layer "{ref}" not found' if ref else self.message
        if reason:
            message = f"{message}: {reason}"
        if available:
            listing = ", ".join(f'"{name}" (id: {layer_id})' for name, layer_id in available)
            message = f"{message}. Available layers: {listing}"
        elif available is not None:
            message = f"{message}. The project has no layers yet"
        location = ErrorLocation(field="layer") if ref else None
        super().__init__(message, location=location)


class KeyframeNotFoundError(ResourceNotFoundError):
    """Keyframe not found on the layer."""

    code = "KEYFRAME_NOT_FOUND"
    message = "Keyframe not found"

    def __init__(self, keyframe_id: str | None = None, layer_id: str | None = None):
        message = f"Keyframe not found: {keyframe_id}" if keyframe_id else self.message
        location = ErrorLocation(keyframe_id=keyframe_id, layer_id=layer_id) if keyframe_id else None
        super().__init__(message, location=location)


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(MotionKitError):
    """Base class for validation errors."""

    code = "VALIDATION_ERROR"
    message = "Invalid input"


class InvalidPropertyPathError(ValidationError):
    """Property path is not animatable on this layer."""

    code = "INVALID_PROPERTY_PATH"
    message = "Invalid property path"

    def __init__(self, path: str | None = None, *, reason: str | None = None):
        message = f"Invalid property path: {path}" if path else self.message
        if reason:
            message = f"{message} ({reason})"
        location = ErrorLocation(property=path) if path else None
        super().__init__(message, location=location)


class OutOfBoundsError(ValidationError):
    """Value is out of allowed bounds."""

    code = "OUT_OF_BOUNDS"
    message = "Value is out of bounds"

    def __init__(
        self,
        message: str | None = None,
        *,
        field: str | None = None,
        value: Any = None,
        min_value: Any = None,
        max_value: Any = None,
    ):
        msg = message or self.message
        if value is not None and message is None:
            label = f"{field} " if field else ""
            msg = f"Value {label}{value} is out of bounds"
            if min_value is not None and max_value is not None:
                msg += f" (allowed: {min_value} to {max_value})"
            elif min_value is not None:
                msg += f" (minimum: {min_value})"
            elif max_value is not None:
                msg += f" (maximum: {max_value})"
        location = ErrorLocation(field=field) if field else None
        super().__init__(msg, location=location)


class InvalidFieldValueError(ValidationError):
    """Field value is invalid."""

    code = "INVALID_FIELD_VALUE"
    message = "Invalid field value"

    def __init__(
        self, message: str | None = None, *, field: str | None = None, value: Any = None
    ):
        msg = message or self.message
        if message is None and field and value is not None:
            msg = f"Invalid value for field '{field}': {value}"
        location = ErrorLocation(field=field) if field else None
        super().__init__(msg, location=location)


class ValueTypeMismatchError(ValidationError):
    """Keyframe value does not match the kind of the animated property."""

    code = "VALUE_TYPE_MISMATCH"
    message = "Value type does not match property"

    def __init__(self, path: str, expected: str, value: Any):
        message = f"Property {path} expects a {expected} value, got {value!r}"
        super().__init__(message, location=ErrorLocation(property=path))


class InterpolationMismatchError(ValidationError):
    """Interpolation family cannot be used for this property."""

    code = "INTERPOLATION_MISMATCH"
    message = "Interpolation is not allowed for this property"

    def __init__(self, path: str, family: str, allowed: list[str]):
        message = (
            f"Interpolation family '{family}' cannot animate {path} "
            f"(allowed: {', '.join(allowed)})"
        )
        super().__init__(message, location=ErrorLocation(property=path))


class PropsValidationError(ValidationError):
    """Layer props failed the schema of the layer type."""

    code = "INVALID_PROPS"
    message = "Layer props are invalid"

    def __init__(self, layer_type: str, details: str):
        super().__init__(f"Invalid props for {layer_type} layer: {details}")


class InvalidLayerTypeError(ValidationError):
    """Layer type is not registered."""

    code = "INVALID_LAYER_TYPE"
    message = "Invalid layer type"

    def __init__(self, layer_type: str | None = None, available: list[str] | None = None):
        message = f"Unknown layer type: {layer_type}" if layer_type else self.message
        if available:
            message += f". Available types: {', '.join(available)}"
        super().__init__(message, location=ErrorLocation(field="type"))


class NotAGroupError(ValidationError):
    """Referenced layer must be a group."""

    code = "NOT_A_GROUP"
    message = "Layer is not a group"

    def __init__(self, layer_id: str | None = None, name: str | None = None):
        message = f'Layer "{name or layer_id}" is not a group' if layer_id else self.message
        location = ErrorLocation(layer_id=layer_id) if layer_id else None
        super().__init__(message, location=location)


class DuplicateKeyframeTimeError(ValidationError):
    """Another keyframe of the same property already sits at this time."""

    code = "DUPLICATE_KEYFRAME_TIME"
    message = "A keyframe already exists at this time"

    def __init__(self, path: str, time: float, keyframe_id: str | None = None):
        message = f"Keyframe {keyframe_id} already animates {path} at {time}s"
        super().__init__(
            message,
            location=ErrorLocation(property=path, keyframe_id=keyframe_id),
        )


class PositionalAliasNotAllowedError(ValidationError):
    """Positional aliases are only meaningful inside a chat turn."""

    code = "POSITIONAL_ALIAS_NOT_ALLOWED"
    message = "Positional layer aliases are not supported here"

    def __init__(self, ref: str):
        super().__init__(
            f'Positional alias "{ref}" is not supported on this endpoint; '
            "reference layers by id or name",
            location=ErrorLocation(field="layer"),
        )


class TooManyLayersError(ValidationError):
    """Too many layers in project."""

    code = "TOO_MANY_LAYERS"
    message = "Too many layers in project"

    def __init__(self, count: int | None = None, max_count: int | None = None):
        message = self.message
        if count is not None and max_count is not None:
            message = f"Too many layers ({count}) in project (max: {max_count})"
        super().__init__(message)


class UnknownToolError(ValidationError):
    """Tool name is not registered."""

    code = "UNKNOWN_TOOL"
    message = "Unknown tool"

    def __init__(self, name: str, available: list[str]):
        super().__init__(f"Unknown tool: {name}. Available tools: {', '.join(available)}")


# =============================================================================
# Boundary Errors
# =============================================================================


class AIAccessDeniedError(MotionKitError):
    """User may not start an AI session."""

    code = "AI_ACCESS_DENIED"
    message = "AI access denied"

    def __init__(self, reason: str | None = None):
        super().__init__(f"AI access denied: {reason}" if reason else self.message)


class AIProviderError(MotionKitError):
    """Chat completion provider failed."""

    code = "AI_PROVIDER_ERROR"
    message = "AI provider request failed"


class ChatSessionError(MotionKitError):
    """Unexpected failure while running a chat turn."""

    code = "CHAT_SESSION_ERROR"
    message = "Chat session failed"


class DocumentCorruptedError(MotionKitError):
    """Stored document could not be parsed as a project."""

    code = "DOCUMENT_CORRUPTED"
    message = "Project document is corrupted"


class StorageError(MotionKitError):
    """Storage error."""

    code = "STORAGE_ERROR"
    message = "Storage error"


# =============================================================================
# Programming Errors
# =============================================================================


class InvariantViolation(AssertionError):
    """A mutation produced a document that breaks a model invariant.

    Not a user error: it is raised, never returned as a tool result.
    """

    def __init__(self, message: str, *, layer_id: str | None = None):
        self.layer_id = layer_id
        super().__init__(f"Invariant violated: {message}")
