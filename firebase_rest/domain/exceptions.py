"""Domain exceptions for the firebase_rest library.

Fatal exceptions describe a caller/schema mismatch (unknown field path,
unconstructible model, model type mismatch) and always propagate out of a
parse or write call. ValueDecodeError is the only soft failure: it is raised
for a single field and absorbed by the enclosing field loop.
"""

from typing import Any


class FirebaseException(Exception):
    """Base exception for all firebase_rest errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. type, segment, path).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class InvalidArgumentException(FirebaseException):
    """Raised when an operation is called with missing or inconsistent arguments."""

    def __init__(self, message: str, argument: str | None = None) -> None:
        """Initialize with message and optional argument name.

        Args:
            message: Description of the problem.
            argument: Optional name of the offending argument.
        """
        details = {"argument": argument} if argument else {}
        super().__init__(message, "INVALID_ARGUMENT", details)


class FieldPathException(FirebaseException):
    """Raised when a dotted member path cannot be resolved against a model type."""

    def __init__(self, model_type: Any, segment: str, reason: str | None = None) -> None:
        """Initialize with the type in context and the segment that failed.

        Args:
            model_type: Type the segment was looked up on.
            segment: The path segment that did not resolve.
            reason: Optional override for the default message.
        """
        type_name = getattr(model_type, "__qualname__", repr(model_type))
        message = reason or f'"{type_name}" does not have a writable member "{segment}"'
        super().__init__(
            message,
            "FIELD_PATH_ERROR",
            {"type": type_name, "segment": segment},
        )


class ModelConstructionException(FirebaseException):
    """Raised when a model type cannot be instantiated without arguments."""

    def __init__(self, model_type: Any, reason: str | None = None) -> None:
        type_name = getattr(model_type, "__qualname__", repr(model_type))
        details: dict[str, Any] = {"type": type_name}
        if reason:
            details["reason"] = reason
        super().__init__(
            f'"{type_name}" has no usable no-argument constructor',
            "MODEL_CONSTRUCTION_ERROR",
            details,
        )


class DocumentTypeMismatchException(FirebaseException):
    """Raised when a document is re-parsed or assigned with a different model type."""

    def __init__(self, expected: Any, actual: Any) -> None:
        expected_name = getattr(expected, "__qualname__", repr(expected))
        actual_name = getattr(actual, "__qualname__", repr(actual))
        super().__init__(
            f"Mismatch type of document model: expected {expected_name}, got {actual_name}",
            "DOCUMENT_TYPE_MISMATCH",
            {"expected": expected_name, "actual": actual_name},
        )


class UnsupportedTransformException(FirebaseException):
    """Raised when a field transform operand has no usable wire representation."""

    def __init__(self, message: str, operand_type: Any = None) -> None:
        details: dict[str, Any] = {}
        if operand_type is not None:
            details["operand_type"] = getattr(operand_type, "__qualname__", repr(operand_type))
        super().__init__(message, "UNSUPPORTED_TRANSFORM", details)


class ValueDecodeError(FirebaseException):
    """A single typed value could not be converted to its target type.

    Soft failure: the field loop that called the codec discards it and
    leaves the member at its current value.
    """

    def __init__(self, tag: str, target: Any, reason: str) -> None:
        target_name = getattr(target, "__qualname__", repr(target))
        super().__init__(
            f"Cannot convert {tag} to {target_name}: {reason}",
            "VALUE_DECODE_ERROR",
            {"tag": tag, "target": target_name},
        )
