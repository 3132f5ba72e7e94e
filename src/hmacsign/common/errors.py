"""Shared error types and codes."""

from __future__ import annotations

from typing import Any


class ErrorCode:
    MISSING_PARAMETER = "missing_parameter"
    INVALID_PARAMETER = "invalid_parameter"
    SIGNING_FAILED = "signing_failed"


class SigningError(Exception):
    """Base error for a signing call, carrying the echoed inputs."""

    code = ErrorCode.SIGNING_FAILED

    def __init__(self, message: str, inputs: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.inputs = dict(inputs or {})


class MissingParameterError(SigningError):
    """A mandatory parameter was null or empty."""

    code = ErrorCode.MISSING_PARAMETER

    def __init__(self, field: str, inputs: dict[str, Any] | None = None) -> None:
        super().__init__(f"Mandatory parameter '{field}' not set.", inputs)
        self.field = field


class InvalidParameterError(SigningError):
    """A parameter was present but unusable."""

    code = ErrorCode.INVALID_PARAMETER

    def __init__(self, field: str, reason: str, inputs: dict[str, Any] | None = None) -> None:
        super().__init__(f"Invalid parameter '{field}': {reason}", inputs)
        self.field = field
        self.reason = reason


class SigningFailureError(SigningError):
    """The keyed hash did not produce a usable signature."""

    code = ErrorCode.SIGNING_FAILED


def error_payload(exc: SigningError) -> dict[str, Any]:
    """Render a signing error in the JSON error envelope."""
    payload: dict[str, Any] = {
        "error": {
            "code": exc.code,
            "message": exc.message,
        }
    }
    details: dict[str, Any] = {}
    field = getattr(exc, "field", None)
    if field:
        details["field"] = field
    if exc.inputs:
        details["inputs"] = exc.inputs
    if details:
        payload["error"]["details"] = details
    return payload
