"""Structured error types and result objects for leaseform.

This module defines:
- FieldError: a single per-field validation failure
- LeaseformError and its subclasses: the typed failures raised inside the
  submission pipeline
- SubmissionResult: the discriminated result every submission returns

The pipeline raises the exceptions internally and converts them into a
SubmissionResult at its outer boundary, so callers (the wizard included) only
ever handle result values.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from leaseform.types import ErrorType, FieldErrorCode


CONFIGURATION_MESSAGE = "Email configuration missing. Please set up mailbox credentials."
UNEXPECTED_MESSAGE = "Submission failed: an unexpected error occurred. Please try again."


@dataclass(frozen=True)
class FieldError:
    """Per-field validation error details.

    Attributes:
        path: Record field name (e.g., "firstName", "agreement")
        code: Specific validation error code
        message: Human-readable error description
        expected: Optional - what was expected
        received: Optional - what was actually received

    Examples:
        >>> err = FieldError(
        ...     path="email",
        ...     code=FieldErrorCode.REQUIRED,
        ...     message="Field 'email' is required but was not provided",
        ... )
        >>> err.path
        'email'
    """
    path: str
    code: FieldErrorCode
    message: str
    expected: Optional[Any] = None
    received: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "path": self.path,
            "code": self.code.value if isinstance(self.code, FieldErrorCode) else self.code,
            "message": self.message,
        }
        if self.expected is not None:
            result["expected"] = self.expected
        if self.received is not None:
            result["received"] = self.received
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldError":
        """Create FieldError from dict."""
        code = data["code"]
        if isinstance(code, str):
            code = FieldErrorCode(code)
        return cls(
            path=data["path"],
            code=code,
            message=data["message"],
            expected=data.get("expected"),
            received=data.get("received"),
        )


class LeaseformError(Exception):
    """Base class for submission pipeline failures.

    Attributes:
        error_type: Category used when the error becomes a SubmissionResult
        message: User-facing description
    """

    error_type: ErrorType = ErrorType.UNEXPECTED

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(LeaseformError):
    """Mailbox identity or credential is absent."""

    error_type = ErrorType.CONFIGURATION

    def __init__(self, missing_keys: Sequence[str], message: str = CONFIGURATION_MESSAGE):
        self.missing_keys = tuple(missing_keys)
        super().__init__(message)


class RequiredFieldError(LeaseformError):
    """A required field is blank, or the agreement was not accepted."""

    error_type = ErrorType.VALIDATION

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Missing required field: {field_name}")


class ConnectivityError(LeaseformError):
    """The mail service could not be reached or rejected the login."""

    error_type = ErrorType.CONNECTIVITY

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Email setup error: {reason}")


class DispatchError(LeaseformError):
    """The mail service accepted the connection but the send failed."""

    error_type = ErrorType.DISPATCH

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Submission failed: {reason}")


class UnknownFieldError(ValueError):
    """Raised when a record update names a field the form does not have."""

    def __init__(self, names: Sequence[str]):
        self.names = tuple(names)
        super().__init__(f"Unknown application field(s): {', '.join(self.names)}")


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of a submission attempt.

    Attributes:
        success: Whether the application was handed to the mail service
        error: Human-readable failure reason (failures only)
        error_type: Failure category (failures only)
        message_id: Identifier returned by the mail service (successes only)

    Examples:
        >>> SubmissionResult.succeeded().to_dict()
        {'success': True}
        >>> SubmissionResult.failed(ErrorType.VALIDATION, "Missing required field: email").to_dict()
        {'success': False, 'error': 'Missing required field: email'}
    """
    success: bool
    error: Optional[str] = None
    error_type: Optional[ErrorType] = None
    message_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        """Alias of ``success``."""
        return self.success

    @classmethod
    def succeeded(cls, message_id: Optional[str] = None) -> "SubmissionResult":
        return cls(success=True, message_id=message_id)

    @classmethod
    def failed(cls, error_type: ErrorType, error: str) -> "SubmissionResult":
        return cls(success=False, error=error, error_type=error_type)

    @classmethod
    def from_error(cls, exc: LeaseformError) -> "SubmissionResult":
        """Convert a pipeline exception into a failure result."""
        return cls.failed(exc.error_type, exc.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire shape ``{success, error?}``."""
        if self.success:
            return {"success": True}
        return {"success": False, "error": self.error}


__all__ = [
    "FieldError",
    "LeaseformError",
    "ConfigurationError",
    "RequiredFieldError",
    "ConnectivityError",
    "DispatchError",
    "UnknownFieldError",
    "SubmissionResult",
    "CONFIGURATION_MESSAGE",
    "UNEXPECTED_MESSAGE",
]
