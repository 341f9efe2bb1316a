"""Core type definitions for the leaseform rental application engine.

This module defines the enums shared by the wizard, the validation engine and
the submission pipeline:
- WizardPhase: Editing / submitting / submitted phases of a wizard
- FieldKind: How a record field is stored and rendered
- FieldGroup: Logical cluster a field belongs to
- ErrorType: Categories of submission failures
- FieldErrorCode: Validation error codes for individual fields
- EventType: Wizard event types for the event stream
- NotificationVariant: Presentation hint for user-facing notifications
"""

from enum import Enum


class WizardPhase(str, Enum):
    """Submission phase of a wizard, orthogonal to its step index.

    ``SUBMITTING`` is the submission-in-progress flag. ``SUBMITTED`` is only
    held briefly before the wizard resets itself back to ``EDITING``.
    """
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


class FieldKind(str, Enum):
    """Storage and rendering kind of an application field."""
    TEXT = "text"
    DATE = "date"
    MONEY = "money"
    BOOLEAN = "boolean"


class FieldGroup(str, Enum):
    """Logical field clusters of an application record."""
    IDENTITY = "identity"
    ADDRESS = "address"
    EMPLOYMENT = "employment"
    RENTAL_HISTORY = "rental_history"
    REFERENCES = "references"
    ADDITIONAL = "additional"
    AGREEMENT = "agreement"


class ErrorType(str, Enum):
    """Error categories reported by the submission pipeline.

    Every failure of ``submit_application`` carries exactly one of these.
    """
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    CONNECTIVITY = "connectivity"
    DISPATCH = "dispatch"
    UNEXPECTED = "unexpected"


class FieldErrorCode(str, Enum):
    """Validation error codes for individual field failures."""
    REQUIRED = "required"
    INVALID_TYPE = "invalid_type"
    CUSTOM = "custom"


class EventType(str, Enum):
    """Wizard event types.

    Every navigation attempt, field edit and submission outcome emits a typed
    event on the wizard's event stream.
    """
    FIELD_UPDATED = "field.updated"
    STEP_ADVANCED = "step.advanced"
    STEP_RETREATED = "step.retreated"
    VALIDATION_FAILED = "validation.failed"
    SUBMISSION_STARTED = "submission.started"
    SUBMISSION_SUCCEEDED = "submission.succeeded"
    SUBMISSION_FAILED = "submission.failed"
    WIZARD_RESET = "wizard.reset"


class NotificationVariant(str, Enum):
    """Presentation hint for a notification."""
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


__all__ = [
    "WizardPhase",
    "FieldKind",
    "FieldGroup",
    "ErrorType",
    "FieldErrorCode",
    "EventType",
    "NotificationVariant",
]
