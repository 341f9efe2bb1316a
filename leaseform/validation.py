"""JSON Schema validation engine for application records.

A ValidationEngine is built from an ordered list of required field names. It
compiles them into a Draft 7 schema (non-blank strings, ``agreement`` exactly
``true``) and translates jsonschema errors into FieldError objects, reported
in the order the fields were listed. The same engine backs the wizard's
per-step gates and the pipeline's submission check.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

import jsonschema
from jsonschema import Draft7Validator

from leaseform.errors import FieldError
from leaseform.fields import get_field
from leaseform.types import FieldErrorCode, FieldKind
from leaseform.variants import SUBMISSION_REQUIRED_FIELDS

logger = logging.getLogger(__name__)

# Matches any string holding at least one non-whitespace character.
NON_BLANK_PATTERN = r"\S"


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating a record against a required-field list.

    Attributes:
        is_valid: Whether every required field is set
        errors: Field-level errors in required-field order (empty if valid)
        missing_fields: Names of required fields that are blank or unset
        invalid_fields: Names of required fields holding a value of the wrong type

    Examples:
        >>> engine = ValidationEngine(["firstName"])
        >>> engine.validate({"firstName": "Jane"}).is_valid
        True
    """
    is_valid: bool
    errors: List[FieldError]
    missing_fields: Optional[List[str]] = None
    invalid_fields: Optional[List[str]] = None

    @property
    def first_error_field(self) -> Optional[str]:
        return self.errors[0].path if self.errors else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
        }
        if self.missing_fields is not None:
            result["missingFields"] = self.missing_fields
        if self.invalid_fields is not None:
            result["invalidFields"] = self.invalid_fields
        return result


def build_schema(required_fields: Sequence[str]) -> Dict[str, Any]:
    """Compile a required-field list into a Draft 7 object schema.

    Raises:
        UnknownFieldError: If a name is not an application field
    """
    properties: Dict[str, Any] = {}
    for name in required_fields:
        spec = get_field(name)
        if spec.kind == FieldKind.BOOLEAN:
            properties[name] = {"type": "boolean", "const": True}
        else:
            properties[name] = {"type": "string", "pattern": NON_BLANK_PATTERN}
    return {
        "type": "object",
        "properties": properties,
        "required": list(required_fields),
    }


class ValidationEngine:
    """Required-field validation for application records.

    Attributes:
        required_fields: The fields checked, in reporting order
        schema: The compiled JSON Schema
        validator: The underlying jsonschema validator instance

    Examples:
        >>> engine = ValidationEngine(["firstName", "agreement"])
        >>> result = engine.validate({"firstName": "  ", "agreement": False})
        >>> [e.path for e in result.errors]
        ['firstName', 'agreement']
    """

    def __init__(self, required_fields: Sequence[str]) -> None:
        self.required_fields = tuple(required_fields)
        self.schema = build_schema(self.required_fields)
        Draft7Validator.check_schema(self.schema)
        self.validator = Draft7Validator(self.schema)

    def validate(self, record: Mapping[str, Any]) -> ValidationResult:
        """Validate a record.

        Fields whose visibility predicate does not hold for ``record`` are
        skipped. At most one error is reported per field.

        Args:
            record: The application record (or any mapping of field values)

        Returns:
            ValidationResult with errors ordered like ``required_fields``
        """
        by_field: Dict[str, FieldError] = {}
        for error in self.validator.iter_errors(dict(record)):
            field_error = self._translate_error(error)
            by_field.setdefault(field_error.path, field_error)

        field_errors: List[FieldError] = []
        for name in self.required_fields:
            if name in by_field and get_field(name).is_visible(record):
                field_errors.append(by_field[name])

        if not field_errors:
            return ValidationResult(
                is_valid=True,
                errors=[],
                missing_fields=[],
                invalid_fields=[],
            )

        logger.debug(
            "Validation failed for %d field(s): %s",
            len(field_errors),
            ", ".join(e.path for e in field_errors),
        )
        return ValidationResult(
            is_valid=False,
            errors=field_errors,
            missing_fields=[e.path for e in field_errors if e.code == FieldErrorCode.REQUIRED],
            invalid_fields=[e.path for e in field_errors if e.code != FieldErrorCode.REQUIRED],
        )

    def first_missing(self, record: Mapping[str, Any]) -> Optional[str]:
        """Name of the first required field that fails, or None."""
        return self.validate(record).first_error_field

    def _translate_error(self, error: jsonschema.ValidationError) -> FieldError:
        """Translate a jsonschema ValidationError to a FieldError.

        Error mapping:
            - 'required' property errors -> REQUIRED
            - 'pattern' errors (blank strings) -> REQUIRED
            - 'const' errors (agreement not accepted) -> REQUIRED
            - 'type' errors on None -> REQUIRED, otherwise INVALID_TYPE
            - anything else -> CUSTOM
        """
        path = ".".join(str(p) for p in error.path)

        if error.validator == "required":
            missing_prop = error.message.split("'")[1] if "'" in error.message else "field"
            return self._required(missing_prop)

        if error.validator in ("pattern", "const"):
            return self._required(path, received=error.instance)

        if error.validator == "type":
            if error.instance is None:
                return self._required(path)
            expected_type = error.validator_value
            received_type = type(error.instance).__name__
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_TYPE,
                message=f"Field '{path}' has invalid type. Expected {expected_type}, got {received_type}",
                expected=expected_type,
                received=received_type,
            )

        return FieldError(
            path=path,
            code=FieldErrorCode.CUSTOM,
            message=f"Field '{path}' validation failed: {error.message}",
            expected=error.validator_value,
            received=error.instance,
        )

    @staticmethod
    def _required(path: str, received: Any = None) -> FieldError:
        if get_field(path).kind == FieldKind.BOOLEAN:
            message = f"Field '{path}' must be accepted"
            expected: Any = True
        else:
            message = f"Field '{path}' is required but was not provided"
            expected = "required field"
        return FieldError(
            path=path,
            code=FieldErrorCode.REQUIRED,
            message=message,
            expected=expected,
            received=received,
        )


_submission_engine = ValidationEngine(SUBMISSION_REQUIRED_FIELDS)


def validate_required_fields(record: Mapping[str, Any]) -> Optional[str]:
    """Return the first unset submission-required field, or None if all are set."""
    return _submission_engine.first_missing(record)


__all__ = [
    "ValidationEngine",
    "ValidationResult",
    "build_schema",
    "validate_required_fields",
]
