"""Field table and record helpers for the rental application.

An application record is a flat ``dict`` keyed by the form's field names.
Every field is a string except ``agreement``, which is a bool. The table below
is the single source of truth for labels, groups, fallbacks and visibility;
variants, validation and formatting all read from it.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from leaseform.errors import UnknownFieldError
from leaseform.types import FieldGroup, FieldKind


NOT_PROVIDED = "Not provided"
NOT_SPECIFIED = "Not specified"


@dataclass(frozen=True)
class FieldSpec:
    """Static description of one application field.

    Attributes:
        name: Record key
        label: Human-readable label used in the review and the email
        group: Logical cluster the field belongs to
        kind: Storage/rendering kind
        fallback: Text rendered when the field is empty
        visible_when: Optional ``(field, value)`` pair; the field is only shown
            (and validated) when the record holds that value for that field
    """
    name: str
    label: str
    group: FieldGroup
    kind: FieldKind = FieldKind.TEXT
    fallback: str = NOT_PROVIDED
    visible_when: Optional[Tuple[str, str]] = None

    def is_visible(self, record: Mapping[str, Any]) -> bool:
        if self.visible_when is None:
            return True
        other, expected = self.visible_when
        return record.get(other) == expected

    def empty_value(self) -> Any:
        return False if self.kind == FieldKind.BOOLEAN else ""


_I = FieldGroup.IDENTITY
_A = FieldGroup.ADDRESS
_E = FieldGroup.EMPLOYMENT
_H = FieldGroup.RENTAL_HISTORY
_R = FieldGroup.REFERENCES
_X = FieldGroup.ADDITIONAL

FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("firstName", "First Name", _I),
    FieldSpec("lastName", "Last Name", _I),
    FieldSpec("email", "Email", _I),
    FieldSpec("phone", "Phone", _I),
    FieldSpec("dateOfBirth", "Date of Birth", _I, FieldKind.DATE),
    FieldSpec("ssn", "SSN", _I),
    FieldSpec("driversLicense", "Driver's License", _I),
    FieldSpec("currentAddress", "Current Address", _A),
    FieldSpec("city", "City", _A),
    FieldSpec("state", "State", _A),
    FieldSpec("zipCode", "ZIP Code", _A),
    FieldSpec("timeAtCurrentAddress", "Time at Current Address", _A),
    FieldSpec("reasonForMoving", "Reason for Moving", _A),
    FieldSpec("employmentStatus", "Employment Status", _E),
    FieldSpec("monthlyIncome", "Monthly Income", _E, FieldKind.MONEY),
    FieldSpec("employer", "Employer", _E),
    FieldSpec("employerAddress", "Employer Address", _E),
    FieldSpec("jobTitle", "Job Title", _E),
    FieldSpec("employmentLength", "Employment Length", _E),
    FieldSpec("supervisorContact", "Supervisor Contact", _E),
    FieldSpec("previousAddress", "Previous Address", _H),
    FieldSpec("previousLandlord", "Previous Landlord", _H),
    FieldSpec("previousLandlordPhone", "Previous Landlord Phone", _H),
    FieldSpec("previousRent", "Previous Rent", _H, FieldKind.MONEY),
    FieldSpec("reasonForLeaving", "Reason for Leaving", _H),
    FieldSpec("ref1Name", "Reference 1 Name", _R),
    FieldSpec("ref1Phone", "Reference 1 Phone", _R, fallback="No phone"),
    FieldSpec("ref1Relationship", "Reference 1 Relationship", _R, fallback="No relationship specified"),
    FieldSpec("ref2Name", "Reference 2 Name", _R),
    FieldSpec("ref2Phone", "Reference 2 Phone", _R, fallback="No phone"),
    FieldSpec("ref2Relationship", "Reference 2 Relationship", _R, fallback="No relationship specified"),
    FieldSpec("pets", "Pets", _X, fallback=NOT_SPECIFIED),
    FieldSpec("petDetails", "Pet Details", _X, fallback="None", visible_when=("pets", "yes")),
    FieldSpec("smoking", "Smoking", _X, fallback=NOT_SPECIFIED),
    FieldSpec("occupants", "Number of Occupants", _X),
    FieldSpec("moveInDate", "Desired Move-in Date", _X, FieldKind.DATE),
    FieldSpec("fundsAtHand", "Funds at Hand", _X, FieldKind.MONEY),
    FieldSpec("intendedLeaseTime", "Intended Lease Length", _X),
    FieldSpec("declaredBankruptcy", "Declared Bankruptcy", _X, fallback=NOT_SPECIFIED),
    FieldSpec("paymentMethod", "Payment Method", _X),
    FieldSpec("additionalInfo", "Additional Comments", _X),
    FieldSpec("agreement", "Agreement", FieldGroup.AGREEMENT, FieldKind.BOOLEAN),
)

FIELD_INDEX: Dict[str, FieldSpec] = {spec.name: spec for spec in FIELDS}


def get_field(name: str) -> FieldSpec:
    try:
        return FIELD_INDEX[name]
    except KeyError:
        raise UnknownFieldError([name]) from None


def new_record() -> Dict[str, Any]:
    """Return an application record with every field empty and agreement False."""
    return {spec.name: spec.empty_value() for spec in FIELDS}


def merge_record(record: Dict[str, Any], changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``changes`` into ``record`` in place and return it.

    Fields are only ever overwritten, never removed. If any name is unknown the
    record is left untouched.

    Raises:
        UnknownFieldError: If ``changes`` names a field the form does not have
    """
    unknown = [name for name in changes if name not in FIELD_INDEX]
    if unknown:
        raise UnknownFieldError(unknown)
    record.update(changes)
    return record


def is_blank(value: Any) -> bool:
    """True for None and for strings that are empty after stripping."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


__all__ = [
    "FieldSpec",
    "FIELDS",
    "FIELD_INDEX",
    "NOT_PROVIDED",
    "NOT_SPECIFIED",
    "get_field",
    "new_record",
    "merge_record",
    "is_blank",
]
