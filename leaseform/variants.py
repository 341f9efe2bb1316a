"""Step descriptors and form variants.

The rental form ships in three configurations that share one field table and
one engine. Each variant is plain data: an ordered tuple of steps, each naming
the fields it shows and the fields it requires before the wizard may move on.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from leaseform.fields import FIELD_INDEX, FIELDS


@dataclass(frozen=True)
class StepSpec:
    """One wizard step.

    Attributes:
        index: 1-based position of the step
        title: Short title shown in the progress header
        description: One-line description of the step
        fields: Field names shown on this step
        required: Field names that must be set before leaving this step
        is_review: True for the read-only review step
    """
    index: int
    title: str
    description: str
    fields: Tuple[str, ...] = ()
    required: Tuple[str, ...] = ()
    is_review: bool = False


@dataclass(frozen=True)
class FormVariant:
    """A complete form configuration.

    Attributes:
        name: Variant identifier
        steps: Ordered step descriptors, indices 1..len(steps)
    """
    name: str
    steps: Tuple[StepSpec, ...]

    def __post_init__(self):
        for position, step in enumerate(self.steps, start=1):
            if step.index != position:
                raise ValueError(
                    f"Variant '{self.name}': step '{step.title}' has index {step.index}, "
                    f"expected {position}"
                )
            unknown = [n for n in step.fields + step.required if n not in FIELD_INDEX]
            if unknown:
                raise ValueError(
                    f"Variant '{self.name}': step '{step.title}' names unknown fields: "
                    f"{', '.join(unknown)}"
                )

    @property
    def step_count(self) -> int:
        return len(self.steps)

    def step(self, index: int) -> StepSpec:
        if not 1 <= index <= self.step_count:
            raise IndexError(f"Step {index} out of range 1..{self.step_count}")
        return self.steps[index - 1]

    @property
    def submit_step(self) -> StepSpec:
        """The last step that collects input; re-validated at submission."""
        for step in reversed(self.steps):
            if not step.is_review:
                return step
        raise ValueError(f"Variant '{self.name}' has no input step")

    @property
    def required_fields(self) -> Tuple[str, ...]:
        """Every field required by any step, in step order."""
        seen: Dict[str, None] = {}
        for step in self.steps:
            for name in step.required:
                seen.setdefault(name, None)
        return tuple(seen)


# Checked by the submission pipeline regardless of variant, in this order.
SUBMISSION_REQUIRED_FIELDS: Tuple[str, ...] = (
    "firstName",
    "lastName",
    "email",
    "phone",
    "employmentStatus",
    "monthlyIncome",
    "agreement",
)

_PERSONAL_FIELDS = (
    "firstName", "lastName", "email", "phone", "dateOfBirth", "ssn", "driversLicense",
    "currentAddress", "city", "state", "zipCode", "timeAtCurrentAddress", "reasonForMoving",
)
_PERSONAL_REQUIRED = (
    "firstName", "lastName", "email", "phone", "dateOfBirth",
    "currentAddress", "city", "state", "zipCode",
)
_EMPLOYMENT_FIELDS = (
    "employmentStatus", "monthlyIncome", "employer", "employerAddress",
    "jobTitle", "employmentLength", "supervisorContact",
)
_EMPLOYMENT_REQUIRED = ("employmentStatus", "monthlyIncome")
_HISTORY_FIELDS = (
    "previousAddress", "previousLandlord", "previousLandlordPhone", "previousRent",
    "reasonForLeaving", "ref1Name", "ref1Phone", "ref1Relationship",
    "ref2Name", "ref2Phone", "ref2Relationship",
)
_ADDITIONAL_FIELDS = (
    "pets", "petDetails", "smoking", "occupants", "moveInDate",
    "fundsAtHand", "intendedLeaseTime", "declaredBankruptcy", "paymentMethod",
    "additionalInfo", "agreement",
)

_DISCLOSURES_REQUIRED = (
    "moveInDate", "fundsAtHand", "intendedLeaseTime", "declaredBankruptcy", "paymentMethod",
)

_REVIEW_DESCRIPTION = "Review your application before submitting"

SINGLE_PAGE = FormVariant(
    name="single_page",
    steps=(
        StepSpec(
            index=1,
            title="Rental Application",
            description="Complete all sections and submit",
            fields=tuple(spec.name for spec in FIELDS),
            required=_PERSONAL_REQUIRED + _EMPLOYMENT_REQUIRED + _DISCLOSURES_REQUIRED + ("agreement",),
        ),
    ),
)

FOUR_STEP = FormVariant(
    name="four_step",
    steps=(
        StepSpec(1, "Personal Info", "Basic information about you",
                 tuple(n for n in _PERSONAL_FIELDS if n != "ssn"), _PERSONAL_REQUIRED),
        StepSpec(2, "Employment", "Employment and income details",
                 _EMPLOYMENT_FIELDS[:-1], _EMPLOYMENT_REQUIRED),
        StepSpec(3, "Additional Info", "Move-in details and disclosures",
                 _ADDITIONAL_FIELDS,
                 _DISCLOSURES_REQUIRED + ("agreement",)),
        StepSpec(4, "Review", _REVIEW_DESCRIPTION, is_review=True),
    ),
)

FIVE_STEP = FormVariant(
    name="five_step",
    steps=(
        StepSpec(1, "Personal Info", "Basic information about you",
                 _PERSONAL_FIELDS, _PERSONAL_REQUIRED + ("ssn",)),
        StepSpec(2, "Employment", "Employment and income details",
                 _EMPLOYMENT_FIELDS, _EMPLOYMENT_REQUIRED),
        StepSpec(3, "Rental History", "Previous rentals and references", _HISTORY_FIELDS),
        StepSpec(4, "Additional Info", "Pets, occupants and move-in date",
                 ("pets", "petDetails", "smoking", "occupants", "moveInDate",
                  "additionalInfo", "agreement"),
                 ("agreement",)),
        StepSpec(5, "Review", _REVIEW_DESCRIPTION, is_review=True),
    ),
)

VARIANTS: Dict[str, FormVariant] = {
    variant.name: variant for variant in (SINGLE_PAGE, FOUR_STEP, FIVE_STEP)
}

DEFAULT_VARIANT = FIVE_STEP


def get_variant(name: str) -> FormVariant:
    try:
        return VARIANTS[name]
    except KeyError:
        raise ValueError(
            f"Unknown form variant '{name}'. Known variants: {', '.join(sorted(VARIANTS))}"
        ) from None


__all__ = [
    "StepSpec",
    "FormVariant",
    "SUBMISSION_REQUIRED_FIELDS",
    "SINGLE_PAGE",
    "FOUR_STEP",
    "FIVE_STEP",
    "VARIANTS",
    "DEFAULT_VARIANT",
    "get_variant",
]
