"""Multi-step form wizard for rental applications.

A FormWizard owns one application record and one WizardStateMachine. Field
edits merge into the record without validating; validation only runs when
the applicant tries to move forward or submit. Submission hands a copy of the
record to a SubmissionPipeline and, on success, clears the form.

Usage:
    >>> from leaseform.variants import SINGLE_PAGE
    >>> wizard = FormWizard(variant=SINGLE_PAGE, pipeline=None)
    >>> wizard.update(firstName="Jane")
    >>> wizard.record["firstName"]
    'Jane'
    >>> wizard.current_step
    1
"""

import copy
import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional

from leaseform.errors import SubmissionResult
from leaseform.events import EventEmitter, Notification, WizardEvent
from leaseform.fields import FIELD_INDEX, merge_record, new_record
from leaseform.formatting import Section, review_sections
from leaseform.pipeline import SubmissionPipeline
from leaseform.state_machine import InvalidStateTransitionError, WizardStateMachine
from leaseform.types import ErrorType, EventType, NotificationVariant, WizardPhase
from leaseform.validation import ValidationEngine, ValidationResult
from leaseform.variants import DEFAULT_VARIANT, FormVariant, StepSpec

logger = logging.getLogger(__name__)


def _incomplete_notification() -> Notification:
    return Notification(
        title="Please complete all required fields",
        description="Fill in all required fields and agree to the terms before continuing.",
        variant=NotificationVariant.DESTRUCTIVE,
    )


def _success_notification() -> Notification:
    return Notification(
        title="Application Submitted Successfully!",
        description="We've received your rental application and will review it shortly.",
    )


def _failure_notification(error: Optional[str]) -> Notification:
    return Notification(
        title="Submission Failed",
        description=error or "Please try again or contact us for assistance.",
        variant=NotificationVariant.DESTRUCTIVE,
    )


def _unexpected_notification() -> Notification:
    return Notification(
        title="Something went wrong",
        description="Please check your connection and try again.",
        variant=NotificationVariant.DESTRUCTIVE,
    )


class FormWizard:
    """Step-by-step rental application form.

    Attributes:
        wizard_id: Identifier stamped on this wizard's events
        variant: The form configuration in use
        record: The in-progress application record
        emitter: Event emitter; subscribe to observe navigation and submissions

    Args:
        variant: Form configuration; defaults to the five-step form
        pipeline: Submission pipeline; required before ``submit`` is called
        wizard_id: Optional explicit identifier
        emitter: Optional shared emitter
    """

    def __init__(
        self,
        variant: FormVariant = DEFAULT_VARIANT,
        pipeline: Optional[SubmissionPipeline] = None,
        wizard_id: Optional[str] = None,
        emitter: Optional[EventEmitter] = None,
    ):
        self.wizard_id = wizard_id or f"wiz_{uuid.uuid4().hex[:16]}"
        self.variant = variant
        self.pipeline = pipeline
        self.record: Dict[str, Any] = new_record()
        self.emitter = emitter or EventEmitter()
        self._machine = WizardStateMachine(
            wizard_id=self.wizard_id,
            step_count=variant.step_count,
            emitter=self.emitter,
        )
        self._engines: Dict[int, ValidationEngine] = {
            step.index: ValidationEngine(step.required) for step in variant.steps
        }
        self._notifications: List[Notification] = []

    # -- state -------------------------------------------------------------

    @property
    def current_step(self) -> int:
        return self._machine.current_step

    @property
    def step(self) -> StepSpec:
        return self.variant.step(self.current_step)

    @property
    def step_count(self) -> int:
        return self.variant.step_count

    @property
    def is_last_step(self) -> bool:
        return self._machine.is_last_step

    @property
    def phase(self) -> WizardPhase:
        return self._machine.phase

    @property
    def submitting(self) -> bool:
        return self._machine.submitting

    @property
    def notifications(self) -> List[Notification]:
        """Notifications not yet dismissed, oldest first."""
        return list(self._notifications)

    def dismiss(self, notification_id: str) -> bool:
        for notification in self._notifications:
            if notification.notification_id == notification_id:
                self._notifications.remove(notification)
                return True
        return False

    def get_events(self) -> List[WizardEvent]:
        return self._machine.get_events()

    def to_dict(self) -> Dict[str, Any]:
        data = self._machine.to_dict()
        data["variant"] = self.variant.name
        data["record"] = dict(self.record)
        return data

    # -- editing -----------------------------------------------------------

    def update_fields(self, changes: Mapping[str, Any]) -> None:
        """Merge field values into the record.

        Raises:
            UnknownFieldError: If a name is not an application field
        """
        merge_record(self.record, changes)
        self._machine.record_event(EventType.FIELD_UPDATED, {"fields": sorted(changes)})

    def update(self, **changes: Any) -> None:
        self.update_fields(changes)

    def visible_fields(self, step: Optional[int] = None) -> List[str]:
        """Fields of ``step`` (default: current) shown for the current record."""
        spec = self.variant.step(step or self.current_step)
        return [name for name in spec.fields if FIELD_INDEX[name].is_visible(self.record)]

    def review(self) -> List[Section]:
        """Sections shown on the review step."""
        return review_sections(self.record)

    # -- navigation --------------------------------------------------------

    def validate_step(self, step: Optional[int] = None) -> ValidationResult:
        """Run the required-field check of ``step`` (default: current)."""
        return self._engines[step or self.current_step].validate(self.record)

    def _reject(self, result: ValidationResult) -> None:
        notification = _incomplete_notification()
        self._notifications.append(notification)
        self._machine.record_event(
            EventType.VALIDATION_FAILED,
            {"missing_fields": [e.path for e in result.errors]},
            notification,
        )

    def advance(self) -> bool:
        """Move to the next step if the current one is complete.

        On the last step this submits instead and the index does not move.

        Returns:
            True if the step index changed
        """
        if self.is_last_step:
            self.submit()
            return False
        result = self.validate_step()
        if not result.is_valid:
            self._reject(result)
            return False
        return self._machine.advance_step()

    def retreat(self) -> bool:
        """Move to the previous step without validating.

        Returns:
            True if the step index changed
        """
        return self._machine.retreat_step()

    # -- submission --------------------------------------------------------

    def submit(self) -> SubmissionResult:
        """Submit the application from the last step.

        Re-checks the last input step, then runs the submission pipeline. On
        success the record and step index are reset; on failure both are left
        as they were.

        Raises:
            InvalidStateTransitionError: If called before the last step, or
                while a submission is already in progress
            RuntimeError: If the wizard has no pipeline
        """
        if not self.is_last_step:
            raise InvalidStateTransitionError(
                current_state=self.phase,
                target_state=WizardPhase.SUBMITTING,
                message=(
                    f"Cannot submit from step {self.current_step}; "
                    f"submission is only available on step {self.step_count}"
                ),
            )
        if self.submitting:
            raise InvalidStateTransitionError(
                current_state=self.phase,
                target_state=WizardPhase.SUBMITTING,
                message="A submission is already in progress",
            )
        if self.pipeline is None:
            raise RuntimeError("FormWizard.submit() requires a SubmissionPipeline")

        result = self.validate_step(self.variant.submit_step.index)
        if not result.is_valid:
            self._reject(result)
            return SubmissionResult.failed(
                ErrorType.VALIDATION, f"Missing required field: {result.first_error_field}"
            )

        self._machine.transition_to(WizardPhase.SUBMITTING)
        self._machine.record_event(EventType.SUBMISSION_STARTED)
        try:
            outcome = self.pipeline.submit_application(copy.deepcopy(self.record))
        except Exception:
            logger.exception("Submission pipeline raised for wizard %s", self.wizard_id)
            outcome = None
        except BaseException:
            # Interrupts propagate, but the wizard must not stay locked in submitting.
            self._machine.transition_to(WizardPhase.EDITING)
            raise

        if outcome is not None and outcome.success:
            self._machine.transition_to(WizardPhase.SUBMITTED)
            notification = _success_notification()
            self._notifications.append(notification)
            self._machine.record_event(EventType.SUBMISSION_SUCCEEDED, None, notification)
            self.record = new_record()
            self._machine.reset()
            return outcome

        self._machine.transition_to(WizardPhase.EDITING)
        if outcome is None:
            notification = _unexpected_notification()
            outcome = SubmissionResult.failed(ErrorType.UNEXPECTED, notification.description)
        else:
            notification = _failure_notification(outcome.error)
        self._notifications.append(notification)
        self._machine.record_event(
            EventType.SUBMISSION_FAILED,
            {"error": outcome.error, "error_type": outcome.error_type.value if outcome.error_type else None},
            notification,
        )
        return outcome


__all__ = [
    "FormWizard",
]
