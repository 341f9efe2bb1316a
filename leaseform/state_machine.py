"""Wizard state machine.

Tracks the two pieces of wizard state: the 1-based step index, bounded to
``[1, step_count]``, and the submission phase. Step moves are clamped; phase
changes follow VALID_TRANSITIONS and anything else raises
InvalidStateTransitionError. Every change is recorded as a WizardEvent and
forwarded to an optional EventEmitter.

Usage:
    >>> from leaseform.state_machine import WizardStateMachine
    >>> sm = WizardStateMachine(wizard_id="wiz_123", step_count=3)
    >>> sm.advance_step()
    True
    >>> sm.current_step
    2
    >>> sm.transition_to(WizardPhase.SUBMITTED)
    Traceback (most recent call last):
    ...
    leaseform.state_machine.InvalidStateTransitionError: Invalid state transition: cannot transition from 'editing' to 'submitted'. Valid transitions from 'editing' are: submitting
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from leaseform.events import EventEmitter, Notification, WizardEvent
from leaseform.types import EventType, WizardPhase


class InvalidStateTransitionError(Exception):
    """Raised when attempting an invalid phase transition.

    Attributes:
        current_state: The phase before the attempted transition
        target_state: The phase that was attempted
    """

    def __init__(self, current_state: WizardPhase, target_state: WizardPhase, message: str):
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(message)


# Maps each phase to the set of phases it can transition to
VALID_TRANSITIONS: Dict[WizardPhase, Set[WizardPhase]] = {
    WizardPhase.EDITING: {WizardPhase.SUBMITTING},
    WizardPhase.SUBMITTING: {WizardPhase.EDITING, WizardPhase.SUBMITTED},
    WizardPhase.SUBMITTED: {WizardPhase.EDITING},
}


@dataclass
class WizardStateMachine:
    """Step index and submission phase of one wizard.

    Attributes:
        wizard_id: Identifier stamped on every event
        step_count: Number of steps; the index never leaves ``[1, step_count]``
        current_step: 1-based current step
        phase: Current submission phase
        emitter: Optional emitter that receives every recorded event
    """

    wizard_id: str
    step_count: int
    current_step: int = 1
    phase: WizardPhase = WizardPhase.EDITING
    emitter: Optional[EventEmitter] = field(default=None, repr=False)
    _events: List[WizardEvent] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        if self.step_count < 1:
            raise ValueError("A wizard needs at least one step")
        self.current_step = min(max(self.current_step, 1), self.step_count)

    @property
    def is_first_step(self) -> bool:
        return self.current_step == 1

    @property
    def is_last_step(self) -> bool:
        return self.current_step == self.step_count

    @property
    def submitting(self) -> bool:
        return self.phase == WizardPhase.SUBMITTING

    def advance_step(self) -> bool:
        """Move forward one step; returns False (no change) on the last step."""
        if self.is_last_step:
            return False
        previous = self.current_step
        self.current_step += 1
        self.record_event(EventType.STEP_ADVANCED, {"from_step": previous, "to_step": self.current_step})
        return True

    def retreat_step(self) -> bool:
        """Move back one step; returns False (no change) on step 1."""
        if self.is_first_step:
            return False
        previous = self.current_step
        self.current_step -= 1
        self.record_event(EventType.STEP_RETREATED, {"from_step": previous, "to_step": self.current_step})
        return True

    def can_transition_to(self, target_state: WizardPhase) -> bool:
        return target_state in VALID_TRANSITIONS.get(self.phase, set())

    def transition_to(self, target_state: WizardPhase) -> None:
        """Change phase.

        Raises:
            InvalidStateTransitionError: If the transition is not allowed
        """
        if not self.can_transition_to(target_state):
            raise InvalidStateTransitionError(
                current_state=self.phase,
                target_state=target_state,
                message=(
                    f"Invalid state transition: cannot transition from "
                    f"'{self.phase.value}' to '{target_state.value}'. "
                    f"Valid transitions from '{self.phase.value}' are: "
                    f"{', '.join(sorted(s.value for s in VALID_TRANSITIONS[self.phase]))}"
                ),
            )
        self.phase = target_state

    def reset(self) -> None:
        """Return to step 1 in the editing phase."""
        if self.phase != WizardPhase.EDITING:
            self.transition_to(WizardPhase.EDITING)
        self.current_step = 1
        self.record_event(EventType.WIZARD_RESET)

    def record_event(
        self,
        event_type: EventType,
        payload: Optional[Dict[str, Any]] = None,
        notification: Optional[Notification] = None,
    ) -> WizardEvent:
        """Append an event stamped with the current step and phase, then emit it."""
        event = WizardEvent(
            event_id=f"evt_{uuid.uuid4().hex[:16]}",
            type=event_type,
            wizard_id=self.wizard_id,
            ts=datetime.now(timezone.utc),
            step=self.current_step,
            phase=self.phase,
            payload=payload,
            notification=notification,
        )
        self._events.append(event)
        if self.emitter is not None:
            self.emitter.emit(event)
        return event

    def get_events(self) -> List[WizardEvent]:
        """All recorded events in chronological order."""
        return list(self._events)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the navigation state.

        Examples:
            >>> WizardStateMachine(wizard_id="wiz_1", step_count=4, current_step=2).to_dict()
            {'wizardId': 'wiz_1', 'stepCount': 4, 'currentStep': 2, 'phase': 'editing'}
        """
        return {
            "wizardId": self.wizard_id,
            "stepCount": self.step_count,
            "currentStep": self.current_step,
            "phase": self.phase.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WizardStateMachine":
        return cls(
            wizard_id=data["wizardId"],
            step_count=data["stepCount"],
            current_step=data["currentStep"],
            phase=WizardPhase(data["phase"]),
        )


__all__ = [
    "WizardStateMachine",
    "InvalidStateTransitionError",
    "VALID_TRANSITIONS",
]
