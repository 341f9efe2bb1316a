"""Unit tests for the wizard state machine.

Tests cover:
- Step index bounds and clamping
- Valid and invalid phase transitions
- Reset behavior
- Event recording and serialization
"""

import pytest

from leaseform.events import EventEmitter
from leaseform.state_machine import (
    InvalidStateTransitionError,
    VALID_TRANSITIONS,
    WizardStateMachine,
)
from leaseform.types import EventType, WizardPhase


class TestInitialization:
    """Test state machine initialization and defaults."""

    def test_defaults(self):
        sm = WizardStateMachine(wizard_id="wiz_1", step_count=5)
        assert sm.current_step == 1
        assert sm.phase == WizardPhase.EDITING
        assert sm.submitting is False
        assert sm.get_events() == []

    def test_initial_step_clamped(self):
        assert WizardStateMachine(wizard_id="wiz_1", step_count=3, current_step=9).current_step == 3
        assert WizardStateMachine(wizard_id="wiz_1", step_count=3, current_step=0).current_step == 1

    def test_zero_steps_rejected(self):
        with pytest.raises(ValueError):
            WizardStateMachine(wizard_id="wiz_1", step_count=0)


class TestStepNavigation:
    """Test step moves."""

    def test_advance_increments(self):
        sm = WizardStateMachine(wizard_id="wiz_1", step_count=3)
        assert sm.advance_step() is True
        assert sm.current_step == 2

    def test_advance_clamped_at_last(self):
        sm = WizardStateMachine(wizard_id="wiz_1", step_count=2, current_step=2)
        assert sm.advance_step() is False
        assert sm.current_step == 2

    def test_retreat_decrements(self):
        sm = WizardStateMachine(wizard_id="wiz_1", step_count=3, current_step=3)
        assert sm.retreat_step() is True
        assert sm.current_step == 2

    def test_retreat_clamped_at_first(self):
        sm = WizardStateMachine(wizard_id="wiz_1", step_count=3)
        assert sm.retreat_step() is False
        assert sm.current_step == 1
        assert sm.get_events() == []

    def test_single_step_is_first_and_last(self):
        sm = WizardStateMachine(wizard_id="wiz_1", step_count=1)
        assert sm.is_first_step and sm.is_last_step


class TestPhaseTransitions:
    """Test phase transitions against VALID_TRANSITIONS."""

    @pytest.mark.parametrize(
        "source,target",
        [(s, t) for s, targets in VALID_TRANSITIONS.items() for t in targets],
    )
    def test_valid_transitions(self, source, target):
        sm = WizardStateMachine(wizard_id="wiz_1", step_count=2, phase=source)
        sm.transition_to(target)
        assert sm.phase == target

    @pytest.mark.parametrize(
        "source,target",
        [
            (WizardPhase.EDITING, WizardPhase.SUBMITTED),
            (WizardPhase.EDITING, WizardPhase.EDITING),
            (WizardPhase.SUBMITTING, WizardPhase.SUBMITTING),
            (WizardPhase.SUBMITTED, WizardPhase.SUBMITTING),
        ],
    )
    def test_invalid_transitions(self, source, target):
        sm = WizardStateMachine(wizard_id="wiz_1", step_count=2, phase=source)
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            sm.transition_to(target)
        assert exc_info.value.current_state == source
        assert exc_info.value.target_state == target
        assert sm.phase == source

    def test_submitting_flag(self):
        sm = WizardStateMachine(wizard_id="wiz_1", step_count=2)
        sm.transition_to(WizardPhase.SUBMITTING)
        assert sm.submitting is True


class TestReset:
    """Test reset to the initial state."""

    def test_reset_from_submitted(self):
        sm = WizardStateMachine(
            wizard_id="wiz_1", step_count=4, current_step=4, phase=WizardPhase.SUBMITTED
        )
        sm.reset()
        assert sm.current_step == 1
        assert sm.phase == WizardPhase.EDITING
        assert sm.get_events()[-1].type == EventType.WIZARD_RESET

    def test_reset_from_editing(self):
        sm = WizardStateMachine(wizard_id="wiz_1", step_count=4, current_step=3)
        sm.reset()
        assert sm.current_step == 1


class TestEvents:
    """Test events recorded by the state machine."""

    def test_step_events_carry_payload(self):
        sm = WizardStateMachine(wizard_id="wiz_9", step_count=3)
        sm.advance_step()
        sm.retreat_step()
        events = sm.get_events()
        assert [e.type for e in events] == [EventType.STEP_ADVANCED, EventType.STEP_RETREATED]
        assert events[0].payload == {"from_step": 1, "to_step": 2}
        assert events[1].step == 1
        assert all(e.wizard_id == "wiz_9" for e in events)

    def test_events_forwarded_to_emitter(self):
        emitter = EventEmitter()
        seen = []
        emitter.on_any(seen.append)
        sm = WizardStateMachine(wizard_id="wiz_1", step_count=3, emitter=emitter)
        sm.advance_step()
        assert [e.type for e in seen] == [EventType.STEP_ADVANCED]

    def test_get_events_returns_copy(self):
        sm = WizardStateMachine(wizard_id="wiz_1", step_count=3)
        sm.advance_step()
        sm.get_events().clear()
        assert len(sm.get_events()) == 1


class TestSerialization:
    """Test to_dict/from_dict."""

    def test_round_trip(self):
        sm = WizardStateMachine(wizard_id="wiz_1", step_count=4, current_step=3)
        restored = WizardStateMachine.from_dict(sm.to_dict())
        assert restored.wizard_id == "wiz_1"
        assert restored.step_count == 4
        assert restored.current_step == 3
        assert restored.phase == WizardPhase.EDITING
