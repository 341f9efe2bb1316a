"""Event system for the form wizard.

Every field edit, navigation attempt and submission outcome emits a typed
WizardEvent. Events that the applicant should see carry a Notification (the
title/description/variant a UI shows as a dismissible toast).
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from leaseform.types import EventType, NotificationVariant, WizardPhase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """A user-facing message produced by the wizard.

    Attributes:
        title: Short headline
        description: Longer explanation
        variant: Presentation hint (destructive for failures)
        notification_id: Identifier used to dismiss the notification
    """
    title: str
    description: str
    variant: NotificationVariant = NotificationVariant.DEFAULT
    notification_id: str = field(default_factory=lambda: f"ntf_{uuid.uuid4().hex[:12]}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.notification_id,
            "title": self.title,
            "description": self.description,
            "variant": self.variant.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Notification":
        return cls(
            title=data["title"],
            description=data["description"],
            variant=NotificationVariant(data.get("variant", NotificationVariant.DEFAULT.value)),
            notification_id=data["id"],
        )


@dataclass(frozen=True)
class WizardEvent:
    """A single event in a wizard's lifetime.

    Attributes:
        event_id: Unique event identifier (e.g., "evt_3f2a...")
        type: Event type from EventType enum
        wizard_id: ID of the wizard that emitted the event
        ts: UTC timestamp when the event occurred
        step: Step index after the event
        phase: Wizard phase after the event
        payload: Optional event-specific data (changed field names, missing fields, errors)
        notification: Optional user-facing notification

    Examples:
        >>> from datetime import datetime, timezone
        >>> event = WizardEvent(
        ...     event_id="evt_001",
        ...     type=EventType.STEP_ADVANCED,
        ...     wizard_id="wiz_001",
        ...     ts=datetime.now(timezone.utc),
        ...     step=2,
        ...     phase=WizardPhase.EDITING,
        ... )
    """
    event_id: str
    type: EventType
    wizard_id: str
    ts: datetime
    step: int
    phase: WizardPhase
    payload: Optional[Dict[str, Any]] = None
    notification: Optional[Notification] = None

    def __post_init__(self):
        """Normalize string enums."""
        if isinstance(self.type, str):
            object.__setattr__(self, "type", EventType(self.type))
        if isinstance(self.phase, str):
            object.__setattr__(self, "phase", WizardPhase(self.phase))

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization.

        Timestamp is formatted as ISO 8601 string.
        """
        result: Dict[str, Any] = {
            "eventId": self.event_id,
            "type": self.type.value,
            "wizardId": self.wizard_id,
            "ts": self.ts.isoformat(),
            "step": self.step,
            "phase": self.phase.value,
        }
        if self.payload is not None:
            result["payload"] = self.payload
        if self.notification is not None:
            result["notification"] = self.notification.to_dict()
        return result

    def to_jsonl(self) -> str:
        """Single-line JSON for appending to an event log."""
        return json.dumps(self.to_dict(), separators=(',', ':'))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WizardEvent":
        ts = datetime.fromisoformat(data["ts"].replace('Z', '+00:00'))
        notification = None
        if data.get("notification") is not None:
            notification = Notification.from_dict(data["notification"])
        return cls(
            event_id=data["eventId"],
            type=EventType(data["type"]),
            wizard_id=data["wizardId"],
            ts=ts,
            step=data["step"],
            phase=WizardPhase(data["phase"]),
            payload=data.get("payload"),
            notification=notification,
        )


EventListener = Callable[[WizardEvent], None]
"""Type alias for event listener callbacks.

Listeners are called synchronously when events are emitted.
"""


class EventEmitter:
    """Observer registry dispatching wizard events.

    - Type-specific subscriptions and wildcard subscriptions
    - Synchronous dispatch in registration order
    - A failing listener is logged and does not affect other listeners

    Examples:
        >>> emitter = EventEmitter()
        >>> seen = []
        >>> emitter.on(EventType.STEP_ADVANCED, seen.append)
        >>> emitter.listener_count()
        1
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[EventListener]] = {}
        self._any_listeners: List[EventListener] = []

    def on(self, event_type: EventType, listener: EventListener) -> None:
        """Subscribe to a specific event type."""
        self._listeners.setdefault(event_type, []).append(listener)

    def on_any(self, listener: EventListener) -> None:
        """Subscribe to all event types."""
        self._any_listeners.append(listener)

    def off(self, event_type: EventType, listener: EventListener) -> None:
        """Unsubscribe from a specific event type."""
        listeners = self._listeners.get(event_type)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def off_any(self, listener: EventListener) -> None:
        """Remove a wildcard subscription."""
        if listener in self._any_listeners:
            self._any_listeners.remove(listener)

    def emit(self, event: WizardEvent) -> None:
        """Dispatch an event to type-specific listeners, then wildcard listeners."""
        for listener in list(self._listeners.get(event.type, [])) + list(self._any_listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "Listener %r failed while handling %s", listener, event.type.value
                )

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners.clear()
        self._any_listeners.clear()

    def listener_count(self, event_type: Optional[EventType] = None) -> int:
        """Count listeners for ``event_type``, or all listeners when None."""
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return len(self._any_listeners) + sum(len(ls) for ls in self._listeners.values())


__all__ = [
    "Notification",
    "WizardEvent",
    "EventListener",
    "EventEmitter",
]
