"""In-process event bus.

Services and the tool dispatcher publish an ``Event`` after every successful
state change (and after every tool call).  Delivery is synchronous, in
subscription order, on the publisher's call stack.  A subscriber that raises
is logged and skipped; the remaining subscribers still run and the publisher
never sees the error.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Event names published by the engine."""

    WORKSPACE_CREATED = "workspace.created"
    WORKSPACE_UPDATED = "workspace.updated"
    WORKSPACE_DELETED = "workspace.deleted"
    WORKSPACE_ACCESSED = "workspace.accessed"

    INSTRUCTION_CREATED = "instruction.created"
    INSTRUCTION_UPDATED = "instruction.updated"
    INSTRUCTION_DELETED = "instruction.deleted"
    GLOBAL_INSTRUCTIONS_UPDATED = "instruction.global.updated"

    TOOL_EXECUTED = "tool.executed"
    TOOL_FAILED = "tool.failed"
    TOOL_REGISTERED = "tool.registered"
    TOOL_UNREGISTERED = "tool.unregistered"


@dataclass(frozen=True)
class Event:
    """A published event.  ``payload`` is free-form and JSON friendly."""

    type: EventType
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Handler = Callable[[Event], None]


class EventBus:
    """Synchronous publish/subscribe hub.

    Subscribing with ``event_type=None`` receives every event.
    """

    def __init__(self) -> None:
        self._subscriptions: list[tuple[EventType | None, Handler]] = []

    def subscribe(self, event_type: EventType | None, handler: Handler) -> Callable[[], None]:
        """Register ``handler`` and return a callable that removes it again."""
        entry = (event_type, handler)
        self._subscriptions.append(entry)

        def unsubscribe() -> None:
            try:
                self._subscriptions.remove(entry)
            except ValueError:
                pass

        return unsubscribe

    def once(self, event_type: EventType, handler: Handler) -> Callable[[], None]:
        """Register ``handler`` for the next ``event_type`` event only."""
        unsubscribe: Callable[[], None]

        def wrapper(event: Event) -> None:
            unsubscribe()
            handler(event)

        unsubscribe = self.subscribe(event_type, wrapper)
        return unsubscribe

    def publish(self, event_type: EventType, payload: dict[str, Any] | None = None) -> Event:
        event = Event(type=event_type, payload=payload or {})
        # Copy so handlers may unsubscribe while being delivered to.
        for subscribed_type, handler in list(self._subscriptions):
            if subscribed_type is not None and subscribed_type != event_type:
                continue
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler %r failed for %s", handler, event_type.value)
        return event

    def listener_count(self, event_type: EventType | None = None) -> int:
        """Number of handlers that would receive an ``event_type`` event."""
        if event_type is None:
            return len(self._subscriptions)
        return sum(1 for t, _ in self._subscriptions if t is None or t == event_type)


class EventPublisher:
    """Mixin that publishes to ``self.events`` without letting failures escape."""

    events: EventBus | None

    def _emit(self, event_type: EventType, payload: dict[str, Any]) -> None:
        if self.events is None:
            return
        try:
            self.events.publish(event_type, payload)
        except Exception:
            logger.exception("Failed to publish %s", event_type.value)
