"""Telemetry utilities: logging, the event bus and its listeners."""

from .events import Event, EventBus, EventPublisher, EventType
from .logger import configure_logging

__all__ = ["Event", "EventBus", "EventPublisher", "EventType", "configure_logging"]
