"""Built-in event bus listeners."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .events import Event, EventBus

logger = logging.getLogger(__name__)


class EventLogger:
    """Log every published event at debug level."""

    def __init__(self, level: int = logging.DEBUG) -> None:
        self.level = level

    def __call__(self, event: Event) -> None:
        logger.log(self.level, "event %s %s", event.type.value, event.payload)

    def attach(self, bus: EventBus) -> Callable[[], None]:
        return bus.subscribe(None, self)
