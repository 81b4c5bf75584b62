"""In‑memory store of tool runs, fed by the event bus."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime

from .events import Event, EventBus, EventType


@dataclass
class ToolRun:
    """Record representing a single tool call."""

    tool: str
    ok: bool
    duration_ms: float
    timestamp: datetime
    error: str | None = None


@dataclass
class ToolStats:
    calls: int = 0
    failures: int = 0
    total_duration_ms: float = 0.0

    @property
    def average_duration_ms(self) -> float:
        return self.total_duration_ms / self.calls if self.calls else 0.0


class ToolRunStore:
    """Simple in‑memory store for tool runs.  Not persisted between server restarts.

    Keeps the most recent ``max_runs`` runs plus per-tool counters.
    """

    def __init__(self, max_runs: int = 100) -> None:
        self._runs: deque[ToolRun] = deque(maxlen=max_runs)
        self._stats: dict[str, ToolStats] = {}
        self._unsubscribers: list = []

    def attach(self, bus: EventBus) -> None:
        self._unsubscribers.append(bus.subscribe(EventType.TOOL_EXECUTED, self.record))
        self._unsubscribers.append(bus.subscribe(EventType.TOOL_FAILED, self.record))

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def record(self, event: Event) -> None:
        tool = str(event.payload.get("tool", "unknown"))
        ok = event.type == EventType.TOOL_EXECUTED
        duration_ms = float(event.payload.get("duration_ms", 0.0))
        self._runs.append(
            ToolRun(
                tool=tool,
                ok=ok,
                duration_ms=duration_ms,
                timestamp=event.timestamp,
                error=None if ok else event.payload.get("error"),
            )
        )
        stats = self._stats.setdefault(tool, ToolStats())
        stats.calls += 1
        stats.total_duration_ms += duration_ms
        if not ok:
            stats.failures += 1

    def recent(self, limit: int | None = None) -> list[ToolRun]:
        runs = list(self._runs)
        return runs[-limit:] if limit else runs

    def stats(self, tool: str) -> ToolStats | None:
        return self._stats.get(tool)

    def all_stats(self) -> dict[str, ToolStats]:
        return dict(self._stats)
