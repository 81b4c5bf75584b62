"""Tool registry and dispatcher.

Each tool is a ``ToolHandler`` record: a name, a description, a pydantic
model describing its arguments (its JSON schema is the tool's ``inputSchema``)
and an async function that performs the work.  ``ToolRegistry.call_tool``
never raises: unknown tools, invalid arguments and faults inside a handler
all come back as error results.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from ..config import Config
from ..result import Err, ErrorKind, Failure, Ok, Result, describe_exception
from ..services.instructions_service import InstructionsService
from ..services.workspace_service import WorkspaceService
from ..telemetry.events import EventBus, EventPublisher, EventType

logger = logging.getLogger(__name__)


@dataclass
class ToolContext:
    """Dependencies handed to every tool function."""

    workspaces: WorkspaceService
    instructions: InstructionsService
    config: Config
    events: EventBus | None = None


ToolFunction = Callable[[Any, ToolContext], Awaitable[Result[str]]]


@dataclass(frozen=True)
class ToolHandler:
    name: str
    description: str
    input_model: type[BaseModel]
    execute: ToolFunction

    def input_schema(self) -> dict[str, Any]:
        return self.input_model.model_json_schema(by_alias=True)


@dataclass
class ToolCallResult:
    text: str
    is_error: bool = False
    error: Failure | None = None

    @property
    def content(self) -> list[dict[str, str]]:
        return [{"type": "text", "text": self.text}]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"content": self.content}
        if self.is_error:
            data["isError"] = True
        return data

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> ToolCallResult:
        return cls(text=message, is_error=True, error=Failure(kind, message))


def format_validation_error(exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ())) or "arguments"
        problems.append(f"{location}: {err.get('msg')}")
    return "Invalid arguments: " + "; ".join(problems)


class ToolRegistry(EventPublisher):
    def __init__(self, context: ToolContext, events: EventBus | None = None) -> None:
        self.context = context
        self.events = events if events is not None else context.events
        self._handlers: dict[str, ToolHandler] = {}

    def register(self, handler: ToolHandler) -> None:
        """Register ``handler``.  Raises ``ValueError`` on a duplicate name."""
        if handler.name in self._handlers:
            raise ValueError(f"Tool '{handler.name}' is already registered")
        self._handlers[handler.name] = handler
        logger.debug("Registered tool %s", handler.name)
        self._emit(EventType.TOOL_REGISTERED, {"tool": handler.name})

    def register_all(self, handlers: list[ToolHandler]) -> None:
        for handler in handlers:
            self.register(handler)

    def unregister(self, name: str) -> bool:
        handler = self._handlers.pop(name, None)
        if handler is None:
            return False
        self._emit(EventType.TOOL_UNREGISTERED, {"tool": name})
        return True

    def get(self, name: str) -> ToolHandler | None:
        return self._handlers.get(name)

    def names(self) -> list[str]:
        return list(self._handlers)

    def list_tools(self) -> list[dict[str, Any]]:
        return [
            {"name": h.name, "description": h.description, "inputSchema": h.input_schema()}
            for h in self._handlers.values()
        ]

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> ToolCallResult:
        start = time.monotonic()
        handler = self._handlers.get(name)
        if handler is None:
            available = ", ".join(self.names()) or "none"
            result = ToolCallResult.failure(
                ErrorKind.UNKNOWN_TOOL, f"Unknown tool: '{name}'. Available tools: {available}"
            )
            return self._finish(name, start, result)

        try:
            args = handler.input_model.model_validate(arguments or {})
        except ValidationError as exc:
            result = ToolCallResult.failure(ErrorKind.SCHEMA_VALIDATION_FAILED, format_validation_error(exc))
            return self._finish(name, start, result)

        logger.debug("Executing tool %s", name)
        try:
            outcome = await handler.execute(args, self.context)
        except Exception as exc:
            logger.exception("Tool %s raised", name)
            result = ToolCallResult.failure(ErrorKind.UNEXPECTED, describe_exception(exc))
            return self._finish(name, start, result)

        if isinstance(outcome, Ok):
            result = ToolCallResult(text=str(outcome.value))
        elif isinstance(outcome, Err):
            result = ToolCallResult(text=outcome.error.message, is_error=True, error=outcome.error)
        else:
            logger.error("Tool %s returned %s instead of a Result", name, type(outcome).__name__)
            result = ToolCallResult.failure(
                ErrorKind.UNEXPECTED, f"Tool '{name}' returned an invalid result"
            )
        return self._finish(name, start, result)

    def _finish(self, name: str, start: float, result: ToolCallResult) -> ToolCallResult:
        duration_ms = round((time.monotonic() - start) * 1000, 1)
        if result.is_error:
            logger.info("Tool %s failed in %sms: %s", name, duration_ms, result.text)
            payload = {"tool": name, "duration_ms": duration_ms, "error": result.text}
            if result.error is not None:
                payload["kind"] = result.error.kind.value
            self._emit(EventType.TOOL_FAILED, payload)
        else:
            logger.info("Tool %s completed in %sms", name, duration_ms)
            self._emit(EventType.TOOL_EXECUTED, {"tool": name, "duration_ms": duration_ms})
        return result
