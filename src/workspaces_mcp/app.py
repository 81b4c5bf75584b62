"""Application assembly.

``build_application`` wires configuration, storage, services, the event bus
and the tool registry together.  Every component receives its dependencies
explicitly; nothing is created at import time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from .config import Config
from .resources import ResourceResolver
from .services.instructions_service import InstructionsService
from .services.workspace_service import WorkspaceService
from .storage.filesystem import FileSystemProvider, LocalFileSystem
from .storage.instructions_repository import InstructionsRepository
from .storage.workspace_repository import WorkspaceRepository, utcnow
from .telemetry.events import EventBus
from .telemetry.listeners import EventLogger
from .telemetry.run_store import ToolRunStore
from .tools import ToolContext, ToolRegistry, builtin_tools

logger = logging.getLogger(__name__)


@dataclass
class Application:
    config: Config
    events: EventBus
    workspaces: WorkspaceService
    instructions: InstructionsService
    resources: ResourceResolver
    tools: ToolRegistry
    runs: ToolRunStore = field(default_factory=ToolRunStore)


def build_application(
    config: Config,
    fs: FileSystemProvider | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> Application:
    fs = fs if fs is not None else LocalFileSystem()
    events = EventBus()
    if config.event_logging:
        EventLogger().attach(events)
    runs = ToolRunStore()
    runs.attach(events)

    workspaces = WorkspaceService(WorkspaceRepository(config.workspaces_root, fs, clock), events)
    instructions = InstructionsService(InstructionsRepository(config.workspaces_root, fs, clock), events)
    resources = ResourceResolver(workspaces, instructions)

    tools = ToolRegistry(ToolContext(workspaces, instructions, config, events))
    tools.register_all(builtin_tools())

    logger.info("Workspaces root: %s (%d tools)", config.workspaces_root, len(tools.names()))
    return Application(
        config=config,
        events=events,
        workspaces=workspaces,
        instructions=instructions,
        resources=resources,
        tools=tools,
        runs=runs,
    )
