"""Workspace service.

Validates input, delegates to ``WorkspaceRepository`` and publishes an event
after every successful operation.  Failures are returned as ``Err`` values.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..policy.names import validate_workspace_name
from ..policy.paths import resolve_within
from ..result import ErrorKind, Ok, Result, fail
from ..storage.models import WorkspaceInfo, WorkspaceMetadata
from ..storage.workspace_repository import UNSET, WorkspaceRepository
from ..telemetry.events import EventBus, EventPublisher, EventType

logger = logging.getLogger(__name__)


class WorkspaceService(EventPublisher):
    def __init__(self, repository: WorkspaceRepository, events: EventBus | None = None) -> None:
        self.repository = repository
        self.events = events

    async def create_workspace(
        self,
        name: str,
        description: str | None = None,
        template: str | None = None,
    ) -> Result[WorkspaceMetadata]:
        checked = validate_workspace_name(name)
        if not checked.is_ok:
            return checked

        result = await self.repository.create(name, description=description, template=template)
        if result.is_ok:
            self._emit(
                EventType.WORKSPACE_CREATED,
                {"name": name, "description": description, "template": template},
            )
        return result

    async def list_workspaces(self) -> Result[list[WorkspaceMetadata]]:
        return await self.repository.list()

    async def get_workspace_metadata(self, name: str) -> Result[WorkspaceMetadata]:
        """Return stored metadata without scanning the workspace's files."""
        checked = validate_workspace_name(name)
        if not checked.is_ok:
            return checked

        result = await self.repository.get_metadata(name)
        if result.is_ok:
            self._emit(EventType.WORKSPACE_ACCESSED, {"name": name})
        return result

    async def get_workspace_info(self, name: str) -> Result[WorkspaceInfo]:
        """Return metadata plus a fresh scan of the workspace's files."""
        checked = validate_workspace_name(name)
        if not checked.is_ok:
            return checked

        metadata = await self.repository.get_metadata(name)
        if not metadata.is_ok:
            return metadata
        files = await self.repository.list_files(name)
        if not files.is_ok:
            return files

        info = WorkspaceInfo(
            metadata=metadata.value,
            path=str(self.repository.get_workspace_path(name)),
            file_count=len(files.value),
            size=sum(f.size for f in files.value),
            files=files.value,
        )
        self._emit(EventType.WORKSPACE_ACCESSED, {"name": name})
        return Ok(info)

    async def update_workspace(
        self,
        name: str,
        description: str | None | object = UNSET,
        template: str | None | object = UNSET,
    ) -> Result[WorkspaceMetadata]:
        checked = validate_workspace_name(name)
        if not checked.is_ok:
            return checked

        result = await self.repository.update(name, description=description, template=template)
        if result.is_ok:
            changes = {}
            if description is not UNSET:
                changes["description"] = description
            if template is not UNSET:
                changes["template"] = template
            self._emit(EventType.WORKSPACE_UPDATED, {"name": name, "changes": changes})
        return result

    async def delete_workspace(self, name: str) -> Result[None]:
        checked = validate_workspace_name(name)
        if not checked.is_ok:
            return checked

        result = await self.repository.delete(name)
        if result.is_ok:
            self._emit(EventType.WORKSPACE_DELETED, {"name": name})
        return result

    async def workspace_exists(self, name: str) -> bool:
        if not validate_workspace_name(name).is_ok:
            return False
        return await self.repository.exists(name)

    def get_workspace_path(self, name: str) -> Result[Path]:
        checked = validate_workspace_name(name)
        if not checked.is_ok:
            return checked
        return Ok(self.repository.get_workspace_path(name))

    async def validate_workspace_file(self, name: str, relative_path: str) -> Result[Path]:
        """Resolve ``relative_path`` inside workspace ``name``.

        The containment check runs before any filesystem access, so traversal
        attempts fail with ``SecurityViolation`` even for missing workspaces.
        """
        checked = validate_workspace_name(name)
        if not checked.is_ok:
            return checked

        resolved = resolve_within(self.repository.get_workspace_path(name), relative_path)
        if not resolved.is_ok:
            logger.warning("Rejected path %r for workspace %s", relative_path, name)
            return resolved

        if not await self.repository.exists(name):
            return fail(ErrorKind.NOT_FOUND, f"Workspace '{name}' not found")
        try:
            found = await self.repository.fs.exists(resolved.value)
        except OSError as exc:
            return fail(ErrorKind.UNEXPECTED, f"Failed to check '{relative_path}': {exc}")
        if not found:
            return fail(ErrorKind.NOT_FOUND, f"File '{relative_path}' not found in workspace '{name}'")
        return resolved
