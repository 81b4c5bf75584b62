"""Workspace repository.

Owns every filesystem access for workspaces.  A workspace is a directory
``{root}/{name}`` holding a generated ``README.md`` and a ``.workspace.json``
metadata file.  Directories without a metadata file are still workspaces;
their metadata is synthesized from directory stats.

All public methods return a ``Result``; ``OSError`` never escapes.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

from pydantic import ValidationError

from ..constants import METADATA_FILENAME, README_FILENAME, SHARED_INSTRUCTIONS_FOLDER
from ..policy import validate_workspace_name
from ..result import ErrorKind, Ok, Result, fail, from_os_error
from .filesystem import FileSystemProvider
from .models import WorkspaceFile, WorkspaceMetadata

logger = logging.getLogger(__name__)

UNSET = object()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def render_readme(name: str, description: str | None) -> str:
    body = description or "Workspace created by Workspaces MCP."
    return f"# {name}\n\n{body}\n"


class WorkspaceRepository:
    def __init__(
        self,
        root: Path,
        fs: FileSystemProvider,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.root = Path(root)
        self.fs = fs
        self.clock = clock

    def get_workspace_path(self, name: str) -> Path:
        """Derive the directory of workspace ``name``.  No I/O."""
        return self.root / name

    def _metadata_path(self, name: str) -> Path:
        return self.get_workspace_path(name) / METADATA_FILENAME

    async def exists(self, name: str) -> bool:
        path = self.get_workspace_path(name)
        try:
            return await self.fs.is_directory(path)
        except OSError:
            logger.exception("Failed to check workspace %s", name)
            return False

    async def create(
        self,
        name: str,
        description: str | None = None,
        template: str | None = None,
    ) -> Result[WorkspaceMetadata]:
        """Create the workspace directory, README and metadata file.

        The directory is created exclusively, so two concurrent creates of the
        same name cannot both succeed.
        """
        path = self.get_workspace_path(name)
        logger.debug("Creating workspace %s at %s", name, path)
        try:
            await self.fs.create_directory(path, exist_ok=False)
        except FileExistsError:
            return fail(ErrorKind.ALREADY_EXISTS, f"Workspace '{name}' already exists")
        except OSError as exc:
            logger.error("Failed to create workspace directory %s: %s", path, exc)
            return from_os_error(exc, f"Workspace '{name}'")

        now = self.clock()
        metadata = WorkspaceMetadata(
            name=name,
            description=description,
            template=template,
            created_at=now,
            modified_at=now,
        )
        try:
            await self.fs.write_text(path / README_FILENAME, render_readme(name, description))
            await self._write_metadata(metadata)
        except OSError as exc:
            logger.error("Failed to initialize workspace %s: %s", name, exc)
            return from_os_error(exc, f"Workspace '{name}'")

        logger.info("Created workspace %s", name)
        return Ok(metadata)

    async def list(self) -> Result[list[WorkspaceMetadata]]:
        """Return metadata for every workspace, sorted by name.

        A missing root is an empty listing.  Directories whose names are not
        valid workspace names (``.git``, ``My Project``) cannot be addressed
        by any operation, so they are skipped and logged, as are entries
        whose metadata cannot be read.
        """
        try:
            if not await self.fs.exists(self.root):
                return Ok([])
            entries = await self.fs.list_directory(self.root)
        except OSError as exc:
            logger.error("Failed to list workspaces in %s: %s", self.root, exc)
            return from_os_error(exc, "Workspace root")

        workspaces: list[WorkspaceMetadata] = []
        for entry in sorted(entries):
            if entry == SHARED_INSTRUCTIONS_FOLDER:
                continue
            if not await self.exists(entry):
                continue
            checked = validate_workspace_name(entry)
            if not checked.is_ok:
                logger.info("Skipping directory %s: %s", entry, checked.error.message)
                continue
            result = await self.get_metadata(entry)
            if not result.is_ok:
                logger.warning("Skipping workspace %s: %s", entry, result.error.message)
                continue
            workspaces.append(result.value)
        return Ok(workspaces)

    async def get_metadata(self, name: str) -> Result[WorkspaceMetadata]:
        if not await self.exists(name):
            return fail(ErrorKind.NOT_FOUND, f"Workspace '{name}' not found")

        metadata_path = self._metadata_path(name)
        try:
            raw = await self.fs.read_text(metadata_path)
        except FileNotFoundError:
            return await self._fallback_metadata(name)
        except OSError as exc:
            logger.error("Failed to read metadata for %s: %s", name, exc)
            return from_os_error(exc, f"Metadata for workspace '{name}'")

        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError("metadata is not an object")
            data["name"] = name
            return Ok(WorkspaceMetadata.model_validate(data))
        except (ValueError, ValidationError) as exc:
            logger.warning("Corrupt metadata for workspace %s: %s", name, exc)
            return fail(ErrorKind.CORRUPT_METADATA, f"Metadata for workspace '{name}' is corrupt")

    async def _fallback_metadata(self, name: str) -> Result[WorkspaceMetadata]:
        try:
            stats = await self.fs.stat(self.get_workspace_path(name))
        except OSError as exc:
            return from_os_error(exc, f"Workspace '{name}'")
        return Ok(
            WorkspaceMetadata(
                name=name,
                created_at=stats.created_at,
                modified_at=stats.modified_at,
                fallback=True,
            )
        )

    async def _write_metadata(self, metadata: WorkspaceMetadata) -> None:
        content = json.dumps(metadata.to_file_dict(), indent=2) + "\n"
        await self.fs.write_text(self._metadata_path(metadata.name), content)

    async def update(
        self,
        name: str,
        description: str | None | object = UNSET,
        template: str | None | object = UNSET,
    ) -> Result[WorkspaceMetadata]:
        """Rewrite the metadata file with the given fields and a new ``modifiedAt``.

        Fields left unset keep their current value; ``None`` clears them.
        """
        current = await self.get_metadata(name)
        if not current.is_ok:
            return current

        changes: dict[str, object] = {"modified_at": self.clock(), "fallback": False}
        if description is not UNSET:
            changes["description"] = description
        if template is not UNSET:
            changes["template"] = template
        metadata = current.value.model_copy(update=changes)

        try:
            await self._write_metadata(metadata)
        except OSError as exc:
            logger.error("Failed to update metadata for %s: %s", name, exc)
            return from_os_error(exc, f"Metadata for workspace '{name}'")
        logger.info("Updated workspace %s", name)
        return Ok(metadata)

    async def delete(self, name: str) -> Result[None]:
        if not await self.exists(name):
            return fail(ErrorKind.NOT_FOUND, f"Workspace '{name}' not found")
        try:
            await self.fs.delete_directory(self.get_workspace_path(name))
        except OSError as exc:
            logger.error("Failed to delete workspace %s: %s", name, exc)
            return from_os_error(exc, f"Workspace '{name}'")
        logger.info("Deleted workspace %s", name)
        return Ok(None)

    async def list_files(self, name: str) -> Result[list[WorkspaceFile]]:
        """Recursively list files in the workspace, metadata file excluded."""
        if not await self.exists(name):
            return fail(ErrorKind.NOT_FOUND, f"Workspace '{name}' not found")
        files: list[WorkspaceFile] = []
        try:
            await self._scan(self.get_workspace_path(name), PurePosixPath(), files)
        except OSError as exc:
            logger.error("Failed to scan workspace %s: %s", name, exc)
            return from_os_error(exc, f"Workspace '{name}'")
        return Ok(files)

    async def _scan(self, directory: Path, prefix: PurePosixPath, out: list[WorkspaceFile]) -> None:
        for entry in await self.fs.list_directory(directory):
            if not prefix.parts and entry == METADATA_FILENAME:
                continue
            path = directory / entry
            try:
                stats = await self.fs.stat(path)
            except OSError as exc:
                logger.warning("Skipping unreadable entry %s: %s", path, exc)
                continue
            if stats.is_directory:
                # Linked directories may point anywhere, including outside the root.
                if stats.is_symlink:
                    logger.debug("Not following linked directory %s", path)
                    continue
                try:
                    await self._scan(path, prefix / entry, out)
                except OSError as exc:
                    logger.warning("Skipping unreadable directory %s: %s", path, exc)
            elif stats.is_file:
                out.append(WorkspaceFile(path=str(prefix / entry), size=stats.size))
