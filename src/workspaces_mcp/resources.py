"""Resource resolver.

Maps ``scheme://path`` identifiers onto service calls:

* ``workspace://{name}`` returns the workspace's metadata and path as JSON.
* ``instruction://global`` returns the global instructions as markdown.
* ``instruction://shared/{name}`` returns a shared instruction as markdown.

The resolver holds no state of its own.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass

from .result import ErrorKind, Ok, Result, fail
from .services.instructions_service import InstructionsService
from .services.workspace_service import WorkspaceService

logger = logging.getLogger(__name__)

URI_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://.+$", re.DOTALL)

WORKSPACE_SCHEME = "workspace"
INSTRUCTION_SCHEME = "instruction"
GLOBAL_INSTRUCTIONS_URI = "instruction://global"
SHARED_PREFIX = "shared/"

JSON_MIME_TYPE = "application/json"
MARKDOWN_MIME_TYPE = "text/markdown"


@dataclass(frozen=True)
class ResourceEntry:
    uri: str
    name: str
    description: str
    mime_type: str


@dataclass(frozen=True)
class ResourceContent:
    uri: str
    mime_type: str
    text: str


class ResourceResolver:
    def __init__(self, workspaces: WorkspaceService, instructions: InstructionsService) -> None:
        self.workspaces = workspaces
        self.instructions = instructions

    async def list_resources(self) -> list[ResourceEntry]:
        """List every workspace, every shared instruction and the global instructions.

        A failing sub-listing is logged and left out; the global entry is
        always present.
        """
        entries: list[ResourceEntry] = []

        workspaces = await self.workspaces.list_workspaces()
        if workspaces.is_ok:
            for ws in workspaces.value:
                entries.append(
                    ResourceEntry(
                        uri=f"{WORKSPACE_SCHEME}://{ws.name}",
                        name=ws.name,
                        description=ws.description or f"Workspace: {ws.name}",
                        mime_type=JSON_MIME_TYPE,
                    )
                )
        else:
            logger.error("Failed to list workspace resources: %s", workspaces.error.message)

        shared = await self.instructions.list_shared_instructions()
        if shared.is_ok:
            for instruction in shared.value:
                entries.append(
                    ResourceEntry(
                        uri=f"{INSTRUCTION_SCHEME}://{SHARED_PREFIX}{instruction.name}",
                        name=instruction.name,
                        description=instruction.description or f"Shared Instruction: {instruction.name}",
                        mime_type=MARKDOWN_MIME_TYPE,
                    )
                )
        else:
            logger.error("Failed to list instruction resources: %s", shared.error.message)

        entries.append(
            ResourceEntry(
                uri=GLOBAL_INSTRUCTIONS_URI,
                name="Global Instructions",
                description="Global instructions that apply to all workspaces",
                mime_type=MARKDOWN_MIME_TYPE,
            )
        )
        return entries

    async def read_resource(self, uri: str) -> Result[ResourceContent]:
        if not isinstance(uri, str) or not URI_PATTERN.match(uri):
            return fail(ErrorKind.INVALID_URI, f"Invalid resource URI: {uri!r}")

        scheme, path = uri.split("://", 1)
        if scheme not in (WORKSPACE_SCHEME, INSTRUCTION_SCHEME):
            return fail(ErrorKind.UNSUPPORTED_SCHEME, f"Unsupported resource scheme: {scheme}")
        path = path.strip().strip("/")
        if not path:
            return fail(ErrorKind.EMPTY_PATH, f"Resource URI has an empty path: {uri}")

        logger.debug("Reading resource %s", uri)
        if scheme == WORKSPACE_SCHEME:
            return await self._read_workspace(uri, path)
        return await self._read_instruction(uri, path)

    async def _read_workspace(self, uri: str, name: str) -> Result[ResourceContent]:
        path = self.workspaces.get_workspace_path(name)
        if not path.is_ok:
            return path
        if not await self.workspaces.workspace_exists(name):
            return fail(ErrorKind.NOT_FOUND, f"Workspace '{name}' not found")
        metadata = await self.workspaces.get_workspace_metadata(name)
        if not metadata.is_ok:
            return metadata
        data = metadata.value.to_json_dict()
        data["path"] = str(path.value)
        return Ok(ResourceContent(uri=uri, mime_type=JSON_MIME_TYPE, text=json.dumps(data, indent=2)))

    async def _read_instruction(self, uri: str, path: str) -> Result[ResourceContent]:
        if path == "global":
            result = await self.instructions.get_global_instructions()
            if not result.is_ok:
                return result
            return Ok(ResourceContent(uri=uri, mime_type=MARKDOWN_MIME_TYPE, text=result.value.content))

        if path.startswith(SHARED_PREFIX) and len(path) > len(SHARED_PREFIX):
            name = path[len(SHARED_PREFIX):]
            shared = await self.instructions.get_shared_instruction(name)
            if not shared.is_ok:
                return shared
            return Ok(ResourceContent(uri=uri, mime_type=MARKDOWN_MIME_TYPE, text=shared.value.content))

        return fail(
            ErrorKind.INVALID_INSTRUCTION_PATH,
            f"Invalid instruction path '{path}'. Use 'global' or 'shared/{{name}}'",
        )
