"""Instructions repository.

Shared instructions live in ``{root}/SHARED_INSTRUCTIONS/{name}.md`` and the
global instructions in ``{root}/SHARED_INSTRUCTIONS/GLOBAL.md``.  Each file
starts with a fixed header comment.  Shared instruction files then carry a
``# {name}`` title and an optional ``> {description}`` line before the content.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from ..constants import (
    DEFAULT_GLOBAL_INSTRUCTIONS,
    GLOBAL_INSTRUCTIONS_NAME,
    INSTRUCTION_EXTENSION,
    INSTRUCTION_FILE_HEADER,
    SHARED_INSTRUCTIONS_FOLDER,
)
from ..policy.names import validate_instruction_name
from ..result import ErrorKind, Ok, Result, fail, from_os_error
from .filesystem import FileSystemProvider
from .models import GlobalInstructions, SharedInstruction
from .workspace_repository import utcnow

logger = logging.getLogger(__name__)


def render_instruction(name: str, content: str, description: str | None = None) -> str:
    parts = [INSTRUCTION_FILE_HEADER, f"# {name}\n\n"]
    if description:
        parts.append(f"> {description}\n\n")
    parts.append(content)
    return "".join(parts)


def parse_instruction(name: str, text: str) -> tuple[str | None, str]:
    """Split a shared instruction file into ``(description, content)``."""
    body = text[len(INSTRUCTION_FILE_HEADER):] if text.startswith(INSTRUCTION_FILE_HEADER) else text
    title = f"# {name}\n"
    if not body.startswith(title):
        return None, body
    body = body[len(title):]
    if body.startswith("\n"):
        body = body[1:]

    description = None
    if body.startswith("> "):
        line, _, rest = body.partition("\n")
        description = line[2:].strip() or None
        body = rest[1:] if rest.startswith("\n") else rest
    return description, body


def strip_header(text: str) -> str:
    if text.startswith(INSTRUCTION_FILE_HEADER):
        return text[len(INSTRUCTION_FILE_HEADER):]
    return text


class InstructionsRepository:
    def __init__(
        self,
        root: Path,
        fs: FileSystemProvider,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.root = Path(root)
        self.fs = fs
        self.clock = clock

    @property
    def shared_path(self) -> Path:
        return self.root / SHARED_INSTRUCTIONS_FOLDER

    @property
    def global_path(self) -> Path:
        return self.shared_path / f"{GLOBAL_INSTRUCTIONS_NAME}{INSTRUCTION_EXTENSION}"

    def get_instruction_path(self, name: str) -> Path:
        return self.shared_path / f"{name}{INSTRUCTION_EXTENSION}"

    async def exists(self, name: str) -> bool:
        try:
            return await self.fs.exists(self.get_instruction_path(name))
        except OSError:
            logger.exception("Failed to check instruction %s", name)
            return False

    async def _load(self, name: str) -> SharedInstruction:
        path = self.get_instruction_path(name)
        text = await self.fs.read_text(path)
        stats = await self.fs.stat(path)
        description, content = parse_instruction(name, text)
        return SharedInstruction(
            name=name,
            content=content,
            description=description,
            created_at=stats.created_at,
            modified_at=stats.modified_at,
        )

    async def list_shared(self) -> Result[list[SharedInstruction]]:
        """Return every readable shared instruction, sorted by name.

        Files that fail to read or carry an invalid name are skipped.
        """
        try:
            if not await self.fs.exists(self.shared_path):
                return Ok([])
            entries = await self.fs.list_directory(self.shared_path)
        except OSError as exc:
            logger.error("Failed to list shared instructions: %s", exc)
            return from_os_error(exc, "Shared instructions folder")

        instructions: list[SharedInstruction] = []
        for entry in sorted(entries):
            if not entry.endswith(INSTRUCTION_EXTENSION):
                continue
            name = entry[: -len(INSTRUCTION_EXTENSION)]
            if name == GLOBAL_INSTRUCTIONS_NAME:
                continue
            if not validate_instruction_name(name).is_ok:
                logger.warning("Skipping instruction file with invalid name: %s", entry)
                continue
            try:
                instructions.append(await self._load(name))
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping unreadable instruction %s: %s", entry, exc)
        return Ok(instructions)

    async def get_shared(self, name: str) -> Result[SharedInstruction]:
        try:
            return Ok(await self._load(name))
        except FileNotFoundError:
            return fail(ErrorKind.NOT_FOUND, f"Shared instruction '{name}' not found")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read instruction %s: %s", name, exc)
            return fail(ErrorKind.UNEXPECTED, f"Failed to read shared instruction '{name}': {exc}")

    async def create_shared(
        self, name: str, content: str, description: str | None = None
    ) -> Result[SharedInstruction]:
        """Create a new shared instruction.  Fails if the name is taken."""
        path = self.get_instruction_path(name)
        logger.debug("Creating shared instruction %s at %s", name, path)
        try:
            await self.fs.write_text(path, render_instruction(name, content, description), exclusive=True)
        except FileExistsError:
            return fail(ErrorKind.ALREADY_EXISTS, f"Shared instruction '{name}' already exists")
        except OSError as exc:
            logger.error("Failed to create instruction %s: %s", name, exc)
            return from_os_error(exc, f"Shared instruction '{name}'")
        logger.info("Created shared instruction %s", name)
        now = self.clock()
        return Ok(
            SharedInstruction(
                name=name, content=content, description=description, created_at=now, modified_at=now
            )
        )

    async def update_shared(
        self, name: str, content: str, description: str | None = None
    ) -> Result[SharedInstruction]:
        """Atomically replace an existing shared instruction."""
        current = await self.get_shared(name)
        if not current.is_ok:
            return current
        try:
            await self.fs.write_text(
                self.get_instruction_path(name), render_instruction(name, content, description)
            )
        except OSError as exc:
            logger.error("Failed to update instruction %s: %s", name, exc)
            return from_os_error(exc, f"Shared instruction '{name}'")
        logger.info("Updated shared instruction %s", name)
        return Ok(
            current.value.model_copy(
                update={"content": content, "description": description, "modified_at": self.clock()}
            )
        )

    async def delete_shared(self, name: str) -> Result[None]:
        try:
            await self.fs.delete_file(self.get_instruction_path(name))
        except FileNotFoundError:
            return fail(ErrorKind.NOT_FOUND, f"Shared instruction '{name}' not found")
        except OSError as exc:
            logger.error("Failed to delete instruction %s: %s", name, exc)
            return from_os_error(exc, f"Shared instruction '{name}'")
        logger.info("Deleted shared instruction %s", name)
        return Ok(None)

    async def get_global(self) -> Result[GlobalInstructions]:
        """Return the global instructions, writing the defaults on first read."""
        path = self.global_path
        try:
            text = await self.fs.read_text(path)
        except FileNotFoundError:
            logger.info("Global instructions missing, writing defaults to %s", path)
            written = await self.update_global(DEFAULT_GLOBAL_INSTRUCTIONS)
            if not written.is_ok:
                logger.warning("Serving default global instructions unsaved: %s", written.error.message)
                return Ok(GlobalInstructions(content=DEFAULT_GLOBAL_INSTRUCTIONS, modified_at=self.clock()))
            return written
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read global instructions: %s", exc)
            return fail(ErrorKind.UNEXPECTED, f"Failed to read global instructions: {exc}")

        try:
            stats = await self.fs.stat(path)
        except OSError as exc:
            return from_os_error(exc, "Global instructions")
        return Ok(GlobalInstructions(content=strip_header(text), modified_at=stats.modified_at))

    async def update_global(self, content: str) -> Result[GlobalInstructions]:
        try:
            await self.fs.write_text(self.global_path, INSTRUCTION_FILE_HEADER + content)
        except OSError as exc:
            logger.error("Failed to write global instructions: %s", exc)
            return from_os_error(exc, "Global instructions")
        logger.info("Updated global instructions")
        return Ok(GlobalInstructions(content=content, modified_at=self.clock()))
