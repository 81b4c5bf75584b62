"""Instructions service.

Shared instructions are named markdown documents; the global instructions are
a single document that always exists.  Content is validated before anything
is written, so a rejected update leaves the stored content unchanged.
"""

from __future__ import annotations

import logging

from ..policy.limits import validate_content
from ..policy.names import validate_instruction_name
from ..result import Result
from ..storage.instructions_repository import InstructionsRepository
from ..storage.models import GlobalInstructions, SharedInstruction
from ..telemetry.events import EventBus, EventPublisher, EventType

logger = logging.getLogger(__name__)


class InstructionsService(EventPublisher):
    def __init__(self, repository: InstructionsRepository, events: EventBus | None = None) -> None:
        self.repository = repository
        self.events = events

    async def create_shared_instruction(
        self,
        name: str,
        content: str,
        description: str | None = None,
    ) -> Result[SharedInstruction]:
        checked = validate_instruction_name(name)
        if not checked.is_ok:
            return checked
        checked = validate_content(content)
        if not checked.is_ok:
            return checked

        result = await self.repository.create_shared(name, content, description)
        if result.is_ok:
            self._emit(
                EventType.INSTRUCTION_CREATED,
                {"name": name, "description": description, "size": len(content)},
            )
        return result

    async def list_shared_instructions(self) -> Result[list[SharedInstruction]]:
        return await self.repository.list_shared()

    async def get_shared_instruction(self, name: str) -> Result[SharedInstruction]:
        checked = validate_instruction_name(name)
        if not checked.is_ok:
            return checked
        return await self.repository.get_shared(name)

    async def update_shared_instruction(
        self,
        name: str,
        content: str,
        description: str | None = None,
    ) -> Result[SharedInstruction]:
        """Replace the content of an existing instruction.

        When ``description`` is ``None`` the current description is kept.
        """
        checked = validate_instruction_name(name)
        if not checked.is_ok:
            return checked
        checked = validate_content(content)
        if not checked.is_ok:
            return checked

        if description is None:
            current = await self.repository.get_shared(name)
            if not current.is_ok:
                return current
            description = current.value.description

        result = await self.repository.update_shared(name, content, description)
        if result.is_ok:
            self._emit(EventType.INSTRUCTION_UPDATED, {"name": name, "size": len(content)})
        return result

    async def delete_shared_instruction(self, name: str) -> Result[None]:
        checked = validate_instruction_name(name)
        if not checked.is_ok:
            return checked

        result = await self.repository.delete_shared(name)
        if result.is_ok:
            self._emit(EventType.INSTRUCTION_DELETED, {"name": name})
        return result

    async def get_global_instructions(self) -> Result[GlobalInstructions]:
        return await self.repository.get_global()

    async def update_global_instructions(self, content: str, append: bool = False) -> Result[GlobalInstructions]:
        """Overwrite the global instructions, or append to them.

        Appended content is separated from the current content by a blank line.
        """
        if append:
            current = await self.repository.get_global()
            if not current.is_ok:
                return current
            content = f"{current.value.content}\n\n{content}"

        checked = validate_content(content)
        if not checked.is_ok:
            logger.warning("Rejected global instructions update: %s", checked.error.message)
            return checked

        result = await self.repository.update_global(content)
        if result.is_ok:
            self._emit(
                EventType.GLOBAL_INSTRUCTIONS_UPDATED,
                {"size": len(content), "append": append},
            )
        return result
