"""Instruction tool implementations."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ..constants import MAX_DESCRIPTION_LENGTH, MAX_NAME_LENGTH, NAME_PATTERN, PREVIEW_LENGTH
from ..result import Ok, Result
from .registry import ToolContext, ToolHandler
from .workspace_tools import format_date

logger = logging.getLogger(__name__)


class CreateSharedInstructionInput(BaseModel):
    name: str = Field(
        min_length=1,
        max_length=MAX_NAME_LENGTH,
        pattern=NAME_PATTERN,
        description="Instruction name (letters, numbers, hyphens and underscores)",
    )
    content: str = Field(min_length=1, description="Markdown content of the instruction")
    description: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)


class UpdateGlobalInstructionsInput(BaseModel):
    content: str = Field(min_length=1, description="Markdown content of the global instructions")
    append: bool = Field(default=False, description="Append to the current instructions instead of replacing them")


class ListSharedInstructionsInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    include_content: bool = Field(default=False, alias="includeContent")
    sort_by: Literal["name", "created", "modified", "size"] = Field(default="name", alias="sortBy")


async def create_shared_instruction(args: CreateSharedInstructionInput, ctx: ToolContext) -> Result[str]:
    logger.info("Creating shared instruction: %s", args.name)
    result = await ctx.instructions.create_shared_instruction(
        args.name, args.content, description=args.description
    )
    if not result.is_ok:
        return result
    return Ok(
        f"Shared instruction '{args.name}' created successfully!\n\n"
        f"Description: {args.description or 'No description provided'}\n"
        f"Content length: {len(args.content)} characters\n\n"
        "This instruction can now be referenced in workspaces and will be available "
        "in the resources list for easy access."
    )


async def update_global_instructions(args: UpdateGlobalInstructionsInput, ctx: ToolContext) -> Result[str]:
    result = await ctx.instructions.update_global_instructions(args.content, append=args.append)
    if not result.is_ok:
        return result
    mode = "updated (appended)" if args.append else "updated (replaced)"
    return Ok(
        f"Global instructions {mode} successfully!\n\n"
        f"Content length: {len(result.value.content)} characters\n\n"
        "These instructions are loaded in every session. "
        "The changes will take effect in new conversations."
    )


_INSTRUCTION_SORT_KEYS = {
    "name": lambda i: i.name,
    "created": lambda i: i.created_at,
    "modified": lambda i: i.modified_at,
    "size": lambda i: i.size,
}


def _preview(content: str) -> str:
    text = content[:PREVIEW_LENGTH] + "..." if len(content) > PREVIEW_LENGTH else content
    return text.replace("\n", " ")


async def list_shared_instructions(args: ListSharedInstructionsInput, ctx: ToolContext) -> Result[str]:
    result = await ctx.instructions.list_shared_instructions()
    if not result.is_ok:
        return result

    instructions = sorted(result.value, key=_INSTRUCTION_SORT_KEYS[args.sort_by])
    if not instructions:
        return Ok(
            "No shared instructions found. "
            "Create your first shared instruction using the create_shared_instruction tool."
        )

    items = []
    for instruction in instructions:
        item = f"• **{instruction.name}**"
        if instruction.description:
            item += f" - {instruction.description}"
        size_kb = round(instruction.size / 1024, 1)
        item += f" ({size_kb}KB, modified: {format_date(instruction.modified_at)})"
        if args.include_content:
            item += f"\n  Preview: {_preview(instruction.content)}"
        items.append(item)

    return Ok(
        f"Found {len(instructions)} shared instruction(s):\n\n"
        + "\n\n".join(items)
        + "\n\nThese instructions can be referenced in workspaces and are available in the resources list."
    )


TOOLS = [
    ToolHandler(
        name="create_shared_instruction",
        description="Create a reusable shared instruction that can be referenced from any workspace",
        input_model=CreateSharedInstructionInput,
        execute=create_shared_instruction,
    ),
    ToolHandler(
        name="update_global_instructions",
        description="Replace or append to the global instructions that apply to all workspaces",
        input_model=UpdateGlobalInstructionsInput,
        execute=update_global_instructions,
    ),
    ToolHandler(
        name="list_shared_instructions",
        description="List all shared instructions with optional content previews",
        input_model=ListSharedInstructionsInput,
        execute=list_shared_instructions,
    ),
]
