"""Workspace tool implementations.

This module exposes operations for creating, listing and inspecting
workspaces.  Each tool validates nothing itself beyond its argument model;
naming rules and existence checks belong to ``WorkspaceService``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ..constants import MAX_DESCRIPTION_LENGTH, MAX_NAME_LENGTH, MAX_TEMPLATE_LENGTH, NAME_PATTERN
from ..result import Ok, Result
from .registry import ToolContext, ToolHandler

logger = logging.getLogger(__name__)


def format_date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")


def format_timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    return f"{round(size / 1024, 1)} KB"


class CreateWorkspaceInput(BaseModel):
    name: str = Field(
        min_length=1,
        max_length=MAX_NAME_LENGTH,
        pattern=NAME_PATTERN,
        description="Workspace name (letters, numbers, hyphens and underscores)",
    )
    description: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    template: str | None = Field(default=None, max_length=MAX_TEMPLATE_LENGTH)


class ListWorkspacesInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    include_metadata: bool = Field(default=True, alias="includeMetadata")
    sort_by: Literal["name", "created", "modified"] = Field(default="name", alias="sortBy")


class GetWorkspaceInfoInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, pattern=NAME_PATTERN)
    include_files: bool = Field(default=False, alias="includeFiles")


async def create_workspace(args: CreateWorkspaceInput, ctx: ToolContext) -> Result[str]:
    """Create a new workspace and describe what was created."""
    logger.info("Creating workspace: %s", args.name)
    result = await ctx.workspaces.create_workspace(
        args.name, description=args.description, template=args.template
    )
    if not result.is_ok:
        return result

    lines = [f"Workspace '{args.name}' created successfully!"]
    if args.description:
        lines.append(f"Description: {args.description}")
    if args.template:
        lines.append(f"Template: {args.template}")
    lines += [
        "",
        "Next steps:",
        "• Add your project files to the workspace directory",
        "• The workspace will appear automatically in your MCP client's resources",
        "• Use shared instructions to customize how the assistant works with this project type",
    ]
    return Ok("\n".join(lines))


_WORKSPACE_SORT_KEYS = {
    "name": lambda ws: ws.name,
    "created": lambda ws: ws.created_at,
    "modified": lambda ws: ws.modified_at,
}


async def list_workspaces(args: ListWorkspacesInput, ctx: ToolContext) -> Result[str]:
    result = await ctx.workspaces.list_workspaces()
    if not result.is_ok:
        return result

    workspaces = sorted(result.value, key=_WORKSPACE_SORT_KEYS[args.sort_by])
    if not workspaces:
        return Ok("No workspaces found. Create your first workspace using the create_workspace tool.")

    lines = []
    for ws in workspaces:
        if args.include_metadata:
            lines.append(
                f"• {ws.name} - {ws.description or 'No description'} (Created: {format_date(ws.created_at)})"
            )
        else:
            lines.append(f"• {ws.name}")
    return Ok(f"Found {len(workspaces)} workspace(s):\n" + "\n".join(lines))


async def get_workspace_info(args: GetWorkspaceInfoInput, ctx: ToolContext) -> Result[str]:
    result = await ctx.workspaces.get_workspace_info(args.name)
    if not result.is_ok:
        return result

    info = result.value
    meta = info.metadata
    lines = [
        f"Workspace Information: {meta.name}",
        "",
        f"Description: {meta.description or 'No description provided'}",
        f"Path: {info.path}",
        f"Created: {format_timestamp(meta.created_at)}",
        f"Last Modified: {format_timestamp(meta.modified_at)}",
    ]
    if meta.template:
        lines.append(f"Template: {meta.template}")
    lines.append(f"Files: {info.file_count} ({format_size(info.size)})")

    if args.include_files:
        lines.append("")
        if info.files:
            lines += [f"• {f.path} ({format_size(f.size)})" for f in info.files]
        else:
            lines.append("No files in this workspace.")
    return Ok("\n".join(lines))


TOOLS = [
    ToolHandler(
        name="create_workspace",
        description="Create a new workspace with optional description and template",
        input_model=CreateWorkspaceInput,
        execute=create_workspace,
    ),
    ToolHandler(
        name="list_workspaces",
        description="List all available workspaces with their metadata",
        input_model=ListWorkspacesInput,
        execute=list_workspaces,
    ),
    ToolHandler(
        name="get_workspace_info",
        description="Get detailed information about a specific workspace",
        input_model=GetWorkspaceInfoInput,
        execute=get_workspace_info,
    ),
]
