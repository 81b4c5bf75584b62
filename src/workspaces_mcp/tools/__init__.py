"""Tool module exports for Workspaces MCP.

Each submodule exposes plain async tool functions plus a ``TOOLS`` list of
``ToolHandler`` records that the application registers at startup.

Usage:

    from workspaces_mcp.tools import builtin_tools
    registry.register_all(builtin_tools())
"""

from . import instruction_tools, workspace_tools
from .registry import ToolCallResult, ToolContext, ToolHandler, ToolRegistry


def builtin_tools() -> list[ToolHandler]:
    """Return the handlers registered by default, in listing order."""
    return [*workspace_tools.TOOLS, *instruction_tools.TOOLS]


__all__ = [
    "ToolCallResult",
    "ToolContext",
    "ToolHandler",
    "ToolRegistry",
    "builtin_tools",
    "instruction_tools",
    "workspace_tools",
]
