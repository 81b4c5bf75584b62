"""Policy utilities for Workspaces MCP."""

from .limits import validate_content
from .names import validate_instruction_name, validate_workspace_name
from .paths import resolve_within

__all__ = [
    "validate_workspace_name",
    "validate_instruction_name",
    "validate_content",
    "resolve_within",
]
