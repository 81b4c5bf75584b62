"""Global constants for Workspaces MCP.

These values serve as defaults for configuration and limit enforcement.
Changing the naming rules or file layout breaks compatibility with existing
workspace roots; override environment variables instead.
"""

import os

# Filesystem layout
DEFAULT_WORKSPACES_ROOT = os.path.join("~", "Documents", "workspaces")
SHARED_INSTRUCTIONS_FOLDER = "SHARED_INSTRUCTIONS"
GLOBAL_INSTRUCTIONS_NAME = "GLOBAL"
INSTRUCTION_EXTENSION = ".md"
METADATA_FILENAME = ".workspace.json"
README_FILENAME = "README.md"

# Naming rules
NAME_PATTERN = r"^[a-zA-Z0-9_-]+$"
MAX_NAME_LENGTH = 100
RESERVED_WORKSPACE_NAMES = frozenset({SHARED_INSTRUCTIONS_FOLDER})
RESERVED_INSTRUCTION_NAMES = frozenset({GLOBAL_INSTRUCTIONS_NAME, SHARED_INSTRUCTIONS_FOLDER})

# Limits
MAX_CONTENT_LENGTH = 100_000
MAX_DESCRIPTION_LENGTH = 500
MAX_TEMPLATE_LENGTH = 50
PREVIEW_LENGTH = 200

# Server identity
SERVER_NAME = os.environ.get("MCP_SERVER_NAME", "workspaces-mcp")
SERVER_VERSION = "1.0.0"

# Written at the top of every instruction file so that tools reading the
# folder directly know the file is managed.
INSTRUCTION_FILE_HEADER = (
    "<!-- This file is managed by Workspaces MCP. "
    "Edit it through the MCP tools to keep metadata consistent. -->\n\n"
)

DEFAULT_GLOBAL_INSTRUCTIONS = """# Global Instructions

These instructions apply to every workspace managed by Workspaces MCP.

## General Guidelines

- Keep project files organized inside their workspace folder.
- Document important decisions in the workspace README.
- Prefer small, focused changes and describe them clearly.

## Shared Instructions

Reusable guidance lives in the SHARED_INSTRUCTIONS folder and can be
referenced from any workspace.
"""
