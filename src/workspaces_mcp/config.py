"""Configuration loading for Workspaces MCP.

This module loads environment variables from a `.env` file using
`python-dotenv` and populates a `Config` object.

Optional variables with defaults:
- WORKSPACES_ROOT (default: '~/Documents/workspaces')
- LOG_LEVEL (default: 'INFO')
- MCP_SERVER_NAME (default: 'workspaces-mcp')
- EVENT_LOGGING (default: enabled; '0', 'false', 'no' or 'off' disable it)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .constants import (
    DEFAULT_WORKSPACES_ROOT,
    GLOBAL_INSTRUCTIONS_NAME,
    INSTRUCTION_EXTENSION,
    SERVER_NAME,
    SHARED_INSTRUCTIONS_FOLDER,
)

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class Config:
    """Configuration values loaded from the environment."""

    workspaces_root: Path
    log_level: str = "INFO"
    server_name: str = SERVER_NAME
    event_logging: bool = True

    @property
    def shared_instructions_path(self) -> Path:
        return self.workspaces_root / SHARED_INSTRUCTIONS_FOLDER

    @property
    def global_instructions_path(self) -> Path:
        return self.shared_instructions_path / f"{GLOBAL_INSTRUCTIONS_NAME}{INSTRUCTION_EXTENSION}"

    @classmethod
    def load_from_env(cls) -> Config:
        """Load configuration from environment variables.

        The `.env` file is loaded if present.  Every variable is optional.
        """
        load_dotenv()

        # Optional: WORKSPACES_ROOT with default, '~' expanded
        root = os.getenv("WORKSPACES_ROOT") or DEFAULT_WORKSPACES_ROOT
        workspaces_root = Path(root).expanduser()

        # Optional: LOG_LEVEL with default
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        server_name = os.getenv("MCP_SERVER_NAME") or SERVER_NAME

        event_logging = os.getenv("EVENT_LOGGING", "1").strip().lower() not in _FALSE_VALUES

        return cls(
            workspaces_root=workspaces_root,
            log_level=log_level,
            server_name=server_name,
            event_logging=event_logging,
        )
