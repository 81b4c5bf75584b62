"""Business services on top of the repositories."""

from .instructions_service import InstructionsService
from .workspace_service import WorkspaceService

__all__ = ["InstructionsService", "WorkspaceService"]
