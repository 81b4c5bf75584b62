"""Filesystem-backed repositories for workspaces and instructions."""

from .filesystem import FileStats, FileSystemProvider, LocalFileSystem
from .instructions_repository import InstructionsRepository
from .models import GlobalInstructions, SharedInstruction, WorkspaceFile, WorkspaceInfo, WorkspaceMetadata
from .workspace_repository import WorkspaceRepository

__all__ = [
    "FileStats",
    "FileSystemProvider",
    "LocalFileSystem",
    "InstructionsRepository",
    "WorkspaceRepository",
    "GlobalInstructions",
    "SharedInstruction",
    "WorkspaceFile",
    "WorkspaceInfo",
    "WorkspaceMetadata",
]
