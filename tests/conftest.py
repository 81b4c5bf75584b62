"""Pytest configuration and fixtures for Workspaces MCP tests.

This module provides an InMemoryFileSystem that can be used for testing
without touching the real disk, plus fixtures that assemble repositories,
services and a full application on top of it.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from workspaces_mcp.app import build_application
from workspaces_mcp.config import Config
from workspaces_mcp.resources import ResourceResolver
from workspaces_mcp.services.instructions_service import InstructionsService
from workspaces_mcp.services.workspace_service import WorkspaceService
from workspaces_mcp.storage.filesystem import FileStats
from workspaces_mcp.storage.instructions_repository import InstructionsRepository
from workspaces_mcp.storage.workspace_repository import WorkspaceRepository
from workspaces_mcp.telemetry.events import Event, EventBus

ROOT = Path("/workspaces")


class FakeClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


class InMemoryFileSystem:
    """A fake filesystem provider for testing.

    This is ONLY for testing - not used in production.  Paths in
    ``fail_reads`` raise ``PermissionError`` when read.
    """

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.clock = clock or FakeClock()
        self.files: dict[Path, str] = {}
        self.dirs: set[Path] = set()
        self.times: dict[Path, tuple[datetime, datetime]] = {}
        self.fail_reads: set[Path] = set()
        self.fail_writes = False

    def _touch(self, path: Path) -> None:
        now = self.clock()
        created = self.times.get(path, (now, now))[0]
        self.times[path] = (created, now)

    def _add_parents(self, path: Path) -> None:
        for parent in path.parents:
            if parent not in self.dirs:
                self.dirs.add(parent)
                self._touch(parent)

    async def exists(self, path: Path) -> bool:
        return path in self.files or path in self.dirs

    async def is_directory(self, path: Path) -> bool:
        return path in self.dirs

    async def read_text(self, path: Path) -> str:
        if path in self.fail_reads:
            raise PermissionError(13, "Permission denied", str(path))
        if path not in self.files:
            raise FileNotFoundError(2, "No such file or directory", str(path))
        return self.files[path]

    async def write_text(self, path: Path, content: str, *, exclusive: bool = False) -> None:
        if self.fail_writes:
            raise OSError(28, "No space left on device", str(path))
        if path in self.dirs:
            raise IsADirectoryError(21, "Is a directory", str(path))
        if exclusive and path in self.files:
            raise FileExistsError(17, "File exists", str(path))
        self._add_parents(path)
        self.files[path] = content
        self._touch(path)

    async def delete_file(self, path: Path) -> None:
        if path not in self.files:
            raise FileNotFoundError(2, "No such file or directory", str(path))
        del self.files[path]
        self.times.pop(path, None)

    async def list_directory(self, path: Path) -> list[str]:
        if path not in self.dirs:
            raise FileNotFoundError(2, "No such file or directory", str(path))
        children = {p.name for p in (*self.files, *self.dirs) if p.parent == path and p != path}
        return sorted(children)

    async def create_directory(self, path: Path, *, exist_ok: bool = True) -> None:
        if path in self.files or (path in self.dirs and not exist_ok):
            raise FileExistsError(17, "File exists", str(path))
        if path in self.dirs:
            return
        if self.fail_writes:
            raise OSError(28, "No space left on device", str(path))
        self._add_parents(path)
        self.dirs.add(path)
        self._touch(path)

    async def delete_directory(self, path: Path) -> None:
        if path not in self.dirs:
            raise FileNotFoundError(2, "No such file or directory", str(path))
        for file in [p for p in self.files if path in p.parents]:
            del self.files[file]
        for directory in [p for p in self.dirs if p == path or path in p.parents]:
            self.dirs.discard(directory)

    async def stat(self, path: Path) -> FileStats:
        if path not in self.files and path not in self.dirs:
            raise FileNotFoundError(2, "No such file or directory", str(path))
        created, modified = self.times[path]
        return FileStats(
            is_file=path in self.files,
            is_directory=path in self.dirs,
            size=len(self.files.get(path, "").encode("utf-8")),
            created_at=created,
            modified_at=modified,
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fs(clock) -> InMemoryFileSystem:
    return InMemoryFileSystem(clock)


@pytest.fixture
def config() -> Config:
    return Config(workspaces_root=ROOT, event_logging=False)


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def published(events) -> list[Event]:
    """Every event published on the ``events`` bus, in order."""
    received: list[Event] = []
    events.subscribe(None, received.append)
    return received


@pytest.fixture
def workspace_repo(fs, clock) -> WorkspaceRepository:
    return WorkspaceRepository(ROOT, fs, clock=clock)


@pytest.fixture
def instructions_repo(fs, clock) -> InstructionsRepository:
    return InstructionsRepository(ROOT, fs, clock=clock)


@pytest.fixture
def workspace_service(workspace_repo, events) -> WorkspaceService:
    return WorkspaceService(workspace_repo, events)


@pytest.fixture
def instructions_service(instructions_repo, events) -> InstructionsService:
    return InstructionsService(instructions_repo, events)


@pytest.fixture
def resolver(workspace_service, instructions_service) -> ResourceResolver:
    return ResourceResolver(workspace_service, instructions_service)


@pytest.fixture
def app(config, fs, clock):
    """A fully assembled application on the in-memory filesystem."""
    return build_application(config, fs, clock)


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch, tmp_path):
    """Keep tests away from the real ~/Documents/workspaces."""
    monkeypatch.setenv("WORKSPACES_ROOT", str(tmp_path / "workspaces"))
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("MCP_SERVER_NAME", raising=False)
    monkeypatch.delenv("EVENT_LOGGING", raising=False)
