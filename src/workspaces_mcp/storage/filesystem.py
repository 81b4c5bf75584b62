"""Filesystem abstraction.

This module defines the filesystem interface used by the repositories to read,
write, list and delete files under the workspace root.  ``LocalFileSystem``
runs the blocking calls in a worker thread via ``anyio.to_thread.run_sync``.

For testing, an in-memory implementation is available in tests/conftest.py.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import partial
from pathlib import Path
from typing import Protocol

from anyio import to_thread


@dataclass(frozen=True)
class FileStats:
    is_file: bool
    is_directory: bool
    size: int
    created_at: datetime
    modified_at: datetime
    is_symlink: bool = False


class FileSystemProvider(Protocol):
    """Interface for a filesystem provider.

    Every method raises ``OSError`` subclasses on failure: ``FileNotFoundError``
    for missing targets and ``FileExistsError`` when an exclusive create finds
    the target already present.
    """

    async def exists(self, path: Path) -> bool:
        ...

    async def is_directory(self, path: Path) -> bool:
        ...

    async def read_text(self, path: Path) -> str:
        ...

    async def write_text(self, path: Path, content: str, *, exclusive: bool = False) -> None:
        ...

    async def delete_file(self, path: Path) -> None:
        ...

    async def list_directory(self, path: Path) -> list[str]:
        ...

    async def create_directory(self, path: Path, *, exist_ok: bool = True) -> None:
        ...

    async def delete_directory(self, path: Path) -> None:
        ...

    async def stat(self, path: Path) -> FileStats:
        ...


class LocalFileSystem:
    """Provider backed by the local disk."""

    async def exists(self, path: Path) -> bool:
        return await to_thread.run_sync(path.exists)

    async def is_directory(self, path: Path) -> bool:
        return await to_thread.run_sync(path.is_dir)

    async def read_text(self, path: Path) -> str:
        return await to_thread.run_sync(partial(path.read_text, encoding="utf-8"))

    async def write_text(self, path: Path, content: str, *, exclusive: bool = False) -> None:
        """Write ``content`` to ``path``.

        Exclusive writes fail with ``FileExistsError`` if the file exists;
        other writes atomically replace the target.
        """
        if exclusive:
            await to_thread.run_sync(partial(_exclusive_write, path, content))
        else:
            await to_thread.run_sync(partial(_atomic_write, path, content))

    async def delete_file(self, path: Path) -> None:
        await to_thread.run_sync(path.unlink)

    async def list_directory(self, path: Path) -> list[str]:
        return await to_thread.run_sync(partial(_list_directory, path))

    async def create_directory(self, path: Path, *, exist_ok: bool = True) -> None:
        await to_thread.run_sync(partial(_make_directory, path, exist_ok))

    async def delete_directory(self, path: Path) -> None:
        await to_thread.run_sync(shutil.rmtree, path)

    async def stat(self, path: Path) -> FileStats:
        return await to_thread.run_sync(partial(_stat, path))


# -- Sync helpers (run in thread pool) -----------------------------------------


def _atomic_write(path: Path, data: str) -> None:
    """Write data atomically: temp file + rename.

    The temp file is created in the same directory so ``os.replace`` is atomic.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def _exclusive_write(path: Path, data: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "x", encoding="utf-8") as f:
        f.write(data)


def _make_directory(path: Path, exist_ok: bool) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.mkdir(exist_ok=exist_ok)


def _list_directory(path: Path) -> list[str]:
    return sorted(entry.name for entry in path.iterdir())


def _stat(path: Path) -> FileStats:
    st = path.stat()
    # st_birthtime is only available on some platforms.
    created = getattr(st, "st_birthtime", None) or st.st_ctime
    return FileStats(
        is_file=path.is_file(),
        is_directory=path.is_dir(),
        size=st.st_size,
        created_at=datetime.fromtimestamp(created, tz=timezone.utc),
        modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        is_symlink=path.is_symlink(),
    )
