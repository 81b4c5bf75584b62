"""Integration tests against the real filesystem.

These tests build the full application on ``LocalFileSystem`` rooted in a
temporary directory.
"""

import json
import os

import pytest

from workspaces_mcp.app import build_application
from workspaces_mcp.config import Config
from workspaces_mcp.result import ErrorKind
from workspaces_mcp.storage.filesystem import LocalFileSystem


@pytest.fixture
def local_app(tmp_path):
    return build_application(Config(workspaces_root=tmp_path / "root", event_logging=False))


async def test_atomic_write_replaces_content(tmp_path):
    fs = LocalFileSystem()
    target = tmp_path / "nested" / "file.md"

    await fs.write_text(target, "one")
    await fs.write_text(target, "two")

    assert target.read_text(encoding="utf-8") == "two"
    assert [p.name for p in target.parent.iterdir()] == ["file.md"]


async def test_exclusive_primitives(tmp_path):
    fs = LocalFileSystem()
    await fs.write_text(tmp_path / "a.md", "x", exclusive=True)
    with pytest.raises(FileExistsError):
        await fs.write_text(tmp_path / "a.md", "y", exclusive=True)

    await fs.create_directory(tmp_path / "ws", exist_ok=False)
    with pytest.raises(FileExistsError):
        await fs.create_directory(tmp_path / "ws", exist_ok=False)
    await fs.create_directory(tmp_path / "ws")


async def test_stat_and_listing(tmp_path):
    fs = LocalFileSystem()
    await fs.write_text(tmp_path / "b.txt", "hello")
    await fs.create_directory(tmp_path / "a")

    assert await fs.list_directory(tmp_path) == ["a", "b.txt"]
    stats = await fs.stat(tmp_path / "b.txt")
    assert stats.is_file and not stats.is_directory
    assert stats.size == 5
    assert (await fs.stat(tmp_path / "a")).is_directory


async def test_workspace_lifecycle_on_disk(local_app, tmp_path):
    root = tmp_path / "root"
    created = await local_app.tools.call_tool("create_workspace", {"name": "demo", "description": "d"})
    assert not created.is_error

    assert (root / "demo" / "README.md").read_text(encoding="utf-8") == "# demo\n\nd\n"
    metadata = json.loads((root / "demo" / ".workspace.json").read_text(encoding="utf-8"))
    assert metadata["description"] == "d"

    (root / "demo" / "src").mkdir()
    (root / "demo" / "src" / "main.py").write_text("print()", encoding="utf-8")
    info = await local_app.workspaces.get_workspace_info("demo")
    assert sorted(f.path for f in info.value.files) == ["README.md", "src/main.py"]

    escape = await local_app.workspaces.validate_workspace_file("demo", "../../etc/passwd")
    assert escape.error.kind == ErrorKind.SECURITY_VIOLATION
    inside = await local_app.workspaces.validate_workspace_file("demo", "src/main.py")
    assert inside.value == root / "demo" / "src" / "main.py"

    assert (await local_app.workspaces.delete_workspace("demo")).is_ok
    assert not (root / "demo").exists()


async def test_instructions_on_disk(local_app, tmp_path):
    shared = tmp_path / "root" / "SHARED_INSTRUCTIONS"

    default = await local_app.resources.read_resource("instruction://global")
    assert default.value.text.startswith("# Global Instructions")
    assert (shared / "GLOBAL.md").exists()

    await local_app.tools.call_tool("update_global_instructions", {"content": "X"})
    assert (await local_app.resources.read_resource("instruction://global")).value.text == "X"

    await local_app.tools.call_tool(
        "create_shared_instruction", {"name": "style", "content": "Use tabs", "description": "Formatting"}
    )
    (shared / "broken.md").write_bytes(b"\xff\xfe\x00bad")

    listing = await local_app.instructions.list_shared_instructions()
    assert [i.name for i in listing.value] == ["style"]
    assert listing.value[0].description == "Formatting"

    uris = [e.uri for e in await local_app.resources.list_resources()]
    assert uris == ["instruction://shared/style", "instruction://global"]


async def test_workspace_created_outside_server(local_app, tmp_path):
    (tmp_path / "root" / "manual").mkdir(parents=True)

    listing = await local_app.workspaces.list_workspaces()

    assert [ws.name for ws in listing.value] == ["manual"]
    assert listing.value[0].has_instructions is False


async def test_links_inside_workspace_do_not_break_reads(local_app, tmp_path):
    await local_app.workspaces.create_workspace("demo")
    workspace = tmp_path / "root" / "demo"
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.txt").write_text("x", encoding="utf-8")
    os.symlink(tmp_path / "nowhere", workspace / "broken-link")
    os.symlink(outside, workspace / "linked-dir", target_is_directory=True)

    info = await local_app.workspaces.get_workspace_info("demo")
    assert [f.path for f in info.value.files] == ["README.md"]

    resource = await local_app.resources.read_resource("workspace://demo")
    assert json.loads(resource.value.text)["name"] == "demo"


async def test_stat_reports_links(tmp_path):
    fs = LocalFileSystem()
    (tmp_path / "target").mkdir()
    os.symlink(tmp_path / "target", tmp_path / "link", target_is_directory=True)

    assert (await fs.stat(tmp_path / "link")).is_symlink
    assert not (await fs.stat(tmp_path / "target")).is_symlink
