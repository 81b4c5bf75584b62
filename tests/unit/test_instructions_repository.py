"""Unit tests for the instructions repository."""

from pathlib import Path

from workspaces_mcp.constants import DEFAULT_GLOBAL_INSTRUCTIONS, INSTRUCTION_FILE_HEADER
from workspaces_mcp.result import ErrorKind
from workspaces_mcp.storage.instructions_repository import parse_instruction, render_instruction

SHARED = Path("/workspaces/SHARED_INSTRUCTIONS")


def test_render_and_parse_with_description():
    text = render_instruction("style", "Use tabs.\n", "Formatting rules")
    assert text.startswith(INSTRUCTION_FILE_HEADER)
    assert "# style\n\n> Formatting rules\n\nUse tabs.\n" in text
    assert parse_instruction("style", text) == ("Formatting rules", "Use tabs.\n")


def test_parse_without_description_or_header():
    assert parse_instruction("style", render_instruction("style", "Body")) == (None, "Body")
    assert parse_instruction("style", "just text") == (None, "just text")


async def test_create_and_get_shared(instructions_repo, fs):
    created = await instructions_repo.create_shared("python", "Use type hints.", "Python rules")
    assert created.is_ok
    assert SHARED / "python.md" in fs.files

    fetched = await instructions_repo.get_shared("python")
    assert fetched.value.content == "Use type hints."
    assert fetched.value.description == "Python rules"
    assert fetched.value.size == len("Use type hints.")


async def test_create_shared_is_exclusive(instructions_repo):
    await instructions_repo.create_shared("python", "one")
    result = await instructions_repo.create_shared("python", "two")
    assert result.error.kind == ErrorKind.ALREADY_EXISTS
    assert (await instructions_repo.get_shared("python")).value.content == "one"


async def test_get_and_delete_missing(instructions_repo):
    assert (await instructions_repo.get_shared("nope")).error.kind == ErrorKind.NOT_FOUND
    assert (await instructions_repo.delete_shared("nope")).error.kind == ErrorKind.NOT_FOUND


async def test_update_shared_replaces_content(instructions_repo):
    await instructions_repo.create_shared("python", "old", "desc")

    result = await instructions_repo.update_shared("python", "new", "desc")

    assert result.value.content == "new"
    assert (await instructions_repo.get_shared("python")).value.content == "new"
    missing = await instructions_repo.update_shared("ghost", "x")
    assert missing.error.kind == ErrorKind.NOT_FOUND


async def test_list_shared_skips_global_and_bad_files(instructions_repo, fs):
    await instructions_repo.create_shared("zeta", "z")
    await instructions_repo.create_shared("alpha", "a")
    await instructions_repo.create_shared("locked", "l")
    await instructions_repo.update_global("global content")
    await fs.write_text(SHARED / "bad name.md", "ignored")
    await fs.write_text(SHARED / "notes.txt", "ignored")
    fs.fail_reads.add(SHARED / "locked.md")

    result = await instructions_repo.list_shared()

    assert [i.name for i in result.value] == ["alpha", "zeta"]


async def test_list_shared_missing_folder(instructions_repo):
    result = await instructions_repo.list_shared()
    assert result.is_ok
    assert result.value == []


async def test_global_defaults_are_materialized(instructions_repo, fs):
    """Test that the first read writes the default global instructions."""
    assert SHARED / "GLOBAL.md" not in fs.files

    result = await instructions_repo.get_global()

    assert result.value.content == DEFAULT_GLOBAL_INSTRUCTIONS
    assert fs.files[SHARED / "GLOBAL.md"] == INSTRUCTION_FILE_HEADER + DEFAULT_GLOBAL_INSTRUCTIONS


async def test_global_defaults_served_when_root_is_read_only(instructions_repo, fs):
    fs.fail_writes = True

    result = await instructions_repo.get_global()

    assert result.value.content == DEFAULT_GLOBAL_INSTRUCTIONS
    assert SHARED / "GLOBAL.md" not in fs.files


async def test_global_round_trip_is_exact(instructions_repo):
    await instructions_repo.update_global("X")
    assert (await instructions_repo.get_global()).value.content == "X"


async def test_global_read_failure(instructions_repo, fs):
    await instructions_repo.update_global("X")
    fs.fail_reads.add(SHARED / "GLOBAL.md")
    result = await instructions_repo.get_global()
    assert result.error.kind == ErrorKind.UNEXPECTED
