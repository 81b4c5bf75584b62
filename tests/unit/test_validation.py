"""Unit tests for name, content and path validation."""

import pytest

from workspaces_mcp.constants import MAX_CONTENT_LENGTH
from workspaces_mcp.policy import (
    resolve_within,
    validate_content,
    validate_instruction_name,
    validate_workspace_name,
)
from workspaces_mcp.result import ErrorKind


@pytest.mark.parametrize("name", ["project", "my-project", "my_project_2", "A", "a" * 100])
def test_valid_workspace_names(name):
    """Test that well-formed names are accepted unchanged."""
    result = validate_workspace_name(name)
    assert result.is_ok
    assert result.value == name


@pytest.mark.parametrize(
    "name",
    ["", "a" * 101, "has space", "dot.name", "slash/name", "../up", "-lead", "trail-", "SHARED_INSTRUCTIONS"],
)
def test_invalid_workspace_names(name):
    """Test that malformed or reserved names are rejected."""
    result = validate_workspace_name(name)
    assert not result.is_ok
    assert result.error.kind == ErrorKind.INVALID_NAME


def test_workspace_name_must_be_string():
    assert validate_workspace_name(None).error.kind == ErrorKind.INVALID_NAME


def test_global_is_reserved_for_instructions_only():
    """Test that GLOBAL is a valid workspace name but not an instruction name."""
    assert validate_workspace_name("GLOBAL").is_ok
    result = validate_instruction_name("GLOBAL")
    assert result.error.kind == ErrorKind.INVALID_NAME
    assert "reserved" in result.error.message


def test_content_limit():
    assert validate_content("").is_ok
    assert validate_content("x" * MAX_CONTENT_LENGTH).is_ok
    result = validate_content("x" * (MAX_CONTENT_LENGTH + 1))
    assert result.error.kind == ErrorKind.CONTENT_TOO_LARGE


def test_resolve_within_accepts_nested_paths(tmp_path):
    result = resolve_within(tmp_path, "src/main.py")
    assert result.is_ok
    assert result.value == tmp_path / "src" / "main.py"


@pytest.mark.parametrize("relative", ["../../etc/passwd", "..", "/etc/passwd", "src/../../other"])
def test_resolve_within_rejects_escapes(tmp_path, relative):
    """Test that traversal attempts are rejected without touching the disk."""
    result = resolve_within(tmp_path / "missing-workspace", relative)
    assert result.error.kind == ErrorKind.SECURITY_VIOLATION


def test_resolve_within_rejects_sibling_prefix(tmp_path):
    """Test that a sibling sharing a name prefix is not treated as inside."""
    result = resolve_within(tmp_path / "proj", "../proj-evil/file.txt")
    assert result.error.kind == ErrorKind.SECURITY_VIOLATION
