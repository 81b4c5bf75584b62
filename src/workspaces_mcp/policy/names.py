"""Name rules for workspaces and shared instructions.

Names are used verbatim as directory and file names, so the character set is
restricted to ASCII letters, digits, underscores and hyphens.
"""

from __future__ import annotations

import re

from ..constants import (
    MAX_NAME_LENGTH,
    NAME_PATTERN,
    RESERVED_INSTRUCTION_NAMES,
    RESERVED_WORKSPACE_NAMES,
)
from ..result import ErrorKind, Ok, Result, fail

_NAME_RE = re.compile(NAME_PATTERN)


def _check_name(name: object, label: str, reserved: frozenset[str]) -> Result[str]:
    if not isinstance(name, str) or not name:
        return fail(ErrorKind.INVALID_NAME, f"{label} name is required")
    if len(name) > MAX_NAME_LENGTH:
        return fail(
            ErrorKind.INVALID_NAME,
            f"{label} name must be {MAX_NAME_LENGTH} characters or less",
        )
    if not _NAME_RE.fullmatch(name):
        return fail(
            ErrorKind.INVALID_NAME,
            f"{label} name '{name}' may only contain letters, numbers, underscores and hyphens",
        )
    if name.startswith("-") or name.endswith("-"):
        return fail(ErrorKind.INVALID_NAME, f"{label} name '{name}' cannot start or end with a hyphen")
    if name in reserved:
        return fail(ErrorKind.INVALID_NAME, f"'{name}' is a reserved name")
    return Ok(name)


def validate_workspace_name(name: object) -> Result[str]:
    """Validate a workspace name.

    :param name: candidate name
    :returns: ``Ok(name)`` or an ``InvalidName`` failure
    """
    return _check_name(name, "Workspace", RESERVED_WORKSPACE_NAMES)


def validate_instruction_name(name: object) -> Result[str]:
    """Validate a shared instruction name.  ``GLOBAL`` is reserved."""
    return _check_name(name, "Instruction", RESERVED_INSTRUCTION_NAMES)
