"""Path containment checks.

The check is purely lexical: it never touches the filesystem, so a traversal
attempt is rejected whether or not the target exists.
"""

from __future__ import annotations

import os
from pathlib import Path

from ..result import ErrorKind, Ok, Result, fail


def resolve_within(base: str | Path, relative: str) -> Result[Path]:
    """Join ``relative`` onto ``base`` and make sure it stays inside ``base``.

    :param base: directory the result must be contained in
    :param relative: user supplied path, relative to ``base``
    :returns: ``Ok(absolute_path)`` or a ``SecurityViolation`` failure
    """
    base_abs = os.path.normpath(os.path.abspath(base))
    target = os.path.normpath(os.path.join(base_abs, relative))
    if target != base_abs and not target.startswith(base_abs + os.sep):
        return fail(
            ErrorKind.SECURITY_VIOLATION,
            f"Path '{relative}' resolves outside of '{base}'",
        )
    return Ok(Path(target))
