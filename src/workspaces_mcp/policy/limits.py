"""Limit enforcement for instruction content."""

from __future__ import annotations

from ..constants import MAX_CONTENT_LENGTH
from ..result import ErrorKind, Ok, Result, fail


def validate_content(content: str) -> Result[str]:
    """Ensure that content does not exceed the configured size limit.

    Empty content is allowed.

    :param content: markdown text to store
    :returns: ``Ok(content)`` or a ``ContentTooLarge`` failure
    """
    if len(content) > MAX_CONTENT_LENGTH:
        return fail(
            ErrorKind.CONTENT_TOO_LARGE,
            f"Content has {len(content)} characters which exceeds the limit of {MAX_CONTENT_LENGTH}",
        )
    return Ok(content)
