"""Result type and error taxonomy shared by every layer.

Repositories, services and the resource resolver report failures by value:
each public operation returns ``Ok(value)`` or ``Err(Failure(kind, message))``
and never raises across its boundary.  ``ErrorKind`` is closed; adding a
member is an API change for every caller that switches on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure categories reported by the engine."""

    INVALID_NAME = "InvalidName"
    CONTENT_TOO_LARGE = "ContentTooLarge"
    ALREADY_EXISTS = "AlreadyExists"
    NOT_FOUND = "NotFound"
    CORRUPT_METADATA = "CorruptMetadata"
    SECURITY_VIOLATION = "SecurityViolation"
    INVALID_URI = "InvalidUri"
    UNSUPPORTED_SCHEME = "UnsupportedScheme"
    EMPTY_PATH = "EmptyPath"
    INVALID_INSTRUCTION_PATH = "InvalidInstructionPath"
    UNKNOWN_TOOL = "UnknownTool"
    SCHEMA_VALIDATION_FAILED = "SchemaValidationFailed"
    UNEXPECTED = "Unexpected"


@dataclass(frozen=True)
class Failure:
    """A categorized failure with a human readable message."""

    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "message": self.message}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: Failure

    @property
    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


def fail(kind: ErrorKind, message: str) -> Err:
    """Shorthand for ``Err(Failure(kind, message))``."""
    return Err(Failure(kind, message))


def from_os_error(exc: OSError, subject: str) -> Err:
    """Translate a filesystem error into a failure about ``subject``.

    ``FileNotFoundError`` maps to ``NotFound`` and ``FileExistsError`` to
    ``AlreadyExists``; everything else is ``Unexpected``.
    """
    if isinstance(exc, FileNotFoundError):
        return fail(ErrorKind.NOT_FOUND, f"{subject} not found")
    if isinstance(exc, FileExistsError):
        return fail(ErrorKind.ALREADY_EXISTS, f"{subject} already exists")
    return fail(ErrorKind.UNEXPECTED, f"Filesystem error for {subject}: {exc.strerror or exc}")


def describe_exception(exc: BaseException) -> str:
    """Return the message carried by a raised fault.

    Faults without a message are described by their type name.
    """
    message: Any = exc.args[0] if len(exc.args) == 1 else str(exc)
    if not isinstance(message, str):
        message = str(message)
    return message or type(exc).__name__
