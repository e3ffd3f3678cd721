"""Error taxonomy and outcome types.

Every fault the core can report is one of the ``ErrorKind`` values below.
Services return ``Ok`` or ``Failure`` instead of raising, and the HTTP layer
turns a ``Failure`` into a response through ``ERROR_STATUS`` only.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")


class ErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    UNAUTHENTICATED = "unauthenticated"
    VALIDATION_FAILED = "validation_failed"
    INVALID_STATE = "invalid_state"
    STORAGE_FAILURE = "storage_failure"
    UNHANDLED = "unhandled"


ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.VALIDATION_FAILED: 422,
    ErrorKind.INVALID_STATE: 400,
    ErrorKind.STORAGE_FAILURE: 500,
    ErrorKind.UNHANDLED: 500,
}

# Default user-facing message per kind
DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.NOT_FOUND: "Resource not found",
    ErrorKind.FORBIDDEN: "You are not allowed to access this resource.",
    ErrorKind.UNAUTHENTICATED: "Unauthenticated",
    ErrorKind.VALIDATION_FAILED: "Validation failed",
    ErrorKind.INVALID_STATE: "Operation not allowed in the current state",
    ErrorKind.STORAGE_FAILURE: "A database error occurred",
    ErrorKind.UNHANDLED: "Server error",
}

PROJECT_NOT_FOUND = "Project not found"
TASK_NOT_FOUND = "Task not found"
PROJECT_NOT_DELETED = "Project is not deleted"
RESTORE_FAILED = "Error restoring project"
RESTORE_DENIED = "Unauthorized"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """A classified fault.

    ``errors`` is only populated for VALIDATION_FAILED and maps a field name
    to a list of violation descriptions.
    """

    kind: ErrorKind
    message: str = ""
    errors: dict[str, list[str]] | None = None

    def __post_init__(self) -> None:
        if not self.message:
            object.__setattr__(self, "message", DEFAULT_MESSAGES[self.kind])

    @property
    def ok(self) -> bool:
        return False

    @property
    def status_code(self) -> int:
        return ERROR_STATUS[self.kind]


Outcome: TypeAlias = Ok[T] | Failure


def not_found(message: str = "") -> Failure:
    return Failure(ErrorKind.NOT_FOUND, message)


def forbidden(message: str = "") -> Failure:
    return Failure(ErrorKind.FORBIDDEN, message)


def invalid_state(message: str = "") -> Failure:
    return Failure(ErrorKind.INVALID_STATE, message)


def storage_failure(message: str = "") -> Failure:
    return Failure(ErrorKind.STORAGE_FAILURE, message)


class TaskboardError(Exception):
    """Raised at the HTTP seam to carry a Failure to the exception handler."""

    def __init__(self, failure: Failure):
        self.failure = failure
        super().__init__(failure.message)
