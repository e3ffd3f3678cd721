"""Plain entity records exchanged between stores, services and presenters."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum


class Priority(StrEnum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Custom total order for sorting by priority; unknown or missing values rank 0
PRIORITY_RANK: dict[str, int] = {
    Priority.LOW.value: 1,
    Priority.MEDIUM.value: 2,
    Priority.HIGH.value: 3,
}


def priority_rank(value: str | None) -> int:
    """Return the sort rank of a priority value (0 for unknown or None)."""
    if value is None:
        return 0
    return PRIORITY_RANK.get(value, 0)


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str


@dataclass
class Project:
    """A project owned by exactly one user.

    ``deleted_at`` is the soft-delete marker: set means the project is trashed.
    """

    id: int
    owner_user_id: int
    title: str
    description: str | None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    @property
    def is_trashed(self) -> bool:
        return self.deleted_at is not None


@dataclass
class Task:
    """A task scoped to one project.

    Tasks have no ownership field of their own; ``project`` carries the parent
    record so authorization can resolve the owner without another store read.
    """

    id: int
    project_id: int
    title: str
    created_at: datetime
    updated_at: datetime
    is_done: bool = False
    priority: str | None = None
    due_date: date | None = None
    project: Project | None = field(default=None, repr=False, compare=False)
