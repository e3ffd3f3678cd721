"""EntityStore Protocol: the persistence abstraction used by services.

Implementations:
- InMemoryStore: dict-backed, for tests and local runs
- SqlAlchemyStore: async SQLAlchemy against the configured database

Every method is a single unit of work. Any unexpected persistence fault is
raised as StorageError; "not found" is reported as None / False, never raised.
Returned tasks always carry their parent project (trashed or not) so
authorization can resolve ownership without another read.
"""

from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from taskboard.domain.entities import Project, Task, User
from taskboard.domain.pagination import Page
from taskboard.domain.project_query import ProjectQuery
from taskboard.domain.task_query import TaskQuery


class StorageError(Exception):
    """Raised when the underlying store fails unexpectedly."""


# Fields callers may change after creation
PROJECT_MUTABLE_FIELDS = frozenset({"title", "description"})
TASK_MUTABLE_FIELDS = frozenset({"title", "is_done", "priority", "due_date"})


@runtime_checkable
class EntityStore(Protocol):
    async def get_user(self, user_id: int) -> User | None:
        ...

    async def create_user(self, name: str, email: str) -> User:
        ...

    async def get_project(self, project_id: int, *, include_trashed: bool = False) -> Project | None:
        """Read a project by id; trashed projects only when ``include_trashed``."""
        ...

    async def list_projects(self, query: ProjectQuery) -> Page[Project]:
        ...

    async def create_project(self, owner_user_id: int, title: str, description: str | None) -> Project:
        ...

    async def update_project(self, project_id: int, changes: dict[str, Any]) -> Project | None:
        """Apply ``changes`` to an active project. Returns None if it does not exist."""
        ...

    async def soft_delete_project(self, project_id: int, now: datetime) -> bool:
        """Set ``deleted_at`` on an active project. False if none was active."""
        ...

    async def restore_if_trashed(self, project_id: int, now: datetime) -> bool:
        """Atomically clear ``deleted_at`` where it is set.

        Equivalent to ``UPDATE ... SET deleted_at = NULL WHERE id = :id AND
        deleted_at IS NOT NULL``. Returns True only if this call made the
        transition, so a concurrent restore that already won yields False.
        """
        ...

    async def delete_project(self, project_id: int) -> bool:
        """Hard-delete a project (trashed or not) and its tasks."""
        ...

    async def get_task(self, task_id: int) -> Task | None:
        ...

    async def query_tasks(self, project_id: int, query: TaskQuery) -> list[Task] | Page[Task]:
        """Tasks of one project, filtered and ordered per ``query``.

        Returns a Page when ``query.page`` is set, otherwise the full list.
        """
        ...

    async def create_task(self, project_id: int, fields: dict[str, Any]) -> Task:
        ...

    async def update_task(self, task_id: int, changes: dict[str, Any]) -> Task | None:
        ...

    async def delete_task(self, task_id: int) -> bool:
        ...
