"""InMemoryStore: dict-backed EntityStore.

Deterministic and instant, for tests and local development. Records handed
out are copies, so callers cannot mutate stored state behind the store's back.

Faults can be injected per method name to exercise StorageError handling::

    store = InMemoryStore(fail_on={"restore_if_trashed"})
"""

from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from taskboard.domain.entities import Project, Task, User
from taskboard.domain.pagination import Page, paginate
from taskboard.domain.project_query import ProjectQuery
from taskboard.domain.task_query import TaskQuery
from taskboard.store.base import PROJECT_MUTABLE_FIELDS, TASK_MUTABLE_FIELDS, StorageError


class InMemoryStore:
    def __init__(
        self,
        clock: Callable[[], datetime] | None = None,
        fail_on: Iterable[str] = (),
    ):
        self.clock = clock or (lambda: datetime.now(UTC))
        self.fail_on = set(fail_on)
        self._users: dict[int, User] = {}
        self._projects: dict[int, Project] = {}
        self._tasks: dict[int, Task] = {}
        self._next_id = {"user": 1, "project": 1, "task": 1}

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise StorageError(f"Simulated storage fault in {operation}")

    def _allocate(self, kind: str) -> int:
        value = self._next_id[kind]
        self._next_id[kind] = value + 1
        return value

    def _task_view(self, task: Task) -> Task:
        project = self._projects.get(task.project_id)
        return replace(task, project=replace(project) if project else None)

    # Users

    async def get_user(self, user_id: int) -> User | None:
        self._check("get_user")
        return self._users.get(user_id)

    async def create_user(self, name: str, email: str) -> User:
        self._check("create_user")
        if any(user.email == email for user in self._users.values()):
            raise StorageError(f"Duplicate email: {email}")
        user = User(id=self._allocate("user"), name=name, email=email)
        self._users[user.id] = user
        return user

    # Projects

    async def get_project(self, project_id: int, *, include_trashed: bool = False) -> Project | None:
        self._check("get_project")
        project = self._projects.get(project_id)
        if project is None or (project.is_trashed and not include_trashed):
            return None
        return replace(project)

    async def list_projects(self, query: ProjectQuery) -> Page[Project]:
        self._check("list_projects")
        ordered = query.apply(list(self._projects.values()))
        return paginate([replace(p) for p in ordered], query.page)

    async def create_project(self, owner_user_id: int, title: str, description: str | None) -> Project:
        self._check("create_project")
        if owner_user_id not in self._users:
            raise StorageError(f"Unknown owner {owner_user_id}")
        now = self.clock()
        project = Project(
            id=self._allocate("project"),
            owner_user_id=owner_user_id,
            title=title,
            description=description,
            created_at=now,
            updated_at=now,
        )
        self._projects[project.id] = project
        return replace(project)

    async def update_project(self, project_id: int, changes: dict[str, Any]) -> Project | None:
        self._check("update_project")
        project = self._projects.get(project_id)
        if project is None or project.is_trashed:
            return None
        allowed = {k: v for k, v in changes.items() if k in PROJECT_MUTABLE_FIELDS}
        updated = replace(project, **allowed, updated_at=self.clock())
        self._projects[project_id] = updated
        return replace(updated)

    async def soft_delete_project(self, project_id: int, now: datetime) -> bool:
        self._check("soft_delete_project")
        project = self._projects.get(project_id)
        if project is None or project.is_trashed:
            return False
        self._projects[project_id] = replace(project, deleted_at=now, updated_at=now)
        return True

    async def restore_if_trashed(self, project_id: int, now: datetime) -> bool:
        # Check and set happen without an await in between, so this is atomic
        self._check("restore_if_trashed")
        project = self._projects.get(project_id)
        if project is None or not project.is_trashed:
            return False
        self._projects[project_id] = replace(project, deleted_at=None, updated_at=now)
        return True

    async def delete_project(self, project_id: int) -> bool:
        self._check("delete_project")
        if self._projects.pop(project_id, None) is None:
            return False
        for task_id in [t.id for t in self._tasks.values() if t.project_id == project_id]:
            del self._tasks[task_id]
        return True

    # Tasks

    async def get_task(self, task_id: int) -> Task | None:
        self._check("get_task")
        task = self._tasks.get(task_id)
        return self._task_view(task) if task else None

    async def query_tasks(self, project_id: int, query: TaskQuery) -> list[Task] | Page[Task]:
        self._check("query_tasks")
        scoped = [t for t in self._tasks.values() if t.project_id == project_id]
        ordered = [self._task_view(t) for t in query.apply(scoped)]
        if query.page is None:
            return ordered
        return paginate(ordered, query.page)

    async def create_task(self, project_id: int, fields: dict[str, Any]) -> Task:
        self._check("create_task")
        if project_id not in self._projects:
            raise StorageError(f"Unknown project {project_id}")
        now = self.clock()
        values = {k: v for k, v in fields.items() if k in TASK_MUTABLE_FIELDS}
        task = Task(
            id=self._allocate("task"),
            project_id=project_id,
            created_at=now,
            updated_at=now,
            **values,
        )
        self._tasks[task.id] = task
        return self._task_view(task)

    async def update_task(self, task_id: int, changes: dict[str, Any]) -> Task | None:
        self._check("update_task")
        task = self._tasks.get(task_id)
        if task is None:
            return None
        allowed = {k: v for k, v in changes.items() if k in TASK_MUTABLE_FIELDS}
        updated = replace(task, **allowed, updated_at=self.clock())
        self._tasks[task_id] = updated
        return self._task_view(updated)

    async def delete_task(self, task_id: int) -> bool:
        self._check("delete_task")
        return self._tasks.pop(task_id, None) is not None
