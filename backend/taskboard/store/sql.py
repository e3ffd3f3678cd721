"""SqlAlchemyStore: EntityStore backed by async SQLAlchemy."""

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy import case, delete, false, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.db.models.project import Project as ProjectModel
from taskboard.db.models.task import Task as TaskModel
from taskboard.db.models.user import User as UserModel
from taskboard.domain.entities import PRIORITY_RANK, Project, Task, User
from taskboard.domain.pagination import Page
from taskboard.domain.project_query import ProjectQuery, TrashedScope
from taskboard.domain.task_query import TaskQuery
from taskboard.store.base import PROJECT_MUTABLE_FIELDS, TASK_MUTABLE_FIELDS, StorageError

logger = structlog.get_logger(__name__)

# Primary keys are signed 64-bit at most; a larger id cannot name any row
MAX_ROW_ID = 2**63 - 1


def _storable(row_id: int) -> bool:
    return -MAX_ROW_ID - 1 <= row_id <= MAX_ROW_ID


def _to_user(row: UserModel) -> User:
    return User(id=row.id, name=row.name, email=row.email)


def _to_project(row: ProjectModel) -> Project:
    return Project(
        id=row.id,
        owner_user_id=row.owner_user_id,
        title=row.title,
        description=row.description,
        created_at=row.created_at,
        updated_at=row.updated_at,
        deleted_at=row.deleted_at,
    )


def _to_task(row: TaskModel, project: ProjectModel | None) -> Task:
    return Task(
        id=row.id,
        project_id=row.project_id,
        title=row.title,
        is_done=bool(row.is_done),
        priority=row.priority,
        due_date=row.due_date,
        created_at=row.created_at,
        updated_at=row.updated_at,
        project=_to_project(project) if project is not None else None,
    )


class SqlAlchemyStore:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] | None = None,
    ):
        self.session_factory = session_factory
        self.clock = clock or (lambda: datetime.now(UTC))

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Open a session, converting any SQLAlchemy fault into StorageError."""
        try:
            async with self.session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("store_operation_failed", operation=operation, error=str(exc))
            raise StorageError(f"{operation} failed") from exc

    # Users

    async def get_user(self, user_id: int) -> User | None:
        if not _storable(user_id):
            return None
        async with self._session("get_user") as session:
            row = await session.get(UserModel, user_id)
            return _to_user(row) if row else None

    async def create_user(self, name: str, email: str) -> User:
        async with self._session("create_user") as session:
            row = UserModel(name=name, email=email, created_at=self.clock())
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return _to_user(row)

    # Projects

    async def get_project(self, project_id: int, *, include_trashed: bool = False) -> Project | None:
        if not _storable(project_id):
            return None
        stmt = select(ProjectModel).where(ProjectModel.id == project_id)
        if not include_trashed:
            stmt = stmt.where(ProjectModel.deleted_at.is_(None))
        async with self._session("get_project") as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
            return _to_project(row) if row else None

    async def list_projects(self, query: ProjectQuery) -> Page[Project]:
        conditions = [ProjectModel.owner_user_id == query.owner_user_id]
        if query.trashed == TrashedScope.EXCLUDE:
            conditions.append(ProjectModel.deleted_at.is_(None))
        elif query.trashed == TrashedScope.ONLY:
            conditions.append(ProjectModel.deleted_at.is_not(None))
        if query.search:
            # % and _ in the search text are literal characters
            conditions.append(
                or_(
                    ProjectModel.title.icontains(query.search, autoescape=True),
                    ProjectModel.description.icontains(query.search, autoescape=True),
                )
            )

        async with self._session("list_projects") as session:
            total = (
                await session.execute(select(func.count(ProjectModel.id)).where(*conditions))
            ).scalar() or 0
            rows = (
                await session.execute(
                    select(ProjectModel)
                    .where(*conditions)
                    .order_by(ProjectModel.created_at.desc(), ProjectModel.id.desc())
                    .offset(query.page.offset)
                    .limit(query.page.per_page)
                )
            ).scalars().all()

        return Page(
            items=[_to_project(row) for row in rows],
            total=total,
            per_page=query.page.per_page,
            current_page=query.page.page,
        )

    async def create_project(self, owner_user_id: int, title: str, description: str | None) -> Project:
        if not _storable(owner_user_id):
            raise StorageError(f"Unknown owner {owner_user_id}")
        now = self.clock()
        async with self._session("create_project") as session:
            if await session.get(UserModel, owner_user_id) is None:
                raise StorageError(f"Unknown owner {owner_user_id}")
            row = ProjectModel(
                owner_user_id=owner_user_id,
                title=title,
                description=description,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return _to_project(row)

    async def update_project(self, project_id: int, changes: dict[str, Any]) -> Project | None:
        if not _storable(project_id):
            return None
        async with self._session("update_project") as session:
            row = (
                await session.execute(
                    select(ProjectModel).where(
                        ProjectModel.id == project_id,
                        ProjectModel.deleted_at.is_(None),
                    )
                )
            ).scalar_one_or_none()
            if row is None:
                return None
            for key, value in changes.items():
                if key in PROJECT_MUTABLE_FIELDS:
                    setattr(row, key, value)
            row.updated_at = self.clock()
            await session.commit()
            await session.refresh(row)
            return _to_project(row)

    async def soft_delete_project(self, project_id: int, now: datetime) -> bool:
        if not _storable(project_id):
            return False
        async with self._session("soft_delete_project") as session:
            result = await session.execute(
                update(ProjectModel)
                .where(ProjectModel.id == project_id, ProjectModel.deleted_at.is_(None))
                .values(deleted_at=now, updated_at=now)
            )
            await session.commit()
            return result.rowcount == 1

    async def restore_if_trashed(self, project_id: int, now: datetime) -> bool:
        if not _storable(project_id):
            return False
        async with self._session("restore_if_trashed") as session:
            result = await session.execute(
                update(ProjectModel)
                .where(ProjectModel.id == project_id, ProjectModel.deleted_at.is_not(None))
                .values(deleted_at=None, updated_at=now)
            )
            await session.commit()
            return result.rowcount == 1

    async def delete_project(self, project_id: int) -> bool:
        if not _storable(project_id):
            return False
        async with self._session("delete_project") as session:
            await session.execute(delete(TaskModel).where(TaskModel.project_id == project_id))
            result = await session.execute(delete(ProjectModel).where(ProjectModel.id == project_id))
            await session.commit()
            return result.rowcount == 1

    # Tasks

    async def get_task(self, task_id: int) -> Task | None:
        if not _storable(task_id):
            return None
        async with self._session("get_task") as session:
            row = (
                await session.execute(
                    select(TaskModel, ProjectModel)
                    .join(ProjectModel, TaskModel.project_id == ProjectModel.id)
                    .where(TaskModel.id == task_id)
                )
            ).one_or_none()
            if row is None:
                return None
            task, project = row
            return _to_task(task, project)

    def _task_conditions(self, project_id: int, query: TaskQuery) -> list:
        conditions = [TaskModel.project_id == project_id]
        if query.matches_nothing:
            conditions.append(false())
        if query.priority is not None:
            conditions.append(TaskModel.priority == query.priority)
        if query.is_done is not None:
            conditions.append(TaskModel.is_done == query.is_done)
        if query.due_date is not None:
            conditions.append(TaskModel.due_date == query.due_date)
        return conditions

    def _task_order(self, query: TaskQuery) -> list:
        if query.sort_by == "priority":
            column = case(PRIORITY_RANK, value=TaskModel.priority, else_=0)
        else:
            column = getattr(TaskModel, query.sort_by)
        if query.descending:
            return [column.desc().nulls_last(), TaskModel.id.desc()]
        return [column.asc().nulls_first(), TaskModel.id.asc()]

    async def query_tasks(self, project_id: int, query: TaskQuery) -> list[Task] | Page[Task]:
        if not _storable(project_id):
            if query.page is None:
                return []
            return Page(items=[], total=0, per_page=query.page.per_page, current_page=query.page.page)
        conditions = self._task_conditions(project_id, query)
        stmt = (
            select(TaskModel, ProjectModel)
            .join(ProjectModel, TaskModel.project_id == ProjectModel.id)
            .where(*conditions)
            .order_by(*self._task_order(query))
        )
        if query.page is not None:
            stmt = stmt.offset(query.page.offset).limit(query.page.per_page)

        async with self._session("query_tasks") as session:
            rows = (await session.execute(stmt)).all()
            tasks = [_to_task(task, project) for task, project in rows]
            if query.page is None:
                return tasks
            total = (
                await session.execute(select(func.count(TaskModel.id)).where(*conditions))
            ).scalar() or 0

        return Page(
            items=tasks,
            total=total,
            per_page=query.page.per_page,
            current_page=query.page.page,
        )

    async def create_task(self, project_id: int, fields: dict[str, Any]) -> Task:
        if not _storable(project_id):
            raise StorageError(f"Unknown project {project_id}")
        now = self.clock()
        async with self._session("create_task") as session:
            project = await session.get(ProjectModel, project_id)
            if project is None:
                raise StorageError(f"Unknown project {project_id}")
            values = {k: v for k, v in fields.items() if k in TASK_MUTABLE_FIELDS}
            row = TaskModel(project_id=project_id, created_at=now, updated_at=now, **values)
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return _to_task(row, project)

    async def update_task(self, task_id: int, changes: dict[str, Any]) -> Task | None:
        if not _storable(task_id):
            return None
        async with self._session("update_task") as session:
            row = await session.get(TaskModel, task_id)
            if row is None:
                return None
            for key, value in changes.items():
                if key in TASK_MUTABLE_FIELDS:
                    setattr(row, key, value)
            row.updated_at = self.clock()
            await session.commit()
            await session.refresh(row)
            project = await session.get(ProjectModel, row.project_id)
            return _to_task(row, project)

    async def delete_task(self, task_id: int) -> bool:
        if not _storable(task_id):
            return False
        async with self._session("delete_task") as session:
            result = await session.execute(delete(TaskModel).where(TaskModel.id == task_id))
            await session.commit()
            return result.rowcount == 1
