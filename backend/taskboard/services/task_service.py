"""TaskService: task listing and CRUD, authorized through the parent project."""

from collections.abc import Mapping
from typing import Any

import structlog

from taskboard.core.config import Settings, get_settings
from taskboard.domain.entities import Task, User
from taskboard.domain.errors import (
    PROJECT_NOT_FOUND,
    TASK_NOT_FOUND,
    ErrorKind,
    Failure,
    Ok,
    Outcome,
    not_found,
    storage_failure,
)
from taskboard.domain.pagination import Page
from taskboard.domain.policy import Action, check_access
from taskboard.domain.task_query import build_task_query
from taskboard.store.base import EntityStore, StorageError

logger = structlog.get_logger(__name__)


class TaskService:
    def __init__(self, store: EntityStore, settings: Settings | None = None):
        self.store = store
        self.settings = settings or get_settings()

    async def list_tasks(
        self,
        project_id: int,
        actor: User | None,
        params: Mapping[str, Any],
    ) -> Outcome[list[Task] | Page[Task]]:
        """List a project's tasks with filters, sorting and optional pagination.

        Tasks stay listable while their project is trashed. Malformed filter
        values narrow the result instead of failing the request.
        """
        if actor is None:
            return Failure(ErrorKind.UNAUTHENTICATED)
        try:
            project = await self.store.get_project(project_id, include_trashed=True)
            if project is None:
                return not_found(PROJECT_NOT_FOUND)
            denial = check_access(actor, Action.VIEW, project)
            if denial is not None:
                logger.warning("task_list_denied", project_id=project_id, user_id=actor.id)
                return denial

            query = build_task_query(params, max_per_page=self.settings.max_per_page)
            result = await self.store.query_tasks(project.id, query)
        except StorageError:
            logger.error("task_list_failed", project_id=project_id, exc_info=True)
            return storage_failure()
        return Ok(result)

    async def create_task(self, project_id: int, actor: User | None, fields: dict[str, Any]) -> Outcome[Task]:
        """Create a task in an active project. Requires update rights on the project."""
        if actor is None:
            return Failure(ErrorKind.UNAUTHENTICATED)
        try:
            project = await self.store.get_project(project_id)
            if project is None:
                return not_found(PROJECT_NOT_FOUND)
            denial = check_access(actor, Action.UPDATE, project)
            if denial is not None:
                return denial
            task = await self.store.create_task(project.id, fields)
        except StorageError:
            logger.error("task_create_failed", project_id=project_id, exc_info=True)
            return storage_failure()
        logger.info("task_created", task_id=task.id, project_id=project_id, user_id=actor.id)
        return Ok(task)

    async def _load_authorized(
        self,
        task_id: int,
        actor: User | None,
        action: Action,
        project_id: int | None,
    ) -> Outcome[Task]:
        if actor is None:
            return Failure(ErrorKind.UNAUTHENTICATED)
        try:
            task = await self.store.get_task(task_id)
        except StorageError:
            logger.error("task_read_failed", task_id=task_id, exc_info=True)
            return storage_failure()
        # A task addressed through the wrong project does not exist there
        if task is None or (project_id is not None and task.project_id != project_id):
            return not_found(TASK_NOT_FOUND)
        denial = check_access(actor, action, task)
        if denial is not None:
            logger.warning("task_access_denied", task_id=task_id, user_id=actor.id, action=action.value)
            return denial
        return Ok(task)

    async def get_task(self, task_id: int, actor: User | None, project_id: int | None = None) -> Outcome[Task]:
        return await self._load_authorized(task_id, actor, Action.VIEW, project_id)

    async def update_task(
        self,
        task_id: int,
        actor: User | None,
        changes: dict[str, Any],
        project_id: int | None = None,
    ) -> Outcome[Task]:
        loaded = await self._load_authorized(task_id, actor, Action.UPDATE, project_id)
        if not loaded.ok:
            return loaded
        try:
            task = await self.store.update_task(task_id, changes)
        except StorageError:
            logger.error("task_update_failed", task_id=task_id, exc_info=True)
            return storage_failure()
        if task is None:
            return not_found(TASK_NOT_FOUND)
        return Ok(task)

    async def delete_task(self, task_id: int, actor: User | None, project_id: int | None = None) -> Outcome[None]:
        loaded = await self._load_authorized(task_id, actor, Action.DELETE, project_id)
        if not loaded.ok:
            return loaded
        try:
            deleted = await self.store.delete_task(task_id)
        except StorageError:
            logger.error("task_delete_failed", task_id=task_id, exc_info=True)
            return storage_failure()
        if not deleted:
            return not_found(TASK_NOT_FOUND)
        logger.info("task_deleted", task_id=task_id, user_id=actor.id)
        return Ok(None)
