"""ProjectService: project lifecycle with ownership checks."""

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import structlog

from taskboard.core.config import Settings, get_settings
from taskboard.domain.entities import Project, User
from taskboard.domain.errors import (
    PROJECT_NOT_FOUND,
    ErrorKind,
    Failure,
    Ok,
    Outcome,
    not_found,
    storage_failure,
)
from taskboard.domain.pagination import Page
from taskboard.domain.policy import Action, check_access
from taskboard.domain.project_query import build_project_query
from taskboard.domain.restore import ProjectRestoreWorkflow
from taskboard.store.base import EntityStore, StorageError

logger = structlog.get_logger(__name__)


class ProjectService:
    """Service layer for project operations.

    Every method takes the acting user explicitly and returns an Outcome.
    Show, update and soft delete only see active projects; restore and
    force delete also see trashed ones.
    """

    def __init__(
        self,
        store: EntityStore,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.clock = clock or (lambda: datetime.now(UTC))

    async def list_projects(self, actor: User | None, params: Mapping[str, Any]) -> Outcome[Page[Project]]:
        """List the actor's own projects, newest first, always paginated."""
        if actor is None:
            return Failure(ErrorKind.UNAUTHENTICATED)
        query = build_project_query(
            actor.id,
            params,
            default_per_page=self.settings.default_per_page,
            max_per_page=self.settings.max_per_page,
        )
        try:
            return Ok(await self.store.list_projects(query))
        except StorageError:
            logger.error("project_list_failed", user_id=actor.id, exc_info=True)
            return storage_failure()

    async def create_project(self, actor: User | None, title: str, description: str | None = None) -> Outcome[Project]:
        if actor is None:
            return Failure(ErrorKind.UNAUTHENTICATED)
        try:
            project = await self.store.create_project(actor.id, title, description)
        except StorageError:
            logger.error("project_create_failed", user_id=actor.id, exc_info=True)
            return storage_failure()
        logger.info("project_created", project_id=project.id, user_id=actor.id)
        return Ok(project)

    async def _load_authorized(
        self,
        project_id: int,
        actor: User | None,
        action: Action,
        *,
        include_trashed: bool = False,
    ) -> Outcome[Project]:
        if actor is None:
            return Failure(ErrorKind.UNAUTHENTICATED)
        try:
            project = await self.store.get_project(project_id, include_trashed=include_trashed)
        except StorageError:
            logger.error("project_read_failed", project_id=project_id, exc_info=True)
            return storage_failure()
        if project is None:
            return not_found(PROJECT_NOT_FOUND)
        denial = check_access(actor, action, project)
        if denial is not None:
            logger.warning("project_access_denied", project_id=project_id, user_id=actor.id, action=action.value)
            return denial
        return Ok(project)

    async def get_project(self, project_id: int, actor: User | None) -> Outcome[Project]:
        return await self._load_authorized(project_id, actor, Action.VIEW)

    async def update_project(self, project_id: int, actor: User | None, changes: dict[str, Any]) -> Outcome[Project]:
        loaded = await self._load_authorized(project_id, actor, Action.UPDATE)
        if not loaded.ok:
            return loaded
        try:
            project = await self.store.update_project(project_id, changes)
        except StorageError:
            logger.error("project_update_failed", project_id=project_id, exc_info=True)
            return storage_failure()
        if project is None:
            return not_found(PROJECT_NOT_FOUND)
        return Ok(project)

    async def delete_project(self, project_id: int, actor: User | None) -> Outcome[None]:
        """Soft-delete: the project moves to the trash and can be restored."""
        loaded = await self._load_authorized(project_id, actor, Action.DELETE)
        if not loaded.ok:
            return loaded
        try:
            trashed = await self.store.soft_delete_project(project_id, self.clock())
        except StorageError:
            logger.error("project_soft_delete_failed", project_id=project_id, exc_info=True)
            return storage_failure()
        if not trashed:
            return not_found(PROJECT_NOT_FOUND)
        logger.info("project_trashed", project_id=project_id, user_id=actor.id)
        return Ok(None)

    async def restore_project(self, project_id: int, actor: User | None) -> Outcome[Project]:
        return await ProjectRestoreWorkflow(self.store, self.clock).restore(project_id, actor)

    async def force_delete_project(self, project_id: int, actor: User | None) -> Outcome[None]:
        """Hard-delete a project, trashed or not, together with its tasks."""
        loaded = await self._load_authorized(project_id, actor, Action.DELETE, include_trashed=True)
        if not loaded.ok:
            return loaded
        try:
            deleted = await self.store.delete_project(project_id)
        except StorageError:
            logger.error("project_force_delete_failed", project_id=project_id, exc_info=True)
            return storage_failure()
        if not deleted:
            return not_found(PROJECT_NOT_FOUND)
        logger.info("project_deleted", project_id=project_id, user_id=actor.id)
        return Ok(None)
