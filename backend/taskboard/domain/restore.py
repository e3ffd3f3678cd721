"""Project restore workflow.

State machine over ``Project.deleted_at``::

    TRASHED --restore (owner only)--> ACTIVE

There is no ACTIVE -> ACTIVE transition: restoring a project that is not
trashed is INVALID_STATE every time, never a silent success.

Preconditions are checked in a fixed order: existence (trashed included),
ownership, lifecycle state, then the conditional write.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from enum import StrEnum

import structlog

from taskboard.domain.entities import Project, User
from taskboard.domain.errors import (
    PROJECT_NOT_DELETED,
    PROJECT_NOT_FOUND,
    RESTORE_DENIED,
    RESTORE_FAILED,
    ErrorKind,
    Failure,
    Ok,
    Outcome,
    forbidden,
    invalid_state,
    not_found,
    storage_failure,
)
from taskboard.domain.policy import Action, check_access
from taskboard.store.base import EntityStore, StorageError

logger = structlog.get_logger(__name__)


class ProjectState(StrEnum):
    ACTIVE = "active"
    TRASHED = "trashed"


def state_of(project: Project) -> ProjectState:
    return ProjectState.TRASHED if project.is_trashed else ProjectState.ACTIVE


class ProjectRestoreWorkflow:
    """Runs the restore transition against an EntityStore."""

    # Valid state transitions
    TRANSITIONS = {
        ProjectState.TRASHED: [ProjectState.ACTIVE],
        ProjectState.ACTIVE: [],
    }

    def __init__(self, store: EntityStore, clock: Callable[[], datetime] | None = None):
        self.store = store
        self.clock = clock or (lambda: datetime.now(UTC))

    def can_transition(self, current: ProjectState, target: ProjectState) -> bool:
        return target in self.TRANSITIONS.get(current, [])

    async def restore(self, project_id: int, actor: User | None) -> Outcome[Project]:
        """Restore a trashed project owned by ``actor``.

        Returns:
            Ok(project) with ``deleted_at`` cleared and ``updated_at`` bumped, or
            Failure with NOT_FOUND, UNAUTHENTICATED, FORBIDDEN, INVALID_STATE
            or STORAGE_FAILURE.
        """
        if actor is None:
            return Failure(ErrorKind.UNAUTHENTICATED)

        try:
            project = await self.store.get_project(project_id, include_trashed=True)
        except StorageError:
            logger.error("project_restore_read_failed", project_id=project_id, exc_info=True)
            return storage_failure(RESTORE_FAILED)

        if project is None:
            return not_found(PROJECT_NOT_FOUND)

        denial = check_access(actor, Action.RESTORE, project)
        if denial is not None:
            logger.warning(
                "project_restore_denied",
                project_id=project_id,
                user_id=actor.id if actor else None,
                kind=denial.kind.value,
            )
            if denial.kind == ErrorKind.FORBIDDEN:
                return forbidden(RESTORE_DENIED)
            return denial

        if not self.can_transition(state_of(project), ProjectState.ACTIVE):
            return invalid_state(PROJECT_NOT_DELETED)

        try:
            won = await self.store.restore_if_trashed(project_id, self.clock())
            if not won:
                # Another restore (or a hard delete) got there first
                current = await self.store.get_project(project_id, include_trashed=True)
                if current is None:
                    return not_found(PROJECT_NOT_FOUND)
                if state_of(current) == ProjectState.ACTIVE:
                    return invalid_state(PROJECT_NOT_DELETED)
                logger.error("project_restore_write_ignored", project_id=project_id)
                return storage_failure(RESTORE_FAILED)

            restored = await self.store.get_project(project_id)
        except StorageError:
            logger.error("project_restore_write_failed", project_id=project_id, exc_info=True)
            return storage_failure(RESTORE_FAILED)

        if restored is None:
            return not_found(PROJECT_NOT_FOUND)

        logger.info("project_restored", project_id=project_id, user_id=actor.id)
        return Ok(restored)


async def restore_project(
    store: EntityStore,
    project_id: int,
    actor: User | None,
    clock: Callable[[], datetime] | None = None,
) -> Outcome[Project]:
    """Convenience wrapper around ProjectRestoreWorkflow.restore."""
    return await ProjectRestoreWorkflow(store, clock).restore(project_id, actor)
