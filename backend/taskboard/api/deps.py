"""FastAPI dependencies: store, acting user and services.

Override ``get_store`` in tests via ``app.dependency_overrides``.
"""

from fastapi import Depends, Request

from taskboard.core.config import get_settings
from taskboard.db.base import get_session_factory
from taskboard.domain.entities import User
from taskboard.domain.errors import ErrorKind, Failure, TaskboardError, storage_failure
from taskboard.domain.pagination import positive_int
from taskboard.middleware.correlation import bind_actor
from taskboard.services.project_service import ProjectService
from taskboard.services.task_service import TaskService
from taskboard.store.base import EntityStore, StorageError
from taskboard.store.sql import SqlAlchemyStore


def get_store() -> EntityStore:
    """Dependency that provides the request's EntityStore."""
    return SqlAlchemyStore(get_session_factory())


async def get_actor(request: Request, store: EntityStore = Depends(get_store)) -> User:
    """Resolve the acting user from the identity header set upstream.

    Raises TaskboardError(UNAUTHENTICATED) when the header is missing,
    malformed, or names no known user.
    """
    settings = get_settings()
    user_id = positive_int(request.headers.get(settings.actor_header))
    if user_id is None:
        raise TaskboardError(Failure(ErrorKind.UNAUTHENTICATED))

    try:
        user = await store.get_user(user_id)
    except StorageError:
        raise TaskboardError(storage_failure())
    if user is None:
        raise TaskboardError(Failure(ErrorKind.UNAUTHENTICATED))

    # Set user_id on request state for downstream use (error handlers, audit logging)
    request.state.user_id = user.id
    bind_actor(user.id)
    return user


def get_project_service(store: EntityStore = Depends(get_store)) -> ProjectService:
    return ProjectService(store)


def get_task_service(store: EntityStore = Depends(get_store)) -> TaskService:
    return TaskService(store)
