"""Project API routes."""

from fastapi import APIRouter, Depends, Request

from taskboard.api.deps import get_actor, get_project_service
from taskboard.api.errors import unwrap
from taskboard.domain.entities import User
from taskboard.schemas.common import MessageResponse, Paginated, paginated
from taskboard.schemas.projects import ProjectCreate, ProjectResponse, ProjectUpdate, RestoreResponse
from taskboard.services.project_service import ProjectService

router = APIRouter()


@router.get("", response_model=Paginated[ProjectResponse])
async def list_projects(
    request: Request,
    actor: User = Depends(get_actor),
    service: ProjectService = Depends(get_project_service),
):
    """List the caller's projects, newest first.

    Query options: ``search`` (title/description), ``trashed`` (with|only),
    ``per_page`` and ``page``.
    """
    page = unwrap(await service.list_projects(actor, request.query_params))
    return paginated(page, ProjectResponse.from_entity, request.url)


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    payload: ProjectCreate,
    actor: User = Depends(get_actor),
    service: ProjectService = Depends(get_project_service),
):
    project = unwrap(await service.create_project(actor, payload.title, payload.description))
    return ProjectResponse.from_entity(project)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    actor: User = Depends(get_actor),
    service: ProjectService = Depends(get_project_service),
):
    project = unwrap(await service.get_project(project_id, actor))
    return ProjectResponse.from_entity(project)


@router.put("/{project_id}", response_model=ProjectResponse)
@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    payload: ProjectUpdate,
    actor: User = Depends(get_actor),
    service: ProjectService = Depends(get_project_service),
):
    changes = payload.model_dump(exclude_unset=True)
    project = unwrap(await service.update_project(project_id, actor, changes))
    return ProjectResponse.from_entity(project)


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: int,
    actor: User = Depends(get_actor),
    service: ProjectService = Depends(get_project_service),
):
    """Move a project to the trash."""
    unwrap(await service.delete_project(project_id, actor))
    return MessageResponse(message="Project deleted successfully")


@router.patch("/{project_id}/restore", response_model=RestoreResponse)
async def restore_project(
    project_id: int,
    actor: User = Depends(get_actor),
    service: ProjectService = Depends(get_project_service),
):
    """Bring a trashed project back.

    Raises:
        404: Project does not exist, even in the trash
        403: Caller is not the owner
        400: Project is not deleted
        500: Restore could not be persisted
    """
    project = unwrap(await service.restore_project(project_id, actor))
    return RestoreResponse(data=ProjectResponse.from_entity(project))


@router.delete("/{project_id}/force", response_model=MessageResponse)
async def force_delete_project(
    project_id: int,
    actor: User = Depends(get_actor),
    service: ProjectService = Depends(get_project_service),
):
    """Permanently delete a project and its tasks."""
    unwrap(await service.force_delete_project(project_id, actor))
    return MessageResponse(message="Project permanently deleted")
