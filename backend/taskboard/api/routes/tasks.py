"""Task API routes.

Tasks are reachable both nested under their project and directly by id.
Either way, access is decided through the task's parent project.
"""

from fastapi import APIRouter, Depends, Request

from taskboard.api.deps import get_actor, get_task_service
from taskboard.api.errors import unwrap
from taskboard.domain.entities import User
from taskboard.domain.pagination import Page
from taskboard.schemas.common import Collection, MessageResponse, paginated
from taskboard.schemas.tasks import TaskCreate, TaskResponse, TaskUpdate
from taskboard.services.task_service import TaskService

project_tasks_router = APIRouter()
router = APIRouter()


@project_tasks_router.get("", response_model=None)
async def list_tasks(
    project_id: int,
    request: Request,
    actor: User = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    """List a project's tasks.

    Query options: ``priority``, ``done``/``is_done``, ``due_date``,
    ``sort_by``, ``direction``; ``per_page`` and ``page`` switch on pagination.
    """
    result = unwrap(await service.list_tasks(project_id, actor, request.query_params))
    if isinstance(result, Page):
        return paginated(result, TaskResponse.from_entity, request.url)
    return Collection[TaskResponse](data=[TaskResponse.from_entity(task) for task in result])


@project_tasks_router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    project_id: int,
    payload: TaskCreate,
    actor: User = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    task = unwrap(await service.create_task(project_id, actor, payload.model_dump()))
    return TaskResponse.from_entity(task)


@project_tasks_router.get("/{task_id}", response_model=TaskResponse)
async def get_project_task(
    project_id: int,
    task_id: int,
    actor: User = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    task = unwrap(await service.get_task(task_id, actor, project_id=project_id))
    return TaskResponse.from_entity(task)


@project_tasks_router.put("/{task_id}", response_model=TaskResponse)
@project_tasks_router.patch("/{task_id}", response_model=TaskResponse)
async def update_project_task(
    project_id: int,
    task_id: int,
    payload: TaskUpdate,
    actor: User = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    changes = payload.model_dump(exclude_unset=True)
    task = unwrap(await service.update_task(task_id, actor, changes, project_id=project_id))
    return TaskResponse.from_entity(task)


@project_tasks_router.delete("/{task_id}", response_model=MessageResponse)
async def delete_project_task(
    project_id: int,
    task_id: int,
    actor: User = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    unwrap(await service.delete_task(task_id, actor, project_id=project_id))
    return MessageResponse(message="Task deleted successfully")


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    actor: User = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    task = unwrap(await service.get_task(task_id, actor))
    return TaskResponse.from_entity(task)


@router.put("/{task_id}", response_model=TaskResponse)
@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    actor: User = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    task = unwrap(await service.update_task(task_id, actor, payload.model_dump(exclude_unset=True)))
    return TaskResponse.from_entity(task)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: int,
    actor: User = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    unwrap(await service.delete_task(task_id, actor))
    return MessageResponse(message="Task deleted successfully")
