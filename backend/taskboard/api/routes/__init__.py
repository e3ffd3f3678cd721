from fastapi import APIRouter

from taskboard.api.routes import health, projects, tasks

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(tasks.project_tasks_router, prefix="/projects/{project_id}/tasks", tags=["tasks"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
