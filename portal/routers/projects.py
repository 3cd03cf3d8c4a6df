"""
Projects & Tasks Endpoints
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends

from common.auth import Session
from common.models.schemas import CreateProjectData, CreateTaskData, UpdateProjectData
from common.storage import DataSource
from modules.projects import ProjectService

from ..deps import get_session, get_source

router = APIRouter()


def get_service(source: DataSource = Depends(get_source)) -> ProjectService:
    return ProjectService(source)


@router.get("/")
async def list_projects(
    search: str = "",
    status: Optional[str] = None,
    service: ProjectService = Depends(get_service),
    session: Session = Depends(get_session),
):
    """List projects with optional search and status filter"""
    return await service.list(search=search, status=status)


@router.get("/active")
async def active_projects(
    service: ProjectService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.active_projects()


@router.get("/at-risk")
async def projects_at_risk(
    today: Optional[date] = None,
    service: ProjectService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.projects_at_risk(today)


@router.get("/ending-soon")
async def projects_ending_soon(
    today: Optional[date] = None,
    service: ProjectService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.projects_ending_soon(today)


@router.get("/form-options")
async def form_options(
    service: ProjectService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.form_options()


@router.post("/", status_code=201)
async def create_project(
    data: CreateProjectData,
    service: ProjectService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.create(session, data)


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    service: ProjectService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.get(project_id)


@router.patch("/{project_id}")
async def update_project(
    project_id: str,
    data: UpdateProjectData,
    service: ProjectService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.update(session, project_id, data)


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    service: ProjectService = Depends(get_service),
    session: Session = Depends(get_session),
):
    await service.delete(session, project_id)
    return {"message": "Project deleted"}


@router.get("/{project_id}/tasks")
async def list_tasks(
    project_id: str,
    service: ProjectService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.tasks(project_id)


@router.post("/{project_id}/tasks", status_code=201)
async def create_task(
    project_id: str,
    data: CreateTaskData,
    service: ProjectService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.create_task(session, project_id, data)


@router.patch("/tasks/{task_id}")
async def update_task_status(
    task_id: str,
    status: str = Body(..., embed=True),
    service: ProjectService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.update_task_status(session, task_id, status)


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: str,
    service: ProjectService = Depends(get_service),
    session: Session = Depends(get_session),
):
    await service.delete_task(session, task_id)
    return {"message": "Task deleted"}
