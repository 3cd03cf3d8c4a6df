"""Project service: project CRUD, consultant assignments, tasks, alerts.

Mutations write to the store and then re-read the project, so callers
always get the stored state back instead of a locally patched copy.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from common.auth import Session, require_admin
from common.filters import ListFilter
from common.models.base import Project, ProjectStatus, Task, TaskStatus, label_for
from common.models.schemas import AssignmentData, CreateProjectData, CreateTaskData, UpdateProjectData
from common.storage import DataSource
from common.storage.fetcher import FormOptions, RecordFetcher
from modules.controlling import metrics

logger = logging.getLogger(__name__)

LISTED_AS_ACTIVE = (ProjectStatus.PLANNING, ProjectStatus.IN_PROGRESS, ProjectStatus.AWAITING_CLIENT)


@dataclass
class ProjectSummary:
    id: str
    name: str
    client: str
    hours_worked: float
    hours_total: float
    status: str
    progress: float


@dataclass
class RiskItem:
    id: str
    name: str
    client: str
    reason: str


@dataclass
class EndingSoonItem:
    id: str
    name: str
    client: str
    end_date: date
    days_left: int


def risk_items(projects: Sequence[Project], today: date) -> List[RiskItem]:
    items = []
    for p in projects:
        reason = metrics.risk_reason(p, today)
        if reason:
            items.append(RiskItem(id=p.id, name=p.name, client=p.client_name, reason=reason))
    return items


def ending_soon_items(
    projects: Sequence[Project], today: date, horizon: int = metrics.ENDING_SOON_DAYS
) -> List[EndingSoonItem]:
    """Projects due within ``horizon`` days, soonest first."""
    items = [
        EndingSoonItem(
            id=p.id,
            name=p.name,
            client=p.client_name,
            end_date=p.end_date,
            days_left=metrics.days_until_deadline(p, today),
        )
        for p in projects
        if metrics.is_ending_soon(p, today, horizon)
    ]
    return sorted(items, key=lambda item: item.days_left)


class ProjectService:
    def __init__(self, source: DataSource):
        self.source = source
        self.fetcher = RecordFetcher(source)

    # --- Reads ---

    async def list(self, search: str = '', status: Optional[str] = None) -> List[Project]:
        projects = await self.fetcher.projects()
        return ListFilter.for_entity('projects', search=search, status=status).apply(projects)

    async def get(self, project_id: str) -> Project:
        return await self.fetcher.project(project_id)

    async def form_options(self) -> FormOptions:
        return await self.fetcher.form_options()

    async def active_projects(self) -> List[ProjectSummary]:
        return [
            ProjectSummary(
                id=p.id,
                name=p.name,
                client=p.client_name,
                hours_worked=p.worked_hours,
                hours_total=p.estimated_hours,
                status=label_for(p.status),
                progress=metrics.progress(p),
            )
            for p in await self.fetcher.projects()
            if p.status in LISTED_AS_ACTIVE
        ]

    async def projects_at_risk(self, today: Optional[date] = None) -> List[RiskItem]:
        return risk_items(await self.fetcher.projects(), today or date.today())

    async def projects_ending_soon(
        self, today: Optional[date] = None, horizon: int = metrics.ENDING_SOON_DAYS
    ) -> List[EndingSoonItem]:
        return ending_soon_items(await self.fetcher.projects(), today or date.today(), horizon)

    # --- Writes ---

    async def _link_consultants(self, project_id: str, assignments: List[AssignmentData]) -> None:
        names = {}
        if any(not a.consultant_name for a in assignments):
            names = {c.id: c.name for c in await self.fetcher.consultants()}
        for a in assignments:
            await self.source.create('project_consultants', {
                'project_id': project_id,
                'consultant_id': a.consultant_id,
                'consultant_name': a.consultant_name or names.get(a.consultant_id, ''),
                'hourly_rate': a.hourly_rate,
                'hours': a.hours,
            })

    async def _unlink_consultants(self, project_id: str) -> None:
        for link in await self.source.list('project_consultants', {'project_id': project_id}):
            await self.source.delete('project_consultants', link['id'])

    async def create(self, session: Session, data: CreateProjectData) -> Project:
        require_admin(session)
        row = await self.source.create('projects', data.to_fields())
        await self._link_consultants(row['id'], data.assignments)
        logger.info(f"Project created: {row['id']} ({data.product}, {len(data.assignments)} consultant(s))")
        return await self.get(row['id'])

    async def update(self, session: Session, project_id: str, data: UpdateProjectData) -> Project:
        require_admin(session)
        fields = data.to_fields()
        if fields:
            await self.source.update('projects', project_id, fields)
        if data.assignments is not None:
            await self._unlink_consultants(project_id)
            await self._link_consultants(project_id, data.assignments)
        logger.info(f'Project updated: {project_id}')
        return await self.get(project_id)

    async def delete(self, session: Session, project_id: str) -> None:
        require_admin(session)
        await self.source.get('projects', project_id)
        for task in await self.source.list('tasks', {'project_id': project_id}):
            await self.source.delete('tasks', task['id'])
        await self._unlink_consultants(project_id)
        await self.source.delete('projects', project_id)
        logger.info(f'Project deleted: {project_id}')

    # --- Tasks ---

    async def tasks(self, project_id: str) -> List[Task]:
        return await self.fetcher.tasks(project_id)

    async def create_task(self, session: Session, project_id: str, data: CreateTaskData) -> Task:
        require_admin(session)
        await self.source.get('projects', project_id)
        row = await self.source.create('tasks', {**data.to_fields(), 'project_id': project_id})
        return Task.from_dict(row)

    async def update_task_status(self, session: Session, task_id: str, status: str) -> Task:
        require_admin(session)
        return Task.from_dict(await self.source.update('tasks', task_id, {'status': TaskStatus(status).value}))

    async def delete_task(self, session: Session, task_id: str) -> None:
        require_admin(session)
        await self.source.delete('tasks', task_id)
