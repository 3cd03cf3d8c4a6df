"""Record builders for tests."""
from datetime import date
from typing import Optional

from common.models.base import (
    Approval,
    ApprovalStatus,
    Assignment,
    Project,
    ProjectStatus,
    TimeEntry,
)


def make_project(
    id: str = "p-1",
    estimated_hours: float = 40,
    worked_hours: float = 0,
    channel_rate: float = 100,
    consultant_rate: float = 60,
    status: ProjectStatus = ProjectStatus.IN_PROGRESS,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    assignments=(),
    client_name: str = "ACME",
    description: str = "",
) -> Project:
    return Project(
        id=id,
        status=status,
        client_id=f"cl-{id}",
        client_name=client_name,
        description=description or f"Project {id}",
        channel_rate=channel_rate,
        consultant_rate=consultant_rate,
        assignments=list(assignments),
        estimated_hours=estimated_hours,
        worked_hours=worked_hours,
        start_date=start_date,
        end_date=end_date,
    )


def make_assignment(consultant_id: str, rate: float, hours: Optional[float] = None, name: str = "") -> Assignment:
    return Assignment(consultant_id=consultant_id, consultant_name=name or consultant_id, hourly_rate=rate, hours=hours)


def make_entry(hours: float, day: date, consultant_id: str = "c-1", name: str = "") -> TimeEntry:
    return TimeEntry(
        id=f"te-{consultant_id}-{day.isoformat()}-{hours}",
        demand_id="d-1",
        consultant_id=consultant_id,
        consultant_name=name or consultant_id,
        hours=hours,
        date=day,
    )


def make_approval(
    id: str,
    hours: float,
    rate: float = 60,
    status: ApprovalStatus = ApprovalStatus.PENDING,
    consultant_id: str = "c-1",
    day: Optional[date] = None,
    project_id: Optional[str] = None,
) -> Approval:
    return Approval(
        id=id,
        time_entry_id=f"te-{id}",
        consultant_id=consultant_id,
        consultant_name=consultant_id.upper(),
        hours=hours,
        consultant_hourly_rate=rate,
        status=status,
        total_amount=hours * rate,
        date=day,
        project_id=project_id,
    )
