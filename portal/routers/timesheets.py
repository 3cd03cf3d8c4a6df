"""
Demands & Time Entries Endpoints
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from common.auth import Session
from common.models.schemas import CreateDemandData, CreateTimeEntryData, UpdateDemandData
from common.storage import DataSource
from modules.timesheets.service import TimesheetService

from ..deps import get_session, get_source

router = APIRouter()


def get_service(source: DataSource = Depends(get_source)) -> TimesheetService:
    return TimesheetService(source)


@router.get("/demands")
async def list_demands(
    search: str = "",
    status: Optional[str] = None,
    priority: Optional[str] = None,
    service: TimesheetService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.demands(session, search=search, status=status, priority=priority)


@router.post("/demands", status_code=201)
async def create_demand(
    data: CreateDemandData,
    service: TimesheetService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.create_demand(session, data)


@router.patch("/demands/{demand_id}")
async def update_demand(
    demand_id: str,
    data: UpdateDemandData,
    service: TimesheetService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.update_demand(session, demand_id, data)


@router.delete("/demands/{demand_id}")
async def delete_demand(
    demand_id: str,
    service: TimesheetService = Depends(get_service),
    session: Session = Depends(get_session),
):
    await service.delete_demand(session, demand_id)
    return {"message": "Demand deleted"}


@router.get("/entries")
async def list_entries(
    demand_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    service: TimesheetService = Depends(get_service),
    session: Session = Depends(get_session),
):
    """List time entries; consultants only see their own"""
    return await service.time_entries(session, demand_id=demand_id, start=start_date, end=end_date)


@router.post("/entries", status_code=201)
async def log_time(
    data: CreateTimeEntryData,
    consultant_id: Optional[str] = None,
    service: TimesheetService = Depends(get_service),
    session: Session = Depends(get_session),
):
    """Log hours; a pending approval is queued alongside"""
    return await service.log_time(session, data, consultant_id=consultant_id)


@router.delete("/entries/{entry_id}")
async def delete_entry(
    entry_id: str,
    service: TimesheetService = Depends(get_service),
    session: Session = Depends(get_session),
):
    await service.delete_entry(session, entry_id)
    return {"message": "Time entry deleted"}


@router.get("/stats")
async def stats(
    today: Optional[date] = None,
    service: TimesheetService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.stats(session, today)
