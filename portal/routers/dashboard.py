"""
Dashboard & Controlling Endpoints
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from common.auth import Session
from common.config import ServiceConfig
from common.storage import DataSource
from modules.controlling.service import ControllingService

from ..deps import get_config, get_session, get_source

router = APIRouter()


def get_service(
    source: DataSource = Depends(get_source),
    config: ServiceConfig = Depends(get_config),
) -> ControllingService:
    return ControllingService(source, config.dashboard)


@router.get("/")
async def dashboard(
    today: Optional[date] = None,
    service: ControllingService = Depends(get_service),
    session: Session = Depends(get_session),
):
    """Stats cards, portfolio totals, top projects, risk and ending-soon lists"""
    return await service.dashboard(session, today)


@router.get("/charts")
async def charts(
    today: Optional[date] = None,
    service: ControllingService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.charts(session, today)


@router.get("/financial")
async def financial_overview(
    today: Optional[date] = None,
    service: ControllingService = Depends(get_service),
    session: Session = Depends(get_session),
):
    """Financial overview (admins only)"""
    return await service.financial_overview(session, today)


@router.get("/consultants/{consultant_id}")
async def consultant_stats(
    consultant_id: str,
    today: Optional[date] = None,
    service: ControllingService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.consultant_stats(session, consultant_id, today)
