"""
Approvals & Payments Endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends

from common.auth import Session
from common.models.schemas import ApprovalAction, CreatePaymentData
from common.storage import DataSource
from modules.approvals import ApprovalService

from ..deps import get_admin_session, get_session, get_source

router = APIRouter()


def get_service(source: DataSource = Depends(get_source)) -> ApprovalService:
    return ApprovalService(source)


@router.get("/")
async def list_approvals(
    status: Optional[str] = "pending",
    search: str = "",
    consultant_id: Optional[str] = None,
    service: ApprovalService = Depends(get_service),
    session: Session = Depends(get_session),
):
    """List approvals; consultants only see their own entries"""
    return await service.list(session, status=status, search=search, consultant_id=consultant_id)


@router.get("/batches")
async def list_batches(
    status: Optional[str] = "pending",
    service: ApprovalService = Depends(get_service),
    session: Session = Depends(get_session),
):
    return await service.batches(session, status=status)


@router.post("/actions")
async def apply_action(
    action: ApprovalAction,
    service: ApprovalService = Depends(get_service),
    session: Session = Depends(get_admin_session),
):
    """Approve or reject a set of pending entries (all or nothing)"""
    return await service.apply(session, action)


@router.post("/payments", status_code=201)
async def create_payment(
    data: CreatePaymentData,
    service: ApprovalService = Depends(get_service),
    session: Session = Depends(get_admin_session),
):
    return await service.pay(session, data)
