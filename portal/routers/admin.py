"""
Admin Records Endpoints
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from common.auth import Session
from common.models.schemas import CreateClientContactData
from common.storage import DataSource
from modules.admin import ADMIN_ENTITIES, AdminService

from ..deps import get_admin_session, get_source

router = APIRouter()


def get_service(source: DataSource = Depends(get_source)) -> AdminService:
    return AdminService(source)


def _forms(entity: str):
    if entity not in ADMIN_ENTITIES:
        raise HTTPException(status_code=404, detail=f"Unknown collection: {entity}")
    _, create_form, update_form, _ = ADMIN_ENTITIES[entity]
    return create_form, update_form


@router.get("/stats")
async def admin_stats(
    service: AdminService = Depends(get_service),
    session: Session = Depends(get_admin_session),
):
    return await service.stats()


@router.get("/clients/{client_id}/contacts")
async def list_contacts(
    client_id: str,
    service: AdminService = Depends(get_service),
    session: Session = Depends(get_admin_session),
):
    return await service.contacts(client_id)


@router.post("/clients/{client_id}/contacts", status_code=201)
async def add_contact(
    client_id: str,
    data: CreateClientContactData,
    service: AdminService = Depends(get_service),
    session: Session = Depends(get_admin_session),
):
    return await service.add_contact(session, client_id, data)


@router.delete("/contacts/{contact_id}")
async def remove_contact(
    contact_id: str,
    service: AdminService = Depends(get_service),
    session: Session = Depends(get_admin_session),
):
    await service.remove_contact(session, contact_id)
    return {"message": "Contact removed"}


@router.get("/{entity}")
async def list_records(
    entity: str,
    search: str = "",
    active: str = "all",
    category: Optional[str] = None,
    service: AdminService = Depends(get_service),
    session: Session = Depends(get_admin_session),
):
    """List users, consultants, channels or clients"""
    _forms(entity)
    return await service.list(entity, search=search, active=active, category=category)


@router.post("/{entity}", status_code=201)
async def create_record(
    entity: str,
    payload: Dict[str, Any] = Body(...),
    service: AdminService = Depends(get_service),
    session: Session = Depends(get_admin_session),
):
    create_form, _ = _forms(entity)
    return await service.create(session, entity, create_form.model_validate(payload))


@router.get("/{entity}/{record_id}")
async def get_record(
    entity: str,
    record_id: str,
    service: AdminService = Depends(get_service),
    session: Session = Depends(get_admin_session),
):
    _forms(entity)
    return await service.get(entity, record_id)


@router.patch("/{entity}/{record_id}")
async def update_record(
    entity: str,
    record_id: str,
    payload: Dict[str, Any] = Body(...),
    service: AdminService = Depends(get_service),
    session: Session = Depends(get_admin_session),
):
    _, update_form = _forms(entity)
    return await service.update(session, entity, record_id, update_form.model_validate(payload))


@router.post("/{entity}/{record_id}/active")
async def set_active(
    entity: str,
    record_id: str,
    active: bool = Body(..., embed=True),
    service: AdminService = Depends(get_service),
    session: Session = Depends(get_admin_session),
):
    _forms(entity)
    return await service.set_active(session, entity, record_id, active)


@router.delete("/{entity}/{record_id}")
async def delete_record(
    entity: str,
    record_id: str,
    service: AdminService = Depends(get_service),
    session: Session = Depends(get_admin_session),
):
    _forms(entity)
    await service.delete(session, entity, record_id)
    return {"message": f"Deleted from {entity}"}
