"""Admin records: users, consultants, channels, clients and client contacts."""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Type

from common.auth import Session, require_admin
from common.filters import ListFilter
from common.models.base import Channel, Client, ClientContact, Consultant, User
from common.models.schemas import (
    CreateChannelData,
    CreateClientContactData,
    CreateClientData,
    CreateConsultantData,
    CreateUserData,
    FormData,
    UpdateChannelData,
    UpdateClientData,
    UpdateConsultantData,
    UpdateUserData,
)
from common.storage import DataSource, DataStoreError
from common.storage.fetcher import RecordFetcher
from modules.controlling.rollups import AdminStats, admin_stats

logger = logging.getLogger(__name__)

# entity -> (record, create form, update form, categorical filter field)
ADMIN_ENTITIES: Dict[str, tuple] = {
    'users': (User, CreateUserData, UpdateUserData, 'role'),
    'consultants': (Consultant, CreateConsultantData, UpdateConsultantData, None),
    'channels': (Channel, CreateChannelData, UpdateChannelData, 'type'),
    'clients': (Client, CreateClientData, UpdateClientData, None),
}


def _record_type(entity: str) -> Type:
    if entity not in ADMIN_ENTITIES:
        raise ValueError(f'Not an admin entity: {entity}')
    return ADMIN_ENTITIES[entity][0]


class AdminService:
    def __init__(self, source: DataSource):
        self.source = source
        self.fetcher = RecordFetcher(source)

    async def list(
        self,
        entity: str,
        search: str = '',
        active: Optional[str] = 'all',
        category: Optional[str] = None,
    ) -> List[Any]:
        """List an admin collection through the listing filters.

        ``category`` is the role (users) or type (channels) selection.
        """
        record = _record_type(entity)
        rows = await self.source.list(entity)
        records = [record.from_dict(r) for r in rows]
        category_field = ADMIN_ENTITIES[entity][3]
        categories = {category_field: category} if category_field else {}
        return ListFilter.for_entity(entity, search=search, active=active, **categories).apply(records)

    async def get(self, entity: str, record_id: str) -> Any:
        return _record_type(entity).from_dict(await self.source.get(entity, record_id))

    async def create(self, session: Session, entity: str, data: FormData) -> Any:
        require_admin(session)
        record = _record_type(entity)
        row = await self.source.create(entity, data.to_fields())
        logger.info(f"Created {entity} {row['id']} (by {session.email})")
        return record.from_dict(row)

    async def update(self, session: Session, entity: str, record_id: str, data: FormData) -> Any:
        require_admin(session)
        record = _record_type(entity)
        row = await self.source.update(entity, record_id, data.to_fields())
        logger.info(f'Updated {entity} {record_id} (by {session.email})')
        return record.from_dict(row)

    async def set_active(self, session: Session, entity: str, record_id: str, active: bool) -> Any:
        require_admin(session)
        row = await self.source.update(entity, record_id, {'is_active': active})
        return _record_type(entity).from_dict(row)

    async def delete(self, session: Session, entity: str, record_id: str) -> None:
        require_admin(session)
        _record_type(entity)
        if entity == 'clients':
            for contact in await self.source.list('client_contacts', {'client_id': record_id}):
                await self.source.delete('client_contacts', contact['id'])
        await self.source.delete(entity, record_id)
        logger.info(f'Deleted {entity} {record_id} (by {session.email})')

    # --- Client contacts ---

    async def contacts(self, client_id: str) -> List[ClientContact]:
        return await self.fetcher.client_contacts(client_id)

    async def add_contact(self, session: Session, client_id: str, data: CreateClientContactData) -> ClientContact:
        require_admin(session)
        await self.source.get('clients', client_id)
        row = await self.source.create('client_contacts', {**data.to_fields(), 'client_id': client_id})
        return ClientContact.from_dict(row)

    async def remove_contact(self, session: Session, contact_id: str) -> None:
        require_admin(session)
        await self.source.delete('client_contacts', contact_id)

    # --- Stats ---

    async def stats(self) -> AdminStats:
        """Totals and active counts; zeros when the store is unreachable."""
        try:
            users, consultants, channels, clients = await asyncio.gather(
                self.fetcher.users(),
                self.fetcher.consultants(),
                self.fetcher.channels(),
                self.fetcher.clients(),
            )
        except DataStoreError as e:
            logger.error(f'Failed to load admin stats: {e}')
            return AdminStats()
        return admin_stats(users, consultants, channels, clients)
