"""Record fetcher: raw store rows in, normalized records out.

No business rules live here. The fetcher only coerces rows through the
record ``from_dict`` constructors and resolves display names (channel,
client, consultant) from the collections it fetched alongside.
"""

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from common.models.base import (
    Approval,
    Channel,
    Client,
    ClientContact,
    Consultant,
    Demand,
    Payment,
    Project,
    Task,
    TimeEntry,
    User,
)

from .backend import DataSource, Range, RecordNotFound

logger = logging.getLogger(__name__)


@dataclass
class FormOptions:
    """Choices offered by the project form."""
    channels: List[Channel] = field(default_factory=list)
    consultants: List[Consultant] = field(default_factory=list)
    clients: List[Client] = field(default_factory=list)


def _group_by(rows: List[dict], key: str) -> Dict[str, List[dict]]:
    grouped = defaultdict(list)
    for row in rows:
        grouped[str(row.get(key))].append(row)
    return grouped


def _drop_none(**filters) -> dict:
    return {k: v for k, v in filters.items() if v is not None}


class RecordFetcher:
    def __init__(self, source: DataSource):
        self.source = source

    # --- Projects ---

    async def projects(self, status: Optional[str] = None) -> List[Project]:
        rows, links, channels, clients = await asyncio.gather(
            self.source.list('projects', _drop_none(status=status)),
            self.source.list('project_consultants'),
            self.source.list('channels'),
            self.source.list('clients'),
        )
        by_project = _group_by(links, 'project_id')
        channel_names = {str(c['id']): Channel.from_dict(c).name for c in channels}
        client_names = {str(c['id']): Client.from_dict(c).display_name for c in clients}
        return [
            self._project(row, by_project.get(str(row.get('id'))), channel_names, client_names)
            for row in rows
        ]

    async def project(self, project_id: str) -> Project:
        row, links = await asyncio.gather(
            self.source.get('projects', project_id),
            self.source.list('project_consultants', {'project_id': project_id}),
        )
        channel_names, client_names = {}, {}
        if row.get('channel_id'):
            try:
                channel = Channel.from_dict(await self.source.get('channels', row['channel_id']))
                channel_names[channel.id] = channel.name
            except RecordNotFound:
                logger.warning(f'Project {project_id} references missing channel {row["channel_id"]}')
        if row.get('client_id'):
            try:
                client = Client.from_dict(await self.source.get('clients', row['client_id']))
                client_names[client.id] = client.display_name
            except RecordNotFound:
                logger.warning(f'Project {project_id} references missing client {row["client_id"]}')
        return self._project(row, links or None, channel_names, client_names)

    @staticmethod
    def _project(row, links, channel_names, client_names) -> Project:
        data = dict(row)
        data.setdefault('channel_name', channel_names.get(str(row.get('channel_id')), ''))
        data.setdefault('client_name', client_names.get(str(row.get('client_id')), ''))
        return Project.from_dict(data, assignments=links)

    async def tasks(self, project_id: str) -> List[Task]:
        rows = await self.source.list('tasks', {'project_id': project_id})
        return [Task.from_dict(r) for r in rows]

    # --- Admin records ---

    async def consultants(self, active_only: bool = False) -> List[Consultant]:
        rows = await self.source.list('consultants', {'is_active': True} if active_only else None)
        return [Consultant.from_dict(r) for r in rows]

    async def users(self) -> List[User]:
        return [User.from_dict(r) for r in await self.source.list('users')]

    async def channels(self, active_only: bool = False) -> List[Channel]:
        rows = await self.source.list('channels', {'is_active': True} if active_only else None)
        return [Channel.from_dict(r) for r in rows]

    async def clients(self, active_only: bool = False) -> List[Client]:
        rows = await self.source.list('clients', {'is_active': True} if active_only else None)
        return [Client.from_dict(r) for r in rows]

    async def client_contacts(self, client_id: str) -> List[ClientContact]:
        rows = await self.source.list('client_contacts', {'client_id': client_id})
        return [ClientContact.from_dict(r) for r in rows]

    async def form_options(self) -> FormOptions:
        """Channels, consultants and clients, fetched concurrently."""
        channels, consultants, clients = await asyncio.gather(
            self.channels(active_only=True),
            self.consultants(active_only=True),
            self.clients(active_only=True),
        )
        return FormOptions(channels=channels, consultants=consultants, clients=clients)

    # --- Demands, time, approvals ---

    async def demands(self, assigned_to: Optional[str] = None) -> List[Demand]:
        rows, consultants = await asyncio.gather(
            self.source.list('demands', _drop_none(assigned_to=assigned_to)),
            self.source.list('consultants'),
        )
        names = {str(c['id']): c.get('name') or '' for c in consultants}
        demands = []
        for row in rows:
            data = dict(row)
            if not data.get('assigned_to_name'):
                data['assigned_to_name'] = names.get(str(row.get('assigned_to')), '')
            demands.append(Demand.from_dict(data))
        return demands

    async def demand(self, demand_id: str) -> Demand:
        return Demand.from_dict(await self.source.get('demands', demand_id))

    async def time_entries(
        self,
        consultant_id: Optional[str] = None,
        demand_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[TimeEntry]:
        filters = _drop_none(consultant_id=consultant_id, demand_id=demand_id)
        if start or end:
            filters['date'] = Range(start, end)
        rows, consultants = await asyncio.gather(
            self.source.list('time_entries', filters),
            self.source.list('consultants'),
        )
        names = {str(c['id']): c.get('name') or '' for c in consultants}
        entries = []
        for row in rows:
            data = dict(row)
            if not data.get('consultant_name'):
                data['consultant_name'] = names.get(str(row.get('consultant_id')), '')
            entries.append(TimeEntry.from_dict(data))
        return entries

    async def approvals(
        self, status: Optional[str] = None, consultant_id: Optional[str] = None
    ) -> List[Approval]:
        rows = await self.source.list('approvals', _drop_none(status=status, consultant_id=consultant_id))
        return [Approval.from_dict(r) for r in rows]

    async def payments(self, consultant_id: Optional[str] = None) -> List[Payment]:
        rows = await self.source.list('payments', _drop_none(consultant_id=consultant_id))
        return [Payment.from_dict(r) for r in rows]
