"""Timesheet service: demands and the hours consultants log against them.

Logging time creates the entry, recomputes the demand's
``total_logged_hours`` from all of its entries and opens a pending
approval carrying the amount owed (hours x consultant rate).
"""
import logging
from datetime import date
from typing import List, Optional

from common.auth import PermissionDenied, Session, require_admin
from common.filters import ListFilter
from common.models.base import ApprovalStatus, Consultant, Demand, DemandStatus, TimeEntry
from common.models.schemas import CreateDemandData, CreateTimeEntryData, UpdateDemandData
from common.storage import DataSource
from common.storage.fetcher import RecordFetcher
from modules.approvals.workflow import InvalidTransition, amount
from modules.controlling.rollups import DemandStats, demand_stats

logger = logging.getLogger(__name__)


def _scope(session: Session) -> Optional[str]:
    """Consultant id the session is limited to (None for admins)."""
    if session.is_admin:
        return None
    if not session.consultant_id:
        raise PermissionDenied(f'{session.email} has no consultant profile')
    return session.consultant_id


class TimesheetService:
    def __init__(self, source: DataSource):
        self.source = source
        self.fetcher = RecordFetcher(source)

    # --- Demands ---

    async def demands(
        self,
        session: Session,
        search: str = '',
        status: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> List[Demand]:
        demands = await self.fetcher.demands(assigned_to=_scope(session))
        return ListFilter.for_entity('demands', search=search, status=status, priority=priority).apply(demands)

    async def create_demand(self, session: Session, data: CreateDemandData) -> Demand:
        require_admin(session)
        row = await self.source.create('demands', {**data.to_fields(), 'total_logged_hours': 0.0})
        logger.info(f"Demand created: {row['id']} '{data.title}'")
        return await self.fetcher.demand(row['id'])

    async def update_demand(self, session: Session, demand_id: str, data: UpdateDemandData) -> Demand:
        require_admin(session)
        fields = data.to_fields()
        if fields.get('status') == DemandStatus.COMPLETED.value:
            fields.setdefault('completed_at', date.today())
        await self.source.update('demands', demand_id, fields)
        return await self.fetcher.demand(demand_id)

    async def delete_demand(self, session: Session, demand_id: str) -> None:
        """Delete a demand that has no logged time."""
        require_admin(session)
        if await self.source.list('time_entries', {'demand_id': demand_id}):
            raise ValueError(f'Demand {demand_id} has logged time and cannot be deleted')
        await self.source.delete('demands', demand_id)
        logger.info(f'Demand deleted: {demand_id}')

    # --- Time entries ---

    async def time_entries(
        self,
        session: Session,
        demand_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[TimeEntry]:
        return await self.fetcher.time_entries(
            consultant_id=_scope(session), demand_id=demand_id, start=start, end=end
        )

    async def _recompute_demand_hours(self, demand_id: str) -> float:
        entries = await self.source.list('time_entries', {'demand_id': demand_id})
        total = sum(TimeEntry.from_dict(e).hours for e in entries)
        await self.source.update('demands', demand_id, {'total_logged_hours': total})
        return total

    async def log_time(
        self,
        session: Session,
        data: CreateTimeEntryData,
        consultant_id: Optional[str] = None,
    ) -> TimeEntry:
        """Log hours against a demand and queue them for approval.

        Consultants always log for themselves; admins may log for
        ``consultant_id``.
        """
        scope = _scope(session)
        consultant_id = scope or consultant_id
        if not consultant_id:
            raise ValueError('consultant_id is required')

        demand = await self.fetcher.demand(data.demand_id)
        consultant = Consultant.from_dict(await self.source.get('consultants', consultant_id))

        row = await self.source.create('time_entries', {
            **data.to_fields(),
            'consultant_id': consultant.id,
            'consultant_name': consultant.name,
        })
        entry = TimeEntry.from_dict(row)
        total = await self._recompute_demand_hours(demand.id)

        await self.source.create('approvals', {
            'time_entry_id': entry.id,
            'demand_id': demand.id,
            'demand_title': demand.title,
            'project_id': demand.project_id,
            'consultant_id': consultant.id,
            'consultant_name': consultant.name,
            'consultant_hourly_rate': consultant.hourly_rate,
            'hours': entry.hours,
            'description': entry.description,
            'date': entry.date,
            'status': ApprovalStatus.PENDING.value,
            'total_amount': amount(entry.hours, consultant.hourly_rate),
        })
        logger.info(
            f"Logged {entry.hours}h on '{demand.title}' for {consultant.name} "
            f"(demand total {total}h)"
        )
        return entry

    async def delete_entry(self, session: Session, entry_id: str) -> None:
        """Remove an entry whose approval is still pending."""
        entry = TimeEntry.from_dict(await self.source.get('time_entries', entry_id))
        scope = _scope(session)
        if scope is not None and entry.consultant_id != scope:
            raise PermissionDenied(f'Entry {entry_id} belongs to another consultant')
        approvals = await self.source.list('approvals', {'time_entry_id': entry_id})
        for approval in approvals:
            status = ApprovalStatus(approval['status'])
            if status != ApprovalStatus.PENDING:
                raise InvalidTransition(approval['id'], status, ApprovalStatus.REJECTED)
        for approval in approvals:
            await self.source.delete('approvals', approval['id'])
        await self.source.delete('time_entries', entry_id)
        await self._recompute_demand_hours(entry.demand_id)
        logger.info(f'Time entry deleted: {entry_id}')

    # --- Stats ---

    async def stats(self, session: Session, today: Optional[date] = None) -> DemandStats:
        scope = _scope(session)
        demands = await self.fetcher.demands(assigned_to=scope)
        entries = await self.fetcher.time_entries(consultant_id=scope)
        return demand_stats(demands, entries, today, consultant_id=scope)
