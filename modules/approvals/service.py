"""Approval service: review queue, bulk approve/reject, payouts.

Bulk actions are all-or-nothing. Every entry is checked (exists, move
allowed) before anything is written, and the write itself is a single
``update_many`` call, so a bad id or an illegal move leaves every entry
untouched.

Usage:
    service = ApprovalService(source)
    await service.apply(session, ApprovalAction(entry_ids=[...], action="approve"))
"""
import logging
from datetime import date, datetime, timezone
from typing import List, Optional, Sequence

from common.auth import Session, require_admin
from common.filters import ListFilter
from common.models.base import Approval, ApprovalStatus, Payment, PaymentStatus
from common.models.schemas import ApprovalAction, CreatePaymentData
from common.storage import DataSource, DataStoreError, RecordNotFound
from common.storage.fetcher import RecordFetcher
from modules.controlling.rollups import ApprovalBatch, group_approvals_by_consultant

from .workflow import ACTION_TARGETS, InvalidTransition, check_transition

logger = logging.getLogger(__name__)


def _unique(ids: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(ids))


class ApprovalService:
    def __init__(self, source: DataSource):
        self.source = source
        self.fetcher = RecordFetcher(source)

    async def list(
        self,
        session: Session,
        status: Optional[str] = ApprovalStatus.PENDING.value,
        search: str = '',
        consultant_id: Optional[str] = None,
    ) -> List[Approval]:
        """Approvals visible to the session, filtered like the review screen.

        Consultants only ever see their own entries.
        """
        if not session.is_admin:
            consultant_id = session.consultant_id or ''
        approvals = await self.fetcher.approvals(consultant_id=consultant_id)
        return ListFilter.for_entity('approvals', search=search, status=status).apply(approvals)

    async def batches(self, session: Session, status: Optional[str] = ApprovalStatus.PENDING.value) -> List[ApprovalBatch]:
        return group_approvals_by_consultant(await self.list(session, status=status))

    async def _load(self, ids: Sequence[str]) -> List[Approval]:
        rows = await self.source.list('approvals', {'id': list(ids)})
        by_id = {str(r['id']): Approval.from_dict(r) for r in rows}
        missing = [i for i in ids if i not in by_id]
        if missing:
            raise RecordNotFound('approvals', ', '.join(missing))
        return [by_id[i] for i in ids]

    async def apply(
        self,
        session: Session,
        action: ApprovalAction,
        now: Optional[datetime] = None,
    ) -> List[Approval]:
        """Approve or reject a set of entries atomically.

        Raises:
            PermissionDenied: session is not an administrator
            RecordNotFound: any id does not exist
            InvalidTransition: any entry is not pending
        """
        require_admin(session)
        ids = _unique(action.entry_ids)
        target = ACTION_TARGETS[action.action]
        for approval in await self._load(ids):
            check_transition(approval.id, approval.status, target)

        now = now or datetime.now(timezone.utc)
        if target == ApprovalStatus.APPROVED:
            fields = {'status': target.value, 'approved_by': session.user_id, 'approved_at': now}
        else:
            fields = {'status': target.value, 'rejected_reason': (action.reason or '').strip()}

        rows = await self.source.update_many('approvals', {i: dict(fields) for i in ids})
        logger.info(f"{action.action.capitalize()}d {len(ids)} entries (by {session.email})")
        return [Approval.from_dict(r) for r in rows]

    async def pay(
        self,
        session: Session,
        data: CreatePaymentData,
        today: Optional[date] = None,
    ) -> Payment:
        """Mark approved entries of one consultant as paid and record the payout."""
        require_admin(session)
        ids = _unique(data.entry_ids)
        approvals = await self._load(ids)
        for approval in approvals:
            if approval.consultant_id != data.consultant_id:
                raise ValueError(
                    f'Approval {approval.id} belongs to {approval.consultant_id}, not {data.consultant_id}'
                )
            check_transition(approval.id, approval.status, ApprovalStatus.PAID)

        row = await self.source.create('payments', {
            'consultant_id': data.consultant_id,
            'consultant_name': approvals[0].consultant_name,
            'period_start': data.period_start,
            'period_end': data.period_end,
            'entry_ids': ids,
            'total_hours': sum(a.hours for a in approvals),
            'total_amount': sum(a.total_amount for a in approvals),
            'status': PaymentStatus.PAID.value,
            'payment_date': today or date.today(),
            'payment_method': data.payment_method,
            'notes': data.notes,
        })
        try:
            await self.source.update_many('approvals', {i: {'status': ApprovalStatus.PAID.value} for i in ids})
        except DataStoreError as e:
            logger.error(f"Marking entries paid failed, removing payment {row['id']}: {e}")
            await self.source.delete('payments', row['id'])
            raise
        payment = Payment.from_dict(row)
        logger.info(f'Paid {payment.total_amount:.2f} to {payment.consultant_name} ({len(ids)} entries)')
        return payment


__all__ = ['ApprovalService', 'InvalidTransition']
