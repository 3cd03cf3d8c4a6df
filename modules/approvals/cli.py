"""Approvals CLI."""
import argparse
import asyncio

from pydantic import ValidationError

from common.config import get_config
from common.models.schemas import ApprovalAction, CreatePaymentData
from common.runtime import cli_session, open_data_source, setup_logging
from common.storage import RecordNotFound
from modules.controlling.metrics import format_currency, format_hours

from .service import ApprovalService
from .workflow import InvalidTransition


async def _run(args) -> int:
    config = get_config()
    session = cli_session(config)

    async with open_data_source(config) as source:
        service = ApprovalService(source)

        if args.command == 'list':
            for batch in await service.batches(session, status=args.status):
                print(f'👤 {batch.consultant_name}: {format_hours(batch.total_hours)} '
                      f'= {format_currency(batch.total_amount)}')
                for a in batch.entries:
                    print(f'   {a.id}  {a.date}  {a.demand_title:<30} {format_hours(a.hours):>7}  {a.status.value}')
            return 0

        try:
            if args.command in ('approve', 'reject'):
                action = ApprovalAction(entry_ids=args.ids, action=args.command, reason=args.reason)
                updated = await service.apply(session, action)
                print(f'✅ {len(updated)} entries {updated[0].status.value}')
            elif args.command == 'pay':
                data = CreatePaymentData(
                    consultant_id=args.consultant,
                    period_start=args.period_start,
                    period_end=args.period_end,
                    entry_ids=args.ids,
                    payment_method=args.method,
                )
                payment = await service.pay(session, data)
                print(f'✅ Paid {format_currency(payment.total_amount)} to {payment.consultant_name}')
        except (ValidationError, RecordNotFound, InvalidTransition, ValueError) as e:
            print(f'❌ {e}')
            return 1
    return 0


def main():
    parser = argparse.ArgumentParser(description='Time Entry Approvals')
    parser.add_argument('command', choices=['list', 'approve', 'reject', 'pay'])
    parser.add_argument('ids', nargs='*', help='Approval IDs')
    parser.add_argument('--status', default='pending', help='Status filter for list (or "all")')
    parser.add_argument('--reason', help='Rejection reason')
    parser.add_argument('--consultant', help='Consultant ID (pay)')
    parser.add_argument('--period-start', help='Period start (YYYY-MM-DD)')
    parser.add_argument('--period-end', help='Period end (YYYY-MM-DD)')
    parser.add_argument('--method', help='Payment method')
    args = parser.parse_args()

    setup_logging()
    raise SystemExit(asyncio.run(_run(args)))


if __name__ == '__main__':
    main()
