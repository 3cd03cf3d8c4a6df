"""Controlling CLI."""
import argparse
import asyncio
from datetime import date

from common.config import get_config
from common.runtime import cli_session, open_data_source, setup_logging

from .metrics import format_currency, format_hours
from .service import ControllingService


async def _run(args) -> int:
    config = get_config()
    session = cli_session(config)
    today = date.fromisoformat(args.today) if args.today else date.today()

    async with open_data_source(config) as source:
        service = ControllingService(source, config.dashboard)

        if args.command == 'dashboard':
            view = await service.dashboard(session, today)
            if view.error:
                print(f'❌ Dashboard {view.error}')
                return 1
            s = view.stats
            print(f'📊 Dashboard ({today})')
            print(f'   Revenue:          {format_currency(s.total_revenue)}')
            print(f'   Hours worked:     {format_hours(s.total_hours)}')
            print(f'   Active projects:  {s.active_projects}')
            print(f'   Consultants:      {s.active_consultants}')
            print(f'   Clients:          {s.active_clients}')
            print(f'   At risk:          {s.projects_at_risk}')
            print(f'   Ending soon:      {s.projects_ending_soon}')

        elif args.command == 'risk':
            view = await service.dashboard(session, today)
            print(f'⚠️  Projects at risk: {len(view.at_risk)}')
            for item in view.at_risk:
                print(f'   {item.name:<40} {item.client:<25} {item.reason}')
            print(f'⏳ Ending within {config.dashboard.ending_soon_days} days: {len(view.ending_soon)}')
            for item in view.ending_soon:
                print(f'   {item.name:<40} {item.end_date}  ({item.days_left}d)')

        elif args.command == 'charts':
            view = await service.charts(session, today)
            print('⏱️  Weekly hours')
            for point in view.weekly_hours:
                print(f'   {point.label:<14} {format_hours(point.value)}')
            print('💶 Monthly revenue')
            for point in view.monthly_revenue:
                print(f'   {point.label:<14} {format_currency(point.value)}')
            print('🏆 Consultant hours')
            for row in view.consultant_hours:
                print(f'   {row.name:<25} {format_hours(row.hours)}')

        elif args.command == 'finance':
            overview = await service.financial_overview(session, today)
            if overview.error:
                print(f'❌ Financial overview {overview.error}')
                return 1
            print(f'💰 Financial overview ({today})')
            print(f'   Revenue:            {format_currency(overview.total_revenue)}')
            print(f'   Costs:              {format_currency(overview.total_costs)}')
            print(f'   Profit:             {format_currency(overview.total_profit)} ({overview.profit_margin:.1f}%)')
            print(f'   Pending approvals:  {format_currency(overview.pending_approvals_amount)}')
            print(f'   Pending payments:   {format_currency(overview.pending_payments_amount)}')
            for p in overview.top_projects:
                print(f'   {p.name:<40} {format_currency(p.profit):>16}')
    return 0


def main():
    parser = argparse.ArgumentParser(description='Financial Controlling')
    parser.add_argument('command', choices=['dashboard', 'risk', 'charts', 'finance'])
    parser.add_argument('--today', help='Reference date (YYYY-MM-DD), default: today')
    args = parser.parse_args()

    setup_logging()
    raise SystemExit(asyncio.run(_run(args)))


if __name__ == '__main__':
    main()
