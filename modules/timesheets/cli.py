"""Timesheet CLI."""
import argparse
import asyncio
from datetime import date

from pydantic import ValidationError

from common.config import get_config
from common.models.schemas import CreateTimeEntryData
from common.runtime import cli_session, open_data_source, setup_logging
from common.storage import RecordNotFound
from modules.controlling.metrics import format_hours

from .service import TimesheetService


async def _run(args) -> int:
    config = get_config()
    session = cli_session(config)

    async with open_data_source(config) as source:
        service = TimesheetService(source)

        if args.command == 'log':
            try:
                data = CreateTimeEntryData(
                    demand_id=args.demand,
                    hours=args.hours,
                    description=args.description or '',
                    date=args.date or date.today(),
                )
                entry = await service.log_time(session, data, consultant_id=args.consultant)
            except (ValidationError, RecordNotFound, ValueError) as e:
                print(f'❌ {e}')
                return 1
            print(f'✅ Logged {format_hours(entry.hours)} on {entry.date} (pending approval)')

        elif args.command == 'demands':
            for d in await service.demands(session, search=args.search or '', status=args.status):
                estimated = format_hours(d.estimated_hours) if d.estimated_hours else '-'
                print(f'   {d.id:<12} {d.title:<35} {d.status.value:<18} '
                      f'{format_hours(d.total_logged_hours):>7} / {estimated}')

        elif args.command == 'report':
            entries = await service.time_entries(session, demand_id=args.demand)
            for e in entries:
                print(f'   {e.date}  {e.consultant_name:<20} {format_hours(e.hours):>7}  {e.description}')
            print(f'   Total: {format_hours(sum(e.hours for e in entries))}')

        elif args.command == 'summary':
            stats = await service.stats(session)
            print('⏱️  Demands')
            print(f'   Total:     {stats.total}')
            print(f'   Active:    {stats.active}')
            print(f'   Completed: {stats.completed}')
            print(f'   Overdue:   {stats.overdue}')
            print(f'   Logged:    {format_hours(stats.total_logged_hours)}')
            print(f'   This week: {format_hours(stats.week_hours)}')
    return 0


def main():
    parser = argparse.ArgumentParser(description='Timesheet Tracking')
    parser.add_argument('command', choices=['log', 'demands', 'report', 'summary'])
    parser.add_argument('--demand', help='Demand ID')
    parser.add_argument('--consultant', help='Consultant ID (admins logging for someone)')
    parser.add_argument('--hours', type=float, help='Hours worked')
    parser.add_argument('--date', help='Date (YYYY-MM-DD)')
    parser.add_argument('--description', '-d', help='Work description')
    parser.add_argument('--search', help='Search term')
    parser.add_argument('--status', help='Status filter')
    args = parser.parse_args()

    setup_logging()
    raise SystemExit(asyncio.run(_run(args)))


if __name__ == '__main__':
    main()
