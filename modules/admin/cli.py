"""Admin CLI."""
import argparse
import asyncio
from datetime import timedelta

from common.auth import Session, create_access_token
from common.config import get_config
from common.models.base import User
from common.runtime import open_data_source, setup_logging
from common.storage import RecordNotFound

from .service import ADMIN_ENTITIES, AdminService


def _describe(record) -> str:
    state = '✓' if record.is_active else '✗'
    label = getattr(record, 'display_name', None) or record.name
    extra = getattr(record, 'email', None) or ''
    return f'{state} {record.id:<12} {label:<30} {extra}'


async def _run(args) -> int:
    config = get_config()
    async with open_data_source(config) as source:
        service = AdminService(source)

        if args.command == 'token':
            try:
                row = await source.get('users', args.user)
            except RecordNotFound as e:
                print(f'❌ {e}')
                return 1
            session = Session.for_user(User.from_dict(row), row.get('consultant_id'))
            print(create_access_token(
                session,
                config.auth.secret_key,
                config.auth.algorithm,
                timedelta(minutes=config.auth.access_token_expire_minutes),
            ))
        elif args.command == 'stats':
            s = await service.stats()
            print('🛠️  Admin')
            print(f'   Users:       {s.active_users}/{s.total_users} active')
            print(f'   Consultants: {s.active_consultants}/{s.total_consultants} active')
            print(f'   Channels:    {s.active_channels}/{s.total_channels} active')
            print(f'   Clients:     {s.active_clients}/{s.total_clients} active')
        else:
            records = await service.list(
                args.command, search=args.search or '', active=args.active, category=args.category
            )
            for record in records:
                print(f'   {_describe(record)}')
            print(f'   {len(records)} {args.command}')
    return 0


def main():
    parser = argparse.ArgumentParser(description='Admin Records')
    parser.add_argument('command', choices=['stats', 'token', *ADMIN_ENTITIES])
    parser.add_argument('--user', help='User ID (token)')
    parser.add_argument('--search', help='Search term')
    parser.add_argument('--active', default='all', choices=['all', 'active', 'inactive'])
    parser.add_argument('--category', help='Role (users) or type (channels)')
    args = parser.parse_args()

    setup_logging()
    raise SystemExit(asyncio.run(_run(args)))


if __name__ == '__main__':
    main()
