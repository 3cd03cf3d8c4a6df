#!/usr/bin/env python3
"""Unified CLI for the Consultancy Backoffice.

Usage:
    python cli.py controlling --help
    python cli.py approvals --help
    python cli.py timesheets --help
    python cli.py admin --help
"""
import sys
import argparse


def main():
    parser = argparse.ArgumentParser(
        description='📊 Consultancy Backoffice',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modules:
  controlling   Dashboard, risk, charts & financial overview
  approvals     Review, approve and pay logged hours
  timesheets    Demands & time tracking
  admin         Users, consultants, channels & clients

Examples:
  python cli.py controlling dashboard
  python cli.py controlling risk --today 2025-06-25
  python cli.py approvals list
  python cli.py approvals reject a-2 --reason "wrong demand"
  python cli.py timesheets log --demand d-reports --hours 4 -d "Report layout"
  python cli.py admin consultants --active active
"""
    )

    parser.add_argument(
        'module',
        choices=['controlling', 'approvals', 'timesheets', 'admin'],
        help='Module to run'
    )

    # Parse just the module, pass rest to submodule
    args, remaining = parser.parse_known_args()

    # Dispatch to module CLI
    if args.module == 'controlling':
        from modules.controlling.cli import main as ctrl_main
        sys.argv = ['controlling'] + remaining
        ctrl_main()

    elif args.module == 'approvals':
        from modules.approvals.cli import main as appr_main
        sys.argv = ['approvals'] + remaining
        appr_main()

    elif args.module == 'timesheets':
        from modules.timesheets.cli import main as ts_main
        sys.argv = ['timesheets'] + remaining
        ts_main()

    elif args.module == 'admin':
        from modules.admin.cli import main as admin_main
        sys.argv = ['admin'] + remaining
        admin_main()


if __name__ == '__main__':
    main()
