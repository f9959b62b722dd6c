"""Storefront management CLI.

Creates and drops the ordering database schema, and runs the pending-order
reaper from cron when the HTTP maintenance endpoint is not convenient.

Usage:
    python src/manage.py setup-db                 # Create all tables
    python src/manage.py drop-db                  # Drop all tables
    python src/manage.py reap-pending --hours 48  # Cancel stale pending orders
"""

import argparse
import sys


def setup_database():
    from ordering.domain import ordering
    from ordering.utils.db import setup_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Creating ordering database schema...")
    setup_db(ordering)
    print("Done.")


def drop_database():
    from ordering.domain import ordering
    from ordering.utils.db import drop_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Dropping ordering database schema...")
    drop_db(ordering)
    print("Done.")


def reap_pending(hours=None):
    from ordering.domain import ordering
    from ordering.reconciliation.reaper import PendingOrderReaper

    ordering.init()
    with ordering.domain_context():
        report = PendingOrderReaper().reap(threshold_hours=hours)

    print(f"Cutoff: {report.cutoff.isoformat()}")
    print(f"Cancelled {len(report.cancelled)} order(s): {', '.join(report.cancelled) or '-'}")
    if report.failed:
        print(f"Failed {len(report.failed)} order(s): {', '.join(report.failed)}")
        return 1
    return 0


def _positive_hours(value):
    hours = int(value)
    if hours < 1:
        raise argparse.ArgumentTypeError("must be at least 1 hour")
    return hours


def build_parser():
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    reap_parser = subparsers.add_parser("reap-pending", help="Cancel pending orders older than the threshold")
    reap_parser.add_argument(
        "--hours",
        type=_positive_hours,
        default=None,
        help="Age threshold in hours (default: STOREFRONT_PENDING_ORDER_TTL_HOURS)",
    )
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "reap-pending":
        sys.exit(reap_pending(args.hours))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
