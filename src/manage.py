"""SmartStore Ordering management CLI.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys

import structlog

from ordering.utils.logging import configure_logging

logger = structlog.get_logger(__name__)


def setup_database():
    from ordering.domain import ordering
    from ordering.utils.db import setup_db

    logger.info("Initializing ordering domain")
    ordering.init()
    setup_db(ordering)
    logger.info("Ordering schema ready")


def drop_database():
    from ordering.domain import ordering
    from ordering.utils.db import drop_db

    logger.info("Initializing ordering domain")
    ordering.init()
    drop_db(ordering)
    logger.info("Ordering schema dropped")


def main(argv=None):
    parser = argparse.ArgumentParser(description="SmartStore Ordering database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args(argv)
    configure_logging()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    return 0


if __name__ == "__main__":
    sys.exit(main())
