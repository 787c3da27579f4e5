#!/usr/bin/env python
"""
Database migration script for the product database service.

Creates the `nodes`, `relationships` and `identification_helpers` tables with
their foreign keys and indexes, or reports node counts per category.

Usage:
    python scripts/migrate.py [migrate|check] [--database-url URL]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from productdb.cli import check_schema, run_migrations

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""

    parser = argparse.ArgumentParser(description="Product database migration tool")
    parser.add_argument(
        "command",
        nargs="?",
        default="migrate",
        choices=["migrate", "check"],
        help="Command to execute (default: migrate)"
    )
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")

    args = parser.parse_args()

    try:
        if args.command == "migrate":
            asyncio.run(run_migrations(args.database_url))
        elif args.command == "check":
            asyncio.run(check_schema())
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user.")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Operation failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
