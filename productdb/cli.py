"""Command line entry for the product database service."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

import uvicorn

from productdb.core.config import settings
from productdb.core.database import database_manager
from productdb.graph.models import NodeCategory
from productdb.graph.storage.sql import SQLStorage

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def run_server(host: Optional[str] = None, port: Optional[int] = None) -> None:
    uvicorn.run(
        "productdb.api.main:app",
        host=host or settings.HOST,
        port=port or settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


async def run_migrations(database_url: Optional[str] = None) -> None:
    """Create the catalog tables if they do not exist yet."""

    storage = SQLStorage.from_url(database_url or settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    try:
        logger.info("Creating catalog schema", extra={"database_url": storage.engine.url.render_as_string()})
        await storage.create_schema()
        logger.info("Catalog schema is up to date")
    finally:
        await storage.close()


async def check_schema() -> None:
    """Log how many nodes of each category the configured store holds."""

    storage = await database_manager.initialize()
    try:
        for category in NodeCategory:
            nodes = await storage.nodes_by_category(category)
            logger.info("%s: %d", category.value, len(nodes))
    finally:
        await database_manager.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="productdb", description="Product database service")
    subcommands = parser.add_subparsers(dest="command")

    serve = subcommands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    migrate = subcommands.add_parser("migrate", help="Create the database schema")
    migrate.add_argument("--database-url", default=None)

    subcommands.add_parser("check", help="Report node counts per category")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        if args.command == "migrate":
            asyncio.run(run_migrations(args.database_url))
        elif args.command == "check":
            asyncio.run(check_schema())
        else:
            run_server(getattr(args, "host", None), getattr(args, "port", None))
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
