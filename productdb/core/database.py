"""Storage lifecycle for the product database service."""

from __future__ import annotations

import logging
from typing import Optional

from productdb.core.config import settings
from productdb.graph.storage.base import CatalogStorage
from productdb.graph.storage.memory import InMemoryStorage
from productdb.graph.storage.sql import SQLStorage

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Builds the configured storage adapter and owns its lifetime."""

    def __init__(self) -> None:
        self.storage: Optional[CatalogStorage] = None

    async def initialize(self) -> CatalogStorage:
        if self.storage is not None:
            return self.storage

        logger.info("Initializing catalog storage", extra={"backend": settings.STORAGE_BACKEND})

        if settings.STORAGE_BACKEND == "memory":
            self.storage = InMemoryStorage()
        else:
            self.storage = SQLStorage.from_url(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
            if settings.DATABASE_AUTO_MIGRATE:
                await self.storage.create_schema()

        logger.info("Catalog storage initialized")
        return self.storage

    async def close(self) -> None:
        logger.info("Closing catalog storage")

        if self.storage is not None:
            await self.storage.close()
            self.storage = None


# Singleton instance used by the API dependencies and the CLI
database_manager = DatabaseManager()
