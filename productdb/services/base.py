"""Shared plumbing for catalog services: lookups and storage error translation."""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Iterator

from productdb.core.exceptions import BackendError, BadInputError, BadReferenceError, NotFoundError
from productdb.graph.domain import shape_violations
from productdb.graph.models import NO_PRELOAD, LoadOptions, Node, NodeCategory, NodeGraph
from productdb.graph.storage.base import BackendFailure, CatalogStorage, RecordNotFound

logger = logging.getLogger(__name__)

CATEGORY_LABELS = {
    NodeCategory.VENDOR: "vendor",
    NodeCategory.PRODUCT_FAMILY: "product family",
    NodeCategory.PRODUCT_NAME: "product",
    NodeCategory.PRODUCT_VERSION: "product version",
}


def new_id() -> str:
    return str(uuid.uuid4())


@contextmanager
def backend_errors(action: str) -> Iterator[None]:
    """Surface storage backend failures as `BackendError`."""

    try:
        yield
    except BackendFailure as exc:
        logger.error("Storage backend failure", extra={"action": action, "error": str(exc)})
        raise BackendError(f"Failed to {action}") from exc


class CatalogService:
    """Base class for services that operate on the catalog storage port."""

    def __init__(self, storage: CatalogStorage) -> None:
        self.storage = storage

    async def _load_primary(
        self, node_id: str, category: NodeCategory, load: LoadOptions = NO_PRELOAD
    ) -> NodeGraph:
        """Load the node a request addresses; absence or wrong category is `NotFoundError`."""

        label = CATEGORY_LABELS[category]
        with backend_errors(f"fetch {label}"):
            try:
                graph = await self.storage.get_node(node_id, load)
            except RecordNotFound as exc:
                raise NotFoundError(f"{label.capitalize()} not found") from exc

        if graph.root.category != category:
            raise NotFoundError(f"{label.capitalize()} not found")
        return graph

    async def _resolve_reference(
        self, node_id: str, category: NodeCategory, field: str, load: LoadOptions = NO_PRELOAD
    ) -> NodeGraph:
        """Load a node referenced from a request body; problems are `BadReferenceError`."""

        label = CATEGORY_LABELS[category]
        with backend_errors(f"fetch {label}"):
            try:
                graph = await self.storage.get_node(node_id, load)
            except RecordNotFound as exc:
                raise BadReferenceError(f"{field} {node_id} does not reference an existing {label}") from exc

        if graph.root.category != category:
            raise BadReferenceError(f"{field} {node_id} must reference a {label}")
        return graph

    async def _resolve_node(self, node_id: str, category: NodeCategory, field: str) -> Node:
        graph = await self._resolve_reference(node_id, category, field)
        return graph.root

    async def _store(self, node: Node, action: str, *, new: bool = False) -> Node:
        """Check the node's category invariants, then create or update it."""

        problems = shape_violations(node)
        if problems:
            raise BadInputError(f"Invalid {CATEGORY_LABELS[node.category]}: {'; '.join(problems)}")

        with backend_errors(action):
            if new:
                return await self.storage.create_node(node)
            return await self.storage.update_node(node)
