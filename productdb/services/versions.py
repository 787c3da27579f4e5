"""Product version operations.

A version's predecessor is stored on the predecessor itself: when version V
names P as its predecessor, P.successor_id is set to V. A version has at most
one predecessor, so pointing V at a new predecessor releases the old one, and
P may only be claimed while it has no other successor.
"""

from __future__ import annotations

import logging
from typing import Optional

from productdb.core.exceptions import BadInputError, BadReferenceError
from productdb.graph.domain import ProductVersion
from productdb.graph.models import LoadOptions, Node, NodeCategory, NodeGraph
from productdb.models import ProductVersionCreateRequest, ProductVersionResponse, ProductVersionUpdateRequest
from productdb.services.base import CatalogService, backend_errors, new_id
from productdb.services.projections import version_response
from productdb.utils.validators import parse_release_date

logger = logging.getLogger(__name__)


def _release_date(raw: str):
    try:
        return parse_release_date(raw)
    except ValueError as exc:
        raise BadInputError("Release date must be in YYYY-MM-DD format") from exc


class ProductVersionService(CatalogService):
    async def create(self, payload: ProductVersionCreateRequest) -> ProductVersionResponse:
        product = await self._resolve_node(payload.product_id, NodeCategory.PRODUCT_NAME, "product_id")
        released_at = _release_date(payload.release_date) if payload.release_date is not None else None

        predecessor: Optional[Node] = None
        if payload.predecessor_id is not None:
            predecessor = await self._resolve_node(
                payload.predecessor_id, NodeCategory.PRODUCT_VERSION, "predecessor_id"
            )
            self._require_free_predecessor(predecessor, version_id=None)

        version = ProductVersion(
            id=new_id(),
            name=payload.version,
            description=payload.description,
            product_id=product.id,
            released_at=released_at,
            is_latest=payload.is_latest,
        )
        node = await self._store(version.to_node(), "create product version", new=True)

        if predecessor is not None:
            await self._link_predecessor(node.id, current=None, predecessor=predecessor)

        logger.info("Product version created", extra={"version_id": node.id, "product_id": product.id})
        return version_response(node, product, {node.id: predecessor.id} if predecessor else None)

    async def get(self, version_id: str) -> ProductVersionResponse:
        graph = await self._load_primary(
            version_id, NodeCategory.PRODUCT_VERSION, LoadOptions.of("parent", "predecessor")
        )
        return self._response(graph)

    async def update(self, version_id: str, payload: ProductVersionUpdateRequest) -> ProductVersionResponse:
        graph = await self._load_primary(
            version_id, NodeCategory.PRODUCT_VERSION, LoadOptions.of("parent", "predecessor")
        )
        version = ProductVersion.from_node(graph.root)
        product = graph.parent()
        changes = payload.model_dump(exclude_unset=True)

        if changes.get("version") is not None:
            version.name = changes["version"]
        if changes.get("description") is not None:
            version.description = changes["description"]
        if changes.get("is_latest") is not None:
            version.is_latest = changes["is_latest"]
        if changes.get("product_id") is not None:
            product = await self._resolve_node(changes["product_id"], NodeCategory.PRODUCT_NAME, "product_id")
            version.product_id = product.id
        if "release_date" in changes:
            raw = changes["release_date"]
            version.released_at = _release_date(raw) if raw is not None else None

        predecessor = graph.predecessor()
        if "predecessor_id" in changes:
            predecessor_id = changes["predecessor_id"]
            if predecessor_id == version_id:
                raise BadReferenceError("A product version cannot be its own predecessor")
            new_predecessor = None
            if predecessor_id is not None:
                new_predecessor = await self._resolve_node(
                    predecessor_id, NodeCategory.PRODUCT_VERSION, "predecessor_id"
                )
                self._require_free_predecessor(new_predecessor, version_id=version_id)
                await self._reject_successor_loop(graph.root, new_predecessor.id)
            await self._link_predecessor(version_id, current=predecessor, predecessor=new_predecessor)
            predecessor = new_predecessor

        node = await self._store(version.to_node(), "update product version")

        logger.info("Product version updated", extra={"version_id": version_id, "fields": sorted(changes)})
        return version_response(node, product, {node.id: predecessor.id} if predecessor else None)

    async def delete(self, version_id: str) -> None:
        await self._load_primary(version_id, NodeCategory.PRODUCT_VERSION)
        with backend_errors("delete product version"):
            await self.storage.delete_node(version_id)
        logger.info("Product version deleted", extra={"version_id": version_id})

    @staticmethod
    def _require_free_predecessor(predecessor: Node, *, version_id: Optional[str]) -> None:
        # a version has at most one successor
        if predecessor.successor_id is not None and predecessor.successor_id != version_id:
            raise BadReferenceError(
                f"predecessor_id {predecessor.id} is already the predecessor of {predecessor.successor_id}"
            )

    async def _reject_successor_loop(self, version: Node, predecessor_id: str) -> None:
        """Raise if ``predecessor_id`` already follows ``version`` in its successor chain."""

        seen = {version.id}
        next_id = version.successor_id
        while next_id is not None and next_id not in seen:
            if next_id == predecessor_id:
                raise BadReferenceError("predecessor_id would make the product version its own ancestor")
            seen.add(next_id)
            with backend_errors("fetch product version"):
                found = await self.storage.nodes_by_ids([next_id])
            next_id = found[0].successor_id if found else None

    async def _link_predecessor(
        self, version_id: str, *, current: Optional[Node], predecessor: Optional[Node]
    ) -> None:
        with backend_errors("update product version predecessor"):
            if current is not None and (predecessor is None or current.id != predecessor.id):
                current.successor_id = None
                await self.storage.update_node(current)
            if predecessor is not None:
                predecessor.successor_id = version_id
                await self.storage.update_node(predecessor)

    @staticmethod
    def _response(graph: NodeGraph) -> ProductVersionResponse:
        predecessor = graph.predecessor()
        return version_response(
            graph.root, graph.parent(), {graph.root_id: predecessor.id} if predecessor else None
        )
