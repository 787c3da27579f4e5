"""Product operations."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List

from productdb.graph.domain import Product
from productdb.graph.models import LoadOptions, Node, NodeCategory
from productdb.models import (
    ProductCreateRequest,
    ProductResponse,
    ProductUpdateRequest,
    ProductVersionResponse,
)
from productdb.services.base import CatalogService, backend_errors, new_id
from productdb.services.projections import predecessor_index, product_response, version_response

logger = logging.getLogger(__name__)


class ProductService(CatalogService):
    """Products hang under a vendor and may reference a product family."""

    async def create(self, payload: ProductCreateRequest) -> ProductResponse:
        vendor = await self._resolve_node(payload.vendor_id, NodeCategory.VENDOR, "vendor_id")
        if payload.family_id is not None:
            await self._resolve_node(payload.family_id, NodeCategory.PRODUCT_FAMILY, "family_id")

        product = Product(
            id=new_id(),
            name=payload.name,
            description=payload.description,
            vendor_id=vendor.id,
            product_type=payload.type,
            family_id=payload.family_id,
        )
        node = await self._store(product.to_node(), "create product", new=True)

        logger.info("Product created", extra={"product_id": node.id, "vendor_id": vendor.id})
        return product_response(node, vendor)

    async def list(self) -> List[ProductResponse]:
        with backend_errors("fetch products"):
            products = await self.storage.nodes_by_category(NodeCategory.PRODUCT_NAME)
            vendors = {vendor.id: vendor for vendor in await self.storage.nodes_by_category(NodeCategory.VENDOR)}
            versions = await self.storage.nodes_by_category(NodeCategory.PRODUCT_VERSION)

        versions_by_product: Dict[str, List[Node]] = defaultdict(list)
        for version in versions:
            versions_by_product[version.parent_id].append(version)
        predecessors = predecessor_index(versions)

        return [
            product_response(product, vendors.get(product.parent_id), versions_by_product[product.id], predecessors)
            for product in products
        ]

    async def get(self, product_id: str) -> ProductResponse:
        graph = await self._load_primary(
            product_id, NodeCategory.PRODUCT_NAME, LoadOptions.of("parent", "children.predecessor")
        )
        return product_response(
            graph.root, graph.parent(), graph.children(), predecessor_index(graph.nodes.values())
        )

    async def update(self, product_id: str, payload: ProductUpdateRequest) -> ProductResponse:
        graph = await self._load_primary(
            product_id, NodeCategory.PRODUCT_NAME, LoadOptions.of("parent", "children.predecessor")
        )
        product = Product.from_node(graph.root)
        vendor = graph.parent()
        changes = payload.model_dump(exclude_unset=True)

        if changes.get("name") is not None:
            product.name = changes["name"]
        if changes.get("description") is not None:
            product.description = changes["description"]
        if changes.get("type") is not None:
            product.product_type = changes["type"]
        if changes.get("vendor_id") is not None:
            vendor = await self._resolve_node(changes["vendor_id"], NodeCategory.VENDOR, "vendor_id")
            product.vendor_id = vendor.id
        if "family_id" in changes:
            family_id = changes["family_id"]
            if family_id is not None:
                await self._resolve_node(family_id, NodeCategory.PRODUCT_FAMILY, "family_id")
            product.family_id = family_id

        node = await self._store(product.to_node(), "update product")

        logger.info("Product updated", extra={"product_id": product_id, "fields": sorted(changes)})
        return product_response(node, vendor, graph.children(), predecessor_index(graph.nodes.values()))

    async def delete(self, product_id: str) -> None:
        await self._load_primary(product_id, NodeCategory.PRODUCT_NAME)
        with backend_errors("delete product"):
            await self.storage.delete_node(product_id)
        logger.info("Product deleted", extra={"product_id": product_id})

    async def list_versions(self, product_id: str) -> List[ProductVersionResponse]:
        graph = await self._load_primary(
            product_id, NodeCategory.PRODUCT_NAME, LoadOptions.of("children.predecessor")
        )
        predecessors = predecessor_index(graph.nodes.values())
        return [
            version_response(version, graph.root, predecessors)
            for version in graph.children(category=NodeCategory.PRODUCT_VERSION)
        ]
