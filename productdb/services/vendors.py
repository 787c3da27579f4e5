"""Vendor operations."""

from __future__ import annotations

import logging
from collections import Counter
from typing import List

from productdb.graph.domain import Vendor
from productdb.graph.models import LoadOptions, NodeCategory
from productdb.models import ProductResponse, VendorCreateRequest, VendorResponse, VendorUpdateRequest
from productdb.services.base import CatalogService, backend_errors, new_id
from productdb.services.projections import predecessor_index, product_response, vendor_response

logger = logging.getLogger(__name__)


class VendorService(CatalogService):
    """Vendors sit at the top of the hierarchy and own products."""

    async def create(self, payload: VendorCreateRequest) -> VendorResponse:
        vendor = Vendor(id=new_id(), name=payload.name, description=payload.description)
        node = await self._store(vendor.to_node(), "create vendor", new=True)

        logger.info("Vendor created", extra={"vendor_id": node.id})
        return vendor_response(node, product_count=0)

    async def list(self) -> List[VendorResponse]:
        with backend_errors("fetch vendors"):
            vendors = await self.storage.nodes_by_category(NodeCategory.VENDOR)
            products = await self.storage.nodes_by_category(NodeCategory.PRODUCT_NAME)

        counts = Counter(product.parent_id for product in products)
        return [vendor_response(vendor, counts.get(vendor.id, 0)) for vendor in vendors]

    async def get(self, vendor_id: str) -> VendorResponse:
        graph = await self._load_primary(vendor_id, NodeCategory.VENDOR, LoadOptions.of("children"))
        return vendor_response(graph.root, len(graph.children(category=NodeCategory.PRODUCT_NAME)))

    async def update(self, vendor_id: str, payload: VendorUpdateRequest) -> VendorResponse:
        graph = await self._load_primary(vendor_id, NodeCategory.VENDOR, LoadOptions.of("children"))
        vendor = Vendor.from_node(graph.root)

        changes = payload.model_dump(exclude_unset=True)
        if changes.get("name") is not None:
            vendor.name = changes["name"]
        if changes.get("description") is not None:
            vendor.description = changes["description"]

        node = await self._store(vendor.to_node(), "update vendor")

        logger.info("Vendor updated", extra={"vendor_id": vendor_id, "fields": sorted(changes)})
        return vendor_response(node, len(graph.children(category=NodeCategory.PRODUCT_NAME)))

    async def delete(self, vendor_id: str) -> None:
        await self._load_primary(vendor_id, NodeCategory.VENDOR)
        with backend_errors("delete vendor"):
            await self.storage.delete_node(vendor_id)
        logger.info("Vendor deleted", extra={"vendor_id": vendor_id})

    async def list_products(self, vendor_id: str) -> List[ProductResponse]:
        graph = await self._load_primary(
            vendor_id, NodeCategory.VENDOR, LoadOptions.of("children.children.predecessor")
        )
        predecessors = predecessor_index(graph.nodes.values())
        return [
            product_response(product, graph.root, graph.children(product.id), predecessors)
            for product in graph.children(category=NodeCategory.PRODUCT_NAME)
        ]
