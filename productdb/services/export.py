"""CSAF product-tree export."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from productdb.core.exceptions import NotFoundError
from productdb.graph.models import LoadOptions, Node, NodeCategory
from productdb.services.base import CatalogService, backend_errors
from productdb.services.csaf import ProductTreeBuilder

logger = logging.getLogger(__name__)


def family_chain(product: Node, families: Dict[str, Node]) -> List[Node]:
    """Families above `product`, top-most ancestor first."""

    chain: List[Node] = []
    seen = set()
    current: Optional[Node] = families.get(product.family_id) if product.family_id else None
    while current is not None and current.id not in seen:
        seen.add(current.id)
        chain.append(current)
        current = families.get(current.parent_id) if current.parent_id else None
    chain.reverse()
    return chain


class ProductTreeExportService(CatalogService):
    async def export(self, product_ids: Sequence[str]) -> Dict[str, Any]:
        with backend_errors("fetch product families"):
            families = {
                family.id: family for family in await self.storage.nodes_by_category(NodeCategory.PRODUCT_FAMILY)
            }

        builder = ProductTreeBuilder()
        for product_id in dict.fromkeys(product_ids):
            graph = await self._load_primary(
                product_id, NodeCategory.PRODUCT_NAME, LoadOptions.of("parent", "children")
            )
            product = graph.root
            vendor = graph.parent()
            if vendor is None or vendor.category != NodeCategory.VENDOR:
                raise NotFoundError("Vendor not found")

            versions = []
            for version in graph.children(category=NodeCategory.PRODUCT_VERSION):
                with backend_errors("fetch identification helpers"):
                    helpers = await self.storage.helpers_by_node(version.id)
                versions.append((version, helpers))

            builder.add_product(vendor, family_chain(product, families), product, versions)

        logger.info("Product tree exported", extra={"products": len(product_ids)})
        return builder.build()
