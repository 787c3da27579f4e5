"""Product family operations.

Families form their own tree through `parent_id`; products point at a family
through the separate `family_id` reference, so deleting a family removes its
sub-families but leaves member products with their vendor.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from productdb.core.exceptions import BadReferenceError
from productdb.graph.domain import ProductFamily
from productdb.graph.models import Node, NodeCategory
from productdb.models import ProductFamilyCreateRequest, ProductFamilyResponse, ProductFamilyUpdateRequest
from productdb.services.base import CatalogService, backend_errors, new_id

logger = logging.getLogger(__name__)


def family_path(family_id: str, families: Dict[str, Node]) -> List[str]:
    """Names from the root family down to `family_id`."""

    names: List[str] = []
    seen = set()
    current: Optional[Node] = families.get(family_id)
    while current is not None and current.id not in seen:
        seen.add(current.id)
        names.append(current.name)
        current = families.get(current.parent_id) if current.parent_id else None
    names.reverse()
    return names


def _family_response(family: Node, families: Dict[str, Node]) -> ProductFamilyResponse:
    return ProductFamilyResponse(
        id=family.id,
        name=family.name,
        description=family.description,
        parent_id=family.parent_id,
        path=family_path(family.id, families),
    )


class ProductFamilyService(CatalogService):
    async def _all_families(self) -> Dict[str, Node]:
        with backend_errors("fetch product families"):
            families = await self.storage.nodes_by_category(NodeCategory.PRODUCT_FAMILY)
        return {family.id: family for family in families}

    async def create(self, payload: ProductFamilyCreateRequest) -> ProductFamilyResponse:
        if payload.parent_id is not None:
            await self._resolve_node(payload.parent_id, NodeCategory.PRODUCT_FAMILY, "parent_id")

        family = ProductFamily(
            id=new_id(), name=payload.name, description=payload.description, parent_id=payload.parent_id
        )
        node = await self._store(family.to_node(), "create product family", new=True)

        logger.info("Product family created", extra={"family_id": node.id, "parent_id": node.parent_id})
        families = await self._all_families()
        return _family_response(node, families)

    async def list(self) -> List[ProductFamilyResponse]:
        families = await self._all_families()
        return [_family_response(family, families) for family in families.values()]

    async def get(self, family_id: str) -> ProductFamilyResponse:
        graph = await self._load_primary(family_id, NodeCategory.PRODUCT_FAMILY)
        families = await self._all_families()
        return _family_response(graph.root, families)

    async def update(self, family_id: str, payload: ProductFamilyUpdateRequest) -> ProductFamilyResponse:
        graph = await self._load_primary(family_id, NodeCategory.PRODUCT_FAMILY)
        family = ProductFamily.from_node(graph.root)
        changes = payload.model_dump(exclude_unset=True)

        if changes.get("name") is not None:
            family.name = changes["name"]
        if changes.get("description") is not None:
            family.description = changes["description"]
        if "parent_id" in changes:
            parent_id = changes["parent_id"]
            if parent_id is not None:
                await self._resolve_node(parent_id, NodeCategory.PRODUCT_FAMILY, "parent_id")
                families = await self._all_families()
                if family_id in self._ancestry(parent_id, families):
                    raise BadReferenceError("parent_id would make the product family its own ancestor")
            family.parent_id = parent_id

        node = await self._store(family.to_node(), "update product family")

        logger.info("Product family updated", extra={"family_id": family_id, "fields": sorted(changes)})
        families = await self._all_families()
        return _family_response(node, families)

    async def delete(self, family_id: str) -> None:
        await self._load_primary(family_id, NodeCategory.PRODUCT_FAMILY)
        with backend_errors("delete product family"):
            await self.storage.delete_node(family_id)
        logger.info("Product family deleted", extra={"family_id": family_id})

    @staticmethod
    def _ancestry(family_id: str, families: Dict[str, Node]) -> List[str]:
        chain: List[str] = []
        current = families.get(family_id)
        while current is not None and current.id not in chain:
            chain.append(current.id)
            current = families.get(current.parent_id) if current.parent_id else None
        return chain
