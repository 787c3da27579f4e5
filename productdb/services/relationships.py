"""Relationship operations between product versions.

The bulk write contract is reconciliation: the caller sends the complete set
of targets one source should have for a category, and the service computes
which edges to delete, which to recategorize and which to create.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from productdb.core.exceptions import BadReferenceError, NotFoundError
from productdb.graph.models import LoadOptions, Node, NodeCategory, NodeGraph, Relationship, RelationshipCategory
from productdb.graph.storage.base import RecordNotFound
from productdb.models import (
    RelationshipCreateRequest,
    RelationshipGroup,
    RelationshipGroupItem,
    RelationshipReconcileRequest,
    RelationshipResponse,
    RelationshipUpdateRequest,
    VersionRelationship,
)
from productdb.services.base import CatalogService, backend_errors, new_id
from productdb.services.projections import predecessor_index, product_response, version_response

logger = logging.getLogger(__name__)

_ENDPOINT_LOAD = LoadOptions.of("parent", "predecessor")
_GROUP_LOAD = LoadOptions.of("source_rels.parent.parent", "source_rels.parent.children", "source_rels.predecessor")


@dataclass
class ReconciliationPlan:
    """Edge changes that turn the existing set into the desired one."""

    to_delete: List[Relationship] = field(default_factory=list)
    to_recategorize: List[Relationship] = field(default_factory=list)
    to_create: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.to_delete or self.to_recategorize or self.to_create)


def plan_reconciliation(
    existing: Sequence[Relationship],
    previous_category: RelationshipCategory,
    new_category: RelationshipCategory,
    target_node_ids: Sequence[str],
    present_in_new: Sequence[Relationship] = (),
) -> ReconciliationPlan:
    """Plan the edge changes for one source.

    ``existing`` holds the source's edges in ``previous_category``. When the
    category changes, ``present_in_new`` holds its edges already in
    ``new_category``; their targets count as satisfied, so an edge in the old
    category pointing at one of them is deleted rather than recategorized.
    """

    desired = list(dict.fromkeys(target_node_ids))
    wanted = set(desired)
    plan = ReconciliationPlan()

    satisfied = set()
    if previous_category != new_category:
        satisfied = {rel.target_node_id for rel in present_in_new if rel.target_node_id in wanted}

    kept_targets = set()
    for relationship in existing:
        target = relationship.target_node_id
        if target not in wanted or target in kept_targets or target in satisfied:
            # duplicate edges to one target collapse onto the first one
            plan.to_delete.append(relationship)
            continue
        kept_targets.add(target)
        if previous_category != new_category:
            plan.to_recategorize.append(relationship)

    plan.to_create = [target for target in desired if target not in kept_targets and target not in satisfied]
    return plan


class RelationshipService(CatalogService):
    async def _resolve_versions(self, node_ids: Sequence[str], field_name: str) -> Dict[str, Node]:
        unique_ids = list(dict.fromkeys(node_ids))
        with backend_errors("fetch product versions"):
            nodes = {node.id: node for node in await self.storage.nodes_by_ids(unique_ids)}

        for node_id in unique_ids:
            node = nodes.get(node_id)
            if node is None:
                raise BadReferenceError(f"{field_name} {node_id} does not reference an existing product version")
            if node.category != NodeCategory.PRODUCT_VERSION:
                raise BadReferenceError(f"{field_name} {node_id} must reference a product version")
        return nodes

    async def create(self, payload: RelationshipCreateRequest) -> List[str]:
        """Create one edge per (source, target) pair; pairs that already exist are left alone."""

        await self._resolve_versions(payload.source_node_ids, "source_node_ids")
        await self._resolve_versions(payload.target_node_ids, "target_node_ids")

        created: List[str] = []
        with backend_errors("create relationships"):
            for source_id in dict.fromkeys(payload.source_node_ids):
                existing = await self.storage.rels_by_source_and_category(source_id, payload.category)
                present = {relationship.target_node_id for relationship in existing}
                for target_id in dict.fromkeys(payload.target_node_ids):
                    if target_id in present:
                        continue
                    relationship = await self.storage.create_relationship(
                        Relationship(
                            id=new_id(),
                            category=payload.category,
                            source_node_id=source_id,
                            target_node_id=target_id,
                        )
                    )
                    created.append(relationship.id)

        logger.info(
            "Relationships created",
            extra={"category": payload.category.value, "created": len(created)},
        )
        return created

    async def reconcile(self, payload: RelationshipReconcileRequest) -> ReconciliationPlan:
        await self._resolve_node(payload.source_node_id, NodeCategory.PRODUCT_VERSION, "source_node_id")
        await self._resolve_versions(payload.target_node_ids, "target_node_ids")

        with backend_errors("fetch relationships"):
            existing = await self.storage.rels_by_source_and_category(
                payload.source_node_id, payload.previous_category
            )
            present_in_new: List[Relationship] = []
            if payload.new_category != payload.previous_category:
                present_in_new = await self.storage.rels_by_source_and_category(
                    payload.source_node_id, payload.new_category
                )

        plan = plan_reconciliation(
            existing, payload.previous_category, payload.new_category, payload.target_node_ids, present_in_new
        )

        with backend_errors("reconcile relationships"):
            for relationship in plan.to_delete:
                await self.storage.delete_relationship(relationship.id)
            for relationship in plan.to_recategorize:
                relationship.category = payload.new_category
                await self.storage.update_relationship(relationship)
            for target_id in plan.to_create:
                await self.storage.create_relationship(
                    Relationship(
                        id=new_id(),
                        category=payload.new_category,
                        source_node_id=payload.source_node_id,
                        target_node_id=target_id,
                    )
                )

        logger.info(
            "Relationships reconciled",
            extra={
                "source_node_id": payload.source_node_id,
                "previous_category": payload.previous_category.value,
                "new_category": payload.new_category.value,
                "deleted": len(plan.to_delete),
                "recategorized": len(plan.to_recategorize),
                "created": len(plan.to_create),
            },
        )
        return plan

    async def list_for_version(self, version_id: str) -> List[RelationshipGroup]:
        """Group outgoing edges by category, then by target product, in retrieval order."""

        graph = await self._load_primary(version_id, NodeCategory.PRODUCT_VERSION, _GROUP_LOAD)
        predecessors = predecessor_index(graph.nodes.values())

        groups: Dict[RelationshipCategory, Dict[str, RelationshipGroupItem]] = {}
        for relationship in graph.outgoing():
            target = graph.get(relationship.target_node_id)
            if target is None:
                continue
            product = graph.parent(target.id)
            if product is None:
                continue

            items = groups.setdefault(relationship.category, {})
            item = items.get(product.id)
            if item is None:
                item = RelationshipGroupItem(
                    product=product_response(
                        product, graph.parent(product.id), graph.children(product.id), predecessors
                    )
                )
                items[product.id] = item
            item.version_relationships.append(
                VersionRelationship(id=relationship.id, version=version_response(target, product, predecessors))
            )

        return [
            RelationshipGroup(category=category, products=list(items.values()))
            for category, items in groups.items()
        ]

    async def get(self, relationship_id: str) -> RelationshipResponse:
        with backend_errors("fetch relationship"):
            try:
                endpoints = await self.storage.get_relationship(relationship_id)
            except RecordNotFound as exc:
                raise NotFoundError("Relationship not found") from exc
        return await self._response(endpoints.relationship)

    async def update(self, relationship_id: str, payload: RelationshipUpdateRequest) -> RelationshipResponse:
        with backend_errors("fetch relationship"):
            try:
                endpoints = await self.storage.get_relationship(relationship_id)
            except RecordNotFound as exc:
                raise NotFoundError("Relationship not found") from exc

        relationship = endpoints.relationship
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("category") is not None:
            relationship.category = changes["category"]
        if changes.get("source_node_id") is not None:
            await self._resolve_node(changes["source_node_id"], NodeCategory.PRODUCT_VERSION, "source_node_id")
            relationship.source_node_id = changes["source_node_id"]
        if changes.get("target_node_id") is not None:
            await self._resolve_node(changes["target_node_id"], NodeCategory.PRODUCT_VERSION, "target_node_id")
            relationship.target_node_id = changes["target_node_id"]

        with backend_errors("update relationship"):
            relationship = await self.storage.update_relationship(relationship)

        logger.info("Relationship updated", extra={"relationship_id": relationship_id, "fields": sorted(changes)})
        return await self._response(relationship)

    async def delete(self, relationship_id: str) -> None:
        with backend_errors("delete relationship"):
            try:
                await self.storage.delete_relationship(relationship_id)
            except RecordNotFound as exc:
                raise NotFoundError("Relationship not found") from exc
        logger.info("Relationship deleted", extra={"relationship_id": relationship_id})

    async def delete_by_version_and_category(self, version_id: str, category: RelationshipCategory) -> int:
        await self._load_primary(version_id, NodeCategory.PRODUCT_VERSION)
        with backend_errors("delete relationships"):
            deleted = await self.storage.delete_rels_by_source_and_category(version_id, category)
        logger.info(
            "Relationships deleted",
            extra={"source_node_id": version_id, "category": category.value, "deleted": deleted},
        )
        return deleted

    async def _endpoint(self, node_id: str) -> NodeGraph:
        with backend_errors("fetch product version"):
            return await self.storage.get_node(node_id, _ENDPOINT_LOAD)

    async def _response(self, relationship: Relationship) -> RelationshipResponse:
        source = await self._endpoint(relationship.source_node_id)
        target = await self._endpoint(relationship.target_node_id)
        return RelationshipResponse(
            id=relationship.id,
            category=relationship.category,
            source=version_response(source.root, source.parent(), predecessor_index(source.nodes.values())),
            target=version_response(target.root, target.parent(), predecessor_index(target.nodes.values())),
        )
