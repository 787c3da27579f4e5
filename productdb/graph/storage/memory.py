"""In-process storage adapter backed by dictionaries."""

from __future__ import annotations

import asyncio
import logging
from copy import copy
from typing import Dict, List, Sequence

from productdb.graph.models import IdentificationHelper, Node, NodeCategory, Relationship, RelationshipCategory
from productdb.graph.storage.base import CatalogStorage, RecordNotFound, RelationshipEndpoints

logger = logging.getLogger(__name__)


class InMemoryStorage(CatalogStorage):
    """Keeps the catalog graph in memory; records are copied in and out."""

    def __init__(self) -> None:
        self._nodes: Dict[str, Node] = {}
        self._relationships: Dict[str, Relationship] = {}
        self._helpers: Dict[str, IdentificationHelper] = {}
        self._lock = asyncio.Lock()

    # -- nodes -----------------------------------------------------------

    async def create_node(self, node: Node) -> Node:
        async with self._lock:
            self._nodes[node.id] = copy(node)
        return copy(node)

    async def update_node(self, node: Node) -> Node:
        async with self._lock:
            if node.id not in self._nodes:
                raise RecordNotFound(f"Node {node.id} does not exist")
            self._nodes[node.id] = copy(node)
        return copy(node)

    async def delete_node(self, node_id: str) -> None:
        async with self._lock:
            if node_id not in self._nodes:
                raise RecordNotFound(f"Node {node_id} does not exist")

            doomed = [node_id]
            frontier = [node_id]
            while frontier:
                frontier = [node.id for node in self._nodes.values() if node.parent_id in frontier]
                doomed.extend(frontier)
            doomed_set = set(doomed)

            for doomed_id in doomed:
                self._nodes.pop(doomed_id, None)
            for node in self._nodes.values():
                if node.family_id in doomed_set:
                    node.family_id = None
                if node.successor_id in doomed_set:
                    node.successor_id = None
            self._relationships = {
                rel_id: rel
                for rel_id, rel in self._relationships.items()
                if rel.source_node_id not in doomed_set and rel.target_node_id not in doomed_set
            }
            self._helpers = {
                helper_id: helper for helper_id, helper in self._helpers.items() if helper.node_id not in doomed_set
            }

        logger.debug("Deleted node subtree", extra={"node_id": node_id, "removed": len(doomed)})

    async def nodes_by_category(self, category: NodeCategory) -> List[Node]:
        return [copy(node) for node in self._nodes.values() if node.category == category]

    async def nodes_by_ids(self, node_ids: Sequence[str]) -> List[Node]:
        return [copy(self._nodes[node_id]) for node_id in dict.fromkeys(node_ids) if node_id in self._nodes]

    # -- relationships ---------------------------------------------------

    async def create_relationship(self, relationship: Relationship) -> Relationship:
        async with self._lock:
            for endpoint in (relationship.source_node_id, relationship.target_node_id):
                if endpoint not in self._nodes:
                    raise RecordNotFound(f"Node {endpoint} does not exist")
            self._relationships[relationship.id] = copy(relationship)
        return copy(relationship)

    async def update_relationship(self, relationship: Relationship) -> Relationship:
        async with self._lock:
            if relationship.id not in self._relationships:
                raise RecordNotFound(f"Relationship {relationship.id} does not exist")
            self._relationships[relationship.id] = copy(relationship)
        return copy(relationship)

    async def delete_relationship(self, relationship_id: str) -> None:
        async with self._lock:
            if self._relationships.pop(relationship_id, None) is None:
                raise RecordNotFound(f"Relationship {relationship_id} does not exist")

    async def get_relationship(self, relationship_id: str) -> RelationshipEndpoints:
        relationship = self._relationships.get(relationship_id)
        if relationship is None:
            raise RecordNotFound(f"Relationship {relationship_id} does not exist")
        return RelationshipEndpoints(
            relationship=copy(relationship),
            source_node=copy(self._nodes[relationship.source_node_id]),
            target_node=copy(self._nodes[relationship.target_node_id]),
        )

    async def rels_by_source_and_category(
        self, source_id: str, category: RelationshipCategory
    ) -> List[Relationship]:
        return [
            copy(rel)
            for rel in self._relationships.values()
            if rel.source_node_id == source_id and rel.category == category
        ]

    async def delete_rels_by_source_and_category(self, source_id: str, category: RelationshipCategory) -> int:
        async with self._lock:
            doomed = [
                rel_id
                for rel_id, rel in self._relationships.items()
                if rel.source_node_id == source_id and rel.category == category
            ]
            for rel_id in doomed:
                del self._relationships[rel_id]
        return len(doomed)

    # -- identification helpers -----------------------------------------

    async def create_identification_helper(self, helper: IdentificationHelper) -> IdentificationHelper:
        async with self._lock:
            if helper.node_id not in self._nodes:
                raise RecordNotFound(f"Node {helper.node_id} does not exist")
            self._helpers[helper.id] = copy(helper)
        return copy(helper)

    async def get_identification_helper(self, helper_id: str) -> IdentificationHelper:
        helper = self._helpers.get(helper_id)
        if helper is None:
            raise RecordNotFound(f"Identification helper {helper_id} does not exist")
        return copy(helper)

    async def update_identification_helper(self, helper: IdentificationHelper) -> IdentificationHelper:
        async with self._lock:
            if helper.id not in self._helpers:
                raise RecordNotFound(f"Identification helper {helper.id} does not exist")
            self._helpers[helper.id] = copy(helper)
        return copy(helper)

    async def delete_identification_helper(self, helper_id: str) -> None:
        async with self._lock:
            if self._helpers.pop(helper_id, None) is None:
                raise RecordNotFound(f"Identification helper {helper_id} does not exist")

    async def helpers_by_node(self, node_id: str) -> List[IdentificationHelper]:
        return [copy(helper) for helper in self._helpers.values() if helper.node_id == node_id]

    # -- preload primitives ----------------------------------------------

    async def _fetch_children(self, node_ids: Sequence[str]) -> List[Node]:
        owners = set(node_ids)
        return [copy(node) for node in self._nodes.values() if node.parent_id in owners]

    async def _fetch_predecessors(self, node_ids: Sequence[str]) -> List[Node]:
        successors = set(node_ids)
        return [copy(node) for node in self._nodes.values() if node.successor_id in successors]

    async def _fetch_relationships(self, node_ids: Sequence[str], *, outgoing: bool) -> List[Relationship]:
        owners = set(node_ids)
        return [
            copy(rel)
            for rel in self._relationships.values()
            if (rel.source_node_id if outgoing else rel.target_node_id) in owners
        ]
