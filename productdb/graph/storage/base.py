"""Storage port for the catalog graph.

Adapters implement the record-level operations; the preload walk behind
`get_node` is shared so every adapter answers `LoadOptions` the same way.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from productdb.graph.models import (
    NO_PRELOAD,
    IdentificationHelper,
    LoadOptions,
    Node,
    NodeCategory,
    NodeGraph,
    Relationship,
    RelationshipCategory,
)


class StorageError(Exception):
    """Base class for storage port failures."""


class RecordNotFound(StorageError):
    """The addressed record does not exist."""


class BackendFailure(StorageError):
    """Any storage failure other than a missing record."""


@dataclass
class RelationshipEndpoints:
    """A relationship together with its preloaded source and target nodes."""

    relationship: Relationship
    source_node: Node
    target_node: Node


def _unique(ids: Iterable[Optional[str]]) -> List[str]:
    return [node_id for node_id in dict.fromkeys(ids) if node_id is not None]


class CatalogStorage(abc.ABC):
    """Abstract persistence for nodes, relationships and identification helpers."""

    # -- lifecycle -------------------------------------------------------

    async def create_schema(self) -> None:
        """Prepare the backing store; adapters without a schema do nothing."""

    async def close(self) -> None:
        """Release backend resources."""

    # -- nodes -----------------------------------------------------------

    @abc.abstractmethod
    async def create_node(self, node: Node) -> Node: ...

    @abc.abstractmethod
    async def update_node(self, node: Node) -> Node: ...

    @abc.abstractmethod
    async def delete_node(self, node_id: str) -> None:
        """Delete a node, its descendants, their relationships and helpers."""

    @abc.abstractmethod
    async def nodes_by_category(self, category: NodeCategory) -> List[Node]: ...

    @abc.abstractmethod
    async def nodes_by_ids(self, node_ids: Sequence[str]) -> List[Node]:
        """Return the existing nodes among `node_ids`; missing ids are skipped."""

    async def get_node(self, node_id: str, load: LoadOptions = NO_PRELOAD) -> NodeGraph:
        found = await self.nodes_by_ids([node_id])
        if not found:
            raise RecordNotFound(f"Node {node_id} does not exist")

        graph = NodeGraph(root_id=node_id)
        graph.add_node(found[0])

        frontiers = {(): [node_id]}
        for prefix in load.prefixes():
            frontiers[prefix] = await self._follow(graph, frontiers[prefix[:-1]], prefix[-1])
        return graph

    # -- relationships ---------------------------------------------------

    @abc.abstractmethod
    async def create_relationship(self, relationship: Relationship) -> Relationship: ...

    @abc.abstractmethod
    async def update_relationship(self, relationship: Relationship) -> Relationship: ...

    @abc.abstractmethod
    async def delete_relationship(self, relationship_id: str) -> None: ...

    @abc.abstractmethod
    async def get_relationship(self, relationship_id: str) -> RelationshipEndpoints: ...

    @abc.abstractmethod
    async def rels_by_source_and_category(
        self, source_id: str, category: RelationshipCategory
    ) -> List[Relationship]: ...

    @abc.abstractmethod
    async def delete_rels_by_source_and_category(self, source_id: str, category: RelationshipCategory) -> int:
        """Delete every edge of one category leaving `source_id`; return the count."""

    # -- identification helpers -----------------------------------------

    @abc.abstractmethod
    async def create_identification_helper(self, helper: IdentificationHelper) -> IdentificationHelper: ...

    @abc.abstractmethod
    async def get_identification_helper(self, helper_id: str) -> IdentificationHelper: ...

    @abc.abstractmethod
    async def update_identification_helper(self, helper: IdentificationHelper) -> IdentificationHelper: ...

    @abc.abstractmethod
    async def delete_identification_helper(self, helper_id: str) -> None: ...

    @abc.abstractmethod
    async def helpers_by_node(self, node_id: str) -> List[IdentificationHelper]: ...

    # -- preload primitives ----------------------------------------------

    @abc.abstractmethod
    async def _fetch_children(self, node_ids: Sequence[str]) -> List[Node]: ...

    @abc.abstractmethod
    async def _fetch_predecessors(self, node_ids: Sequence[str]) -> List[Node]:
        """Return nodes whose `successor_id` is one of `node_ids`."""

    @abc.abstractmethod
    async def _fetch_relationships(self, node_ids: Sequence[str], *, outgoing: bool) -> List[Relationship]: ...

    async def _follow(self, graph: NodeGraph, frontier: List[str], hop: str) -> List[str]:
        if not frontier:
            return []

        if hop == "children":
            nodes = await self._fetch_children(frontier)
        elif hop == "parent":
            nodes = await self.nodes_by_ids(_unique(graph.nodes[node_id].parent_id for node_id in frontier))
        elif hop == "family":
            nodes = await self.nodes_by_ids(_unique(graph.nodes[node_id].family_id for node_id in frontier))
        elif hop == "predecessor":
            nodes = await self._fetch_predecessors(frontier)
        else:
            outgoing = hop == "source_rels"
            relationships = await self._fetch_relationships(frontier, outgoing=outgoing)
            for relationship in relationships:
                graph.add_relationship(relationship)
            far_ids = _unique(
                rel.target_node_id if outgoing else rel.source_node_id for rel in relationships
            )
            nodes = await self.nodes_by_ids(far_ids)

        for node in nodes:
            graph.add_node(node)
        return _unique(node.id for node in nodes)
