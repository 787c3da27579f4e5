"""Catalog graph node, relationship and identification helper models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


class NodeCategory(str, Enum):
    VENDOR = "vendor"
    PRODUCT_FAMILY = "product_family"
    PRODUCT_NAME = "product_name"
    PRODUCT_VERSION = "product_version"


class RelationshipCategory(str, Enum):
    DEFAULT_COMPONENT_OF = "default_component_of"
    EXTERNAL_COMPONENT_OF = "external_component_of"
    INSTALLED_ON = "installed_on"
    INSTALLED_WITH = "installed_with"
    OPTIONAL_COMPONENT_OF = "optional_component_of"


class ProductType(str, Enum):
    SOFTWARE = "software"
    HARDWARE = "hardware"
    FIRMWARE = "firmware"


@dataclass
class Node:
    """A vertex of the catalog graph in its flat storage shape."""

    id: str
    category: NodeCategory
    name: str
    description: str = ""
    parent_id: Optional[str] = None
    family_id: Optional[str] = None
    product_type: Optional[ProductType] = None
    released_at: Optional[date] = None
    is_latest_version: bool = False
    successor_id: Optional[str] = None


@dataclass
class Relationship:
    """Typed, directed edge between two product versions."""

    id: str
    category: RelationshipCategory
    source_node_id: str
    target_node_id: str


@dataclass
class IdentificationHelper:
    """Category-tagged sidecar metadata attached to one product version."""

    id: str
    node_id: str
    category: str
    metadata: bytes = b""


# Preload hops understood by `LoadOptions`. `source_rels` brings the target
# nodes along, `target_rels` the source nodes.
LOAD_HOPS = ("children", "parent", "family", "predecessor", "source_rels", "target_rels")


@dataclass(frozen=True)
class LoadOptions:
    """Preload request expressed as dotted hop paths, e.g. ``children.children``."""

    paths: Tuple[Tuple[str, ...], ...] = ()

    @classmethod
    def of(cls, *dotted: str) -> "LoadOptions":
        paths = []
        for path in dotted:
            hops = tuple(part.strip() for part in path.split(".") if part.strip())
            unknown = [hop for hop in hops if hop not in LOAD_HOPS]
            if not hops or unknown:
                raise ValueError(f"Unsupported load option: {path!r}")
            paths.append(hops)
        return cls(paths=tuple(paths))

    def prefixes(self) -> Iterable[Tuple[str, ...]]:
        """Yield every distinct path prefix, shortest first."""

        seen = set()
        for path in self.paths:
            for end in range(1, len(path) + 1):
                prefix = path[:end]
                if prefix not in seen:
                    seen.add(prefix)
                    yield prefix


NO_PRELOAD = LoadOptions()


@dataclass
class NodeGraph:
    """Arena of nodes and relationships loaded around one root node.

    Nodes reference each other by id only. Navigation helpers answer from what
    was preloaded, so callers must request the hops they intend to follow.
    """

    root_id: str
    nodes: Dict[str, Node] = field(default_factory=dict)
    relationships: Dict[str, Relationship] = field(default_factory=dict)

    @property
    def root(self) -> Node:
        return self.nodes[self.root_id]

    def add_node(self, node: Node) -> None:
        self.nodes.setdefault(node.id, node)

    def add_relationship(self, relationship: Relationship) -> None:
        self.relationships.setdefault(relationship.id, relationship)

    def get(self, node_id: Optional[str]) -> Optional[Node]:
        if node_id is None:
            return None
        return self.nodes.get(node_id)

    def children(self, node_id: Optional[str] = None, category: Optional[NodeCategory] = None) -> List[Node]:
        owner = node_id or self.root_id
        return [
            node
            for node in self.nodes.values()
            if node.parent_id == owner and (category is None or node.category == category)
        ]

    def parent(self, node_id: Optional[str] = None) -> Optional[Node]:
        return self.get(self.nodes[node_id or self.root_id].parent_id)

    def family(self, node_id: Optional[str] = None) -> Optional[Node]:
        return self.get(self.nodes[node_id or self.root_id].family_id)

    def predecessor(self, node_id: Optional[str] = None) -> Optional[Node]:
        owner = node_id or self.root_id
        for node in self.nodes.values():
            if node.successor_id == owner:
                return node
        return None

    def outgoing(self, node_id: Optional[str] = None, category: Optional[RelationshipCategory] = None) -> List[Relationship]:
        owner = node_id or self.root_id
        return [
            rel
            for rel in self.relationships.values()
            if rel.source_node_id == owner and (category is None or rel.category == category)
        ]

    def incoming(self, node_id: Optional[str] = None) -> List[Relationship]:
        owner = node_id or self.root_id
        return [rel for rel in self.relationships.values() if rel.target_node_id == owner]
