"""Category-tagged views over catalog nodes.

Storage keeps one flat `Node` shape for every vertex. Services work with the
variants below instead; each variant converts from and to a `Node` and the
conversion is where the category invariants live:

* a vendor has no parent,
* a product family has no parent or another family as parent,
* a product belongs to a vendor and optionally references a family,
* a version belongs to a product,
* only products carry a product type and only versions carry release data.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import ClassVar, Dict, List, Optional

from productdb.graph.models import Node, NodeCategory, ProductType


class CategoryMismatchError(ValueError):
    """Raised when a node is interpreted as a variant of another category."""

    def __init__(self, node: Node, expected: NodeCategory) -> None:
        super().__init__(f"Node {node.id} is a {node.category.value}, expected {expected.value}")
        self.node = node
        self.expected = expected


# Category each node category must hang under; None means "no parent".
PARENT_CATEGORY: Dict[NodeCategory, Optional[NodeCategory]] = {
    NodeCategory.VENDOR: None,
    NodeCategory.PRODUCT_FAMILY: NodeCategory.PRODUCT_FAMILY,
    NodeCategory.PRODUCT_NAME: NodeCategory.VENDOR,
    NodeCategory.PRODUCT_VERSION: NodeCategory.PRODUCT_NAME,
}


def _require(node: Node, category: NodeCategory) -> None:
    if node.category != category:
        raise CategoryMismatchError(node, category)


@dataclass
class Vendor:
    category: ClassVar[NodeCategory] = NodeCategory.VENDOR

    id: str
    name: str
    description: str = ""

    @classmethod
    def from_node(cls, node: Node) -> "Vendor":
        _require(node, cls.category)
        return cls(id=node.id, name=node.name, description=node.description)

    def to_node(self) -> Node:
        return Node(id=self.id, category=self.category, name=self.name, description=self.description)


@dataclass
class ProductFamily:
    category: ClassVar[NodeCategory] = NodeCategory.PRODUCT_FAMILY

    id: str
    name: str
    description: str = ""
    parent_id: Optional[str] = None

    @classmethod
    def from_node(cls, node: Node) -> "ProductFamily":
        _require(node, cls.category)
        return cls(id=node.id, name=node.name, description=node.description, parent_id=node.parent_id)

    def to_node(self) -> Node:
        return Node(
            id=self.id,
            category=self.category,
            name=self.name,
            description=self.description,
            parent_id=self.parent_id,
        )


@dataclass
class Product:
    category: ClassVar[NodeCategory] = NodeCategory.PRODUCT_NAME

    id: str
    name: str
    vendor_id: str
    product_type: ProductType
    description: str = ""
    family_id: Optional[str] = None

    @classmethod
    def from_node(cls, node: Node) -> "Product":
        _require(node, cls.category)
        if node.parent_id is None or node.product_type is None:
            raise ValueError(f"Product {node.id} is missing its vendor or product type")
        return cls(
            id=node.id,
            name=node.name,
            vendor_id=node.parent_id,
            product_type=ProductType(node.product_type),
            description=node.description,
            family_id=node.family_id,
        )

    def to_node(self) -> Node:
        return Node(
            id=self.id,
            category=self.category,
            name=self.name,
            description=self.description,
            parent_id=self.vendor_id,
            family_id=self.family_id,
            product_type=self.product_type,
        )


@dataclass
class ProductVersion:
    category: ClassVar[NodeCategory] = NodeCategory.PRODUCT_VERSION

    id: str
    name: str
    product_id: str
    description: str = ""
    released_at: Optional[date] = None
    is_latest: bool = False
    successor_id: Optional[str] = None

    @classmethod
    def from_node(cls, node: Node) -> "ProductVersion":
        _require(node, cls.category)
        if node.parent_id is None:
            raise ValueError(f"Product version {node.id} is missing its product")
        return cls(
            id=node.id,
            name=node.name,
            product_id=node.parent_id,
            description=node.description,
            released_at=node.released_at,
            is_latest=node.is_latest_version,
            successor_id=node.successor_id,
        )

    def to_node(self) -> Node:
        return Node(
            id=self.id,
            category=self.category,
            name=self.name,
            description=self.description,
            parent_id=self.product_id,
            released_at=self.released_at,
            is_latest_version=self.is_latest,
            successor_id=self.successor_id,
        )


def shape_violations(node: Node) -> List[str]:
    """Return the field-level invariant violations of a single node."""

    problems: List[str] = []
    if not node.name or not node.name.strip():
        problems.append("name must not be empty")

    is_product = node.category == NodeCategory.PRODUCT_NAME
    is_version = node.category == NodeCategory.PRODUCT_VERSION

    if is_product != (node.product_type is not None):
        problems.append("product_type is set iff the node is a product")
    if not is_product and node.family_id is not None:
        problems.append("only products reference a family")
    if not is_version and (node.released_at is not None or node.is_latest_version or node.successor_id is not None):
        problems.append("release data is only valid on product versions")

    expected_parent = PARENT_CATEGORY[node.category]
    if expected_parent is None and node.parent_id is not None:
        problems.append(f"{node.category.value} must not have a parent")
    if node.category in (NodeCategory.PRODUCT_NAME, NodeCategory.PRODUCT_VERSION) and node.parent_id is None:
        problems.append(f"{node.category.value} requires a {expected_parent.value} parent")
    if node.parent_id is not None and node.parent_id == node.id:
        problems.append("a node cannot be its own parent")
    return problems
