"""CSAF product-tree projection.

`convert_helpers` turns stored identification helpers into a CSAF
``product_identification_helper`` object and `ProductTreeBuilder` re-nests the
flat catalog into ``vendor -> family chain -> product -> version`` branches.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from productdb.graph.models import IdentificationHelper, Node

logger = logging.getLogger(__name__)

# helper category -> (metadata key, CSAF key)
SCALAR_HELPERS: Dict[str, Tuple[str, str]] = {
    "cpe": ("cpe", "cpe"),
    "purl": ("purl", "purl"),
}

ARRAY_HELPERS: Dict[str, Tuple[str, str]] = {
    "models": ("models", "model_numbers"),
    "sbom": ("sbom_urls", "sbom_urls"),
    "sku": ("skus", "skus"),
    "uri": ("uris", "x_generic_uris"),
    "serial": ("serial_numbers", "serial_numbers"),
}


def _load_metadata(helper: IdentificationHelper) -> Optional[Dict[str, Any]]:
    if not helper.metadata or not helper.metadata.strip():
        return None
    try:
        document = json.loads(helper.metadata)
    except (UnicodeDecodeError, ValueError):
        logger.debug("Skipping helper with malformed metadata", extra={"helper_id": helper.id})
        return None
    return document if isinstance(document, dict) else None


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _file_hashes(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []

    hashes = []
    for entry in value:
        if not isinstance(entry, dict) or not isinstance(entry.get("filename"), str):
            continue
        items = [
            {"algorithm": item["algorithm"], "value": item["value"]}
            for item in entry.get("items") or []
            if isinstance(item, dict) and isinstance(item.get("algorithm"), str) and isinstance(item.get("value"), str)
        ]
        if items:
            hashes.append({"filename": entry["filename"], "file_hashes": items})
    return hashes


def convert_helpers(helpers: Iterable[IdentificationHelper]) -> Dict[str, Any]:
    """Build a CSAF product_identification_helper from stored helpers.

    Helpers with empty or malformed metadata and unknown categories contribute
    nothing. The first cpe/purl wins; array values accumulate across helpers.
    """

    result: Dict[str, Any] = {}
    for helper in helpers:
        document = _load_metadata(helper)
        if document is None:
            continue

        if helper.category in SCALAR_HELPERS:
            source_key, csaf_key = SCALAR_HELPERS[helper.category]
            value = document.get(source_key)
            if isinstance(value, str) and value and csaf_key not in result:
                result[csaf_key] = value
        elif helper.category in ARRAY_HELPERS:
            source_key, csaf_key = ARRAY_HELPERS[helper.category]
            values = _string_list(document.get(source_key))
            if values:
                result.setdefault(csaf_key, []).extend(values)
        elif helper.category == "hashes":
            hashes = _file_hashes(document.get("file_hashes"))
            if hashes:
                result.setdefault("hashes", []).extend(hashes)
    return result


class _Branch:
    """A branch under construction; children are keyed by node id in insertion order."""

    def __init__(self, category: str, name: str) -> None:
        self.category = category
        self.name = name
        self.children: Dict[str, "_Branch"] = {}
        self.leaves: List[Dict[str, Any]] = []
        self.product: Optional[Dict[str, Any]] = None

    def child(self, node: Node, category: str) -> "_Branch":
        branch = self.children.get(node.id)
        if branch is None:
            branch = _Branch(category, node.name)
            self.children[node.id] = branch
        return branch

    def emit(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"category": self.category, "name": self.name}
        branches = [branch.emit() for branch in self.children.values()] + self.leaves
        if branches:
            out["branches"] = branches
        elif self.product is not None:
            out["product"] = self.product
        return out


class ProductTreeBuilder:
    """Merge products into one nested tree, de-duplicating every level by node id."""

    def __init__(self) -> None:
        self._root = _Branch("root", "")

    def add_product(
        self,
        vendor: Node,
        family_chain: Sequence[Node],
        product: Node,
        versions: Sequence[Tuple[Node, Sequence[IdentificationHelper]]],
    ) -> None:
        """`family_chain` runs from the top-most family down to the product's own family."""

        branch = self._root.child(vendor, "vendor")
        for family in family_chain:
            branch = branch.child(family, "product_family")

        if product.id in branch.children:
            return

        product_branch = branch.child(product, "product_name")
        product_branch.product = {"product_id": product.id, "name": f"{vendor.name} {product.name}"}
        for version, helpers in versions:
            entry: Dict[str, Any] = {"product_id": version.id, "name": f"{product.name} {version.name}"}
            identification = convert_helpers(helpers)
            if identification:
                entry["product_identification_helper"] = identification
            product_branch.leaves.append(
                {"category": "product_version", "name": version.name, "product": entry}
            )

    def build(self) -> Dict[str, Any]:
        return {"product_tree": {"branches": [vendor.emit() for vendor in self._root.children.values()]}}
