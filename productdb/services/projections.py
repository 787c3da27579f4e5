"""Projection of stored nodes into API response models."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional

from productdb.graph.models import IdentificationHelper, Node, NodeCategory
from productdb.models import (
    IdentificationHelperResponse,
    ProductResponse,
    ProductVersionResponse,
    VendorResponse,
)


def predecessor_index(nodes: Iterable[Node]) -> Dict[str, str]:
    """Map successor id -> predecessor id for every version that names a successor."""

    return {node.successor_id: node.id for node in nodes if node.successor_id is not None}


def vendor_response(vendor: Node, product_count: int = 0) -> VendorResponse:
    return VendorResponse(
        id=vendor.id,
        name=vendor.name,
        description=vendor.description,
        product_count=product_count,
    )


def version_response(
    version: Node,
    product: Optional[Node] = None,
    predecessors: Mapping[str, str] | None = None,
) -> ProductVersionResponse:
    full_name = f"{product.name} {version.name}" if product is not None else version.name
    return ProductVersionResponse(
        id=version.id,
        product_id=version.parent_id,
        name=version.name,
        full_name=full_name,
        description=version.description,
        is_latest=version.is_latest_version,
        released_at=version.released_at,
        predecessor_id=(predecessors or {}).get(version.id),
    )


def product_response(
    product: Node,
    vendor: Optional[Node] = None,
    versions: Iterable[Node] = (),
    predecessors: Mapping[str, str] | None = None,
) -> ProductResponse:
    full_name = f"{vendor.name} {product.name}" if vendor is not None else product.name
    latest = [
        version_response(version, product, predecessors)
        for version in versions
        if version.category == NodeCategory.PRODUCT_VERSION and version.is_latest_version
    ]
    return ProductResponse(
        id=product.id,
        vendor_id=product.parent_id,
        family_id=product.family_id,
        name=product.name,
        full_name=full_name,
        description=product.description,
        type=product.product_type,
        latest_versions=latest,
    )


def helper_response(helper: IdentificationHelper) -> IdentificationHelperResponse:
    return IdentificationHelperResponse(
        id=helper.id,
        category=helper.category,
        product_version_id=helper.node_id,
        metadata=helper.metadata.decode("utf-8", errors="replace"),
    )
