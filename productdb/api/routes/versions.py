"""Product version endpoints."""

from __future__ import annotations

from typing import Dict, List

from fastapi import APIRouter, Depends, status

from productdb.api.dependencies import get_helper_service, get_relationship_service, get_version_service, resource_id
from productdb.graph.models import RelationshipCategory
from productdb.models import (
    IdentificationHelperResponse,
    ProductVersionCreateRequest,
    ProductVersionResponse,
    ProductVersionUpdateRequest,
    RelationshipGroup,
)
from productdb.services.helpers import IdentificationHelperService
from productdb.services.relationships import RelationshipService
from productdb.services.versions import ProductVersionService

router = APIRouter(prefix="/product-versions", tags=["product-versions"])


@router.post("", response_model=ProductVersionResponse, status_code=status.HTTP_201_CREATED)
async def create_product_version(
    payload: ProductVersionCreateRequest,
    service: ProductVersionService = Depends(get_version_service),
) -> ProductVersionResponse:
    return await service.create(payload)


@router.get("/{version_id}", response_model=ProductVersionResponse)
async def get_product_version(
    version_id: str = resource_id("Product version id"),
    service: ProductVersionService = Depends(get_version_service),
) -> ProductVersionResponse:
    return await service.get(version_id)


@router.put("/{version_id}", response_model=ProductVersionResponse)
async def update_product_version(
    payload: ProductVersionUpdateRequest,
    version_id: str = resource_id("Product version id"),
    service: ProductVersionService = Depends(get_version_service),
) -> ProductVersionResponse:
    return await service.update(version_id, payload)


@router.delete("/{version_id}")
async def delete_product_version(
    version_id: str = resource_id("Product version id"),
    service: ProductVersionService = Depends(get_version_service),
) -> None:
    await service.delete(version_id)


@router.get("/{version_id}/relationships", response_model=List[RelationshipGroup])
async def list_version_relationships(
    version_id: str = resource_id("Product version id"),
    service: RelationshipService = Depends(get_relationship_service),
) -> List[RelationshipGroup]:
    """Outgoing relationships grouped by category, then by target product."""

    return await service.list_for_version(version_id)


@router.delete("/{version_id}/relationships/{category}")
async def delete_version_relationships(
    category: RelationshipCategory,
    version_id: str = resource_id("Product version id"),
    service: RelationshipService = Depends(get_relationship_service),
) -> Dict[str, int]:
    deleted = await service.delete_by_version_and_category(version_id, category)
    return {"deleted": deleted}


@router.get("/{version_id}/identification-helpers", response_model=List[IdentificationHelperResponse])
async def list_version_identification_helpers(
    version_id: str = resource_id("Product version id"),
    service: IdentificationHelperService = Depends(get_helper_service),
) -> List[IdentificationHelperResponse]:
    return await service.list_for_version(version_id)
