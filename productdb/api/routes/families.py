"""Product family endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from productdb.api.dependencies import get_family_service, resource_id
from productdb.models import ProductFamilyCreateRequest, ProductFamilyResponse, ProductFamilyUpdateRequest
from productdb.services.families import ProductFamilyService

router = APIRouter(prefix="/product-families", tags=["product-families"])


@router.get("", response_model=List[ProductFamilyResponse])
async def list_product_families(
    service: ProductFamilyService = Depends(get_family_service),
) -> List[ProductFamilyResponse]:
    return await service.list()


@router.post("", response_model=ProductFamilyResponse, status_code=status.HTTP_201_CREATED)
async def create_product_family(
    payload: ProductFamilyCreateRequest,
    service: ProductFamilyService = Depends(get_family_service),
) -> ProductFamilyResponse:
    return await service.create(payload)


@router.get("/{family_id}", response_model=ProductFamilyResponse)
async def get_product_family(
    family_id: str = resource_id("Product family id"),
    service: ProductFamilyService = Depends(get_family_service),
) -> ProductFamilyResponse:
    return await service.get(family_id)


@router.put("/{family_id}", response_model=ProductFamilyResponse)
async def update_product_family(
    payload: ProductFamilyUpdateRequest,
    family_id: str = resource_id("Product family id"),
    service: ProductFamilyService = Depends(get_family_service),
) -> ProductFamilyResponse:
    return await service.update(family_id, payload)


@router.delete("/{family_id}")
async def delete_product_family(
    family_id: str = resource_id("Product family id"),
    service: ProductFamilyService = Depends(get_family_service),
) -> None:
    await service.delete(family_id)
