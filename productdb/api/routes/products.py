"""Product endpoints, including the CSAF product-tree export."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status

from productdb.api.dependencies import get_export_service, get_product_service, resource_id
from productdb.models import (
    ProductCreateRequest,
    ProductResponse,
    ProductTreeExportRequest,
    ProductUpdateRequest,
    ProductVersionResponse,
)
from productdb.services.export import ProductTreeExportService
from productdb.services.products import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=List[ProductResponse])
async def list_products(service: ProductService = Depends(get_product_service)) -> List[ProductResponse]:
    return await service.list()


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreateRequest,
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return await service.create(payload)


@router.post("/export")
async def export_product_tree(
    payload: ProductTreeExportRequest,
    service: ProductTreeExportService = Depends(get_export_service),
) -> Dict[str, Any]:
    """Render the selected products as a CSAF ``product_tree`` document."""

    return await service.export(payload.product_ids)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str = resource_id("Product id"),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return await service.get(product_id)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    payload: ProductUpdateRequest,
    product_id: str = resource_id("Product id"),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return await service.update(product_id, payload)


@router.delete("/{product_id}")
async def delete_product(
    product_id: str = resource_id("Product id"),
    service: ProductService = Depends(get_product_service),
) -> None:
    await service.delete(product_id)


@router.get("/{product_id}/versions", response_model=List[ProductVersionResponse])
async def list_product_versions(
    product_id: str = resource_id("Product id"),
    service: ProductService = Depends(get_product_service),
) -> List[ProductVersionResponse]:
    return await service.list_versions(product_id)
