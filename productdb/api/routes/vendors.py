"""Vendor endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from productdb.api.dependencies import get_vendor_service, resource_id
from productdb.models import ProductResponse, VendorCreateRequest, VendorResponse, VendorUpdateRequest
from productdb.services.vendors import VendorService

router = APIRouter(prefix="/vendors", tags=["vendors"])


@router.get("", response_model=List[VendorResponse])
async def list_vendors(service: VendorService = Depends(get_vendor_service)) -> List[VendorResponse]:
    return await service.list()


@router.post("", response_model=VendorResponse, status_code=status.HTTP_201_CREATED)
async def create_vendor(
    payload: VendorCreateRequest,
    service: VendorService = Depends(get_vendor_service),
) -> VendorResponse:
    return await service.create(payload)


@router.get("/{vendor_id}", response_model=VendorResponse)
async def get_vendor(
    vendor_id: str = resource_id("Vendor id"),
    service: VendorService = Depends(get_vendor_service),
) -> VendorResponse:
    return await service.get(vendor_id)


@router.put("/{vendor_id}", response_model=VendorResponse)
async def update_vendor(
    payload: VendorUpdateRequest,
    vendor_id: str = resource_id("Vendor id"),
    service: VendorService = Depends(get_vendor_service),
) -> VendorResponse:
    return await service.update(vendor_id, payload)


@router.delete("/{vendor_id}")
async def delete_vendor(
    vendor_id: str = resource_id("Vendor id"),
    service: VendorService = Depends(get_vendor_service),
) -> None:
    """Delete the vendor together with its products and their versions."""

    await service.delete(vendor_id)


@router.get("/{vendor_id}/products", response_model=List[ProductResponse])
async def list_vendor_products(
    vendor_id: str = resource_id("Vendor id"),
    service: VendorService = Depends(get_vendor_service),
) -> List[ProductResponse]:
    return await service.list_products(vendor_id)
