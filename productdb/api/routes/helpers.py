"""Identification helper endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from productdb.api.dependencies import get_helper_service, resource_id
from productdb.models import (
    IdentificationHelperCreateRequest,
    IdentificationHelperResponse,
    IdentificationHelperUpdateRequest,
)
from productdb.services.helpers import IdentificationHelperService

router = APIRouter(prefix="/identification-helper", tags=["identification-helpers"])


@router.post("", response_model=IdentificationHelperResponse, status_code=status.HTTP_201_CREATED)
async def create_identification_helper(
    payload: IdentificationHelperCreateRequest,
    service: IdentificationHelperService = Depends(get_helper_service),
) -> IdentificationHelperResponse:
    return await service.create(payload)


@router.get("/{helper_id}", response_model=IdentificationHelperResponse)
async def get_identification_helper(
    helper_id: str = resource_id("Identification helper id"),
    service: IdentificationHelperService = Depends(get_helper_service),
) -> IdentificationHelperResponse:
    return await service.get(helper_id)


@router.put("/{helper_id}", response_model=IdentificationHelperResponse)
async def update_identification_helper(
    payload: IdentificationHelperUpdateRequest,
    helper_id: str = resource_id("Identification helper id"),
    service: IdentificationHelperService = Depends(get_helper_service),
) -> IdentificationHelperResponse:
    return await service.update(helper_id, payload)


@router.delete("/{helper_id}")
async def delete_identification_helper(
    helper_id: str = resource_id("Identification helper id"),
    service: IdentificationHelperService = Depends(get_helper_service),
) -> None:
    await service.delete(helper_id)
