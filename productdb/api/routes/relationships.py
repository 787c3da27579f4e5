"""Relationship endpoints."""

from __future__ import annotations

from typing import Dict, List

from fastapi import APIRouter, Depends, status

from productdb.api.dependencies import get_relationship_service, resource_id
from productdb.models import (
    RelationshipCreateRequest,
    RelationshipReconcileRequest,
    RelationshipResponse,
    RelationshipUpdateRequest,
)
from productdb.services.relationships import RelationshipService

router = APIRouter(prefix="/relationships", tags=["relationships"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_relationships(
    payload: RelationshipCreateRequest,
    service: RelationshipService = Depends(get_relationship_service),
) -> Dict[str, List[str]]:
    """Create one relationship per source/target pair."""

    created = await service.create(payload)
    return {"created": created}


@router.put("")
async def reconcile_relationships(
    payload: RelationshipReconcileRequest,
    service: RelationshipService = Depends(get_relationship_service),
) -> Dict[str, int]:
    """Make the source's edges of `previous_category` match `target_node_ids` under `new_category`."""

    plan = await service.reconcile(payload)
    return {
        "deleted": len(plan.to_delete),
        "recategorized": len(plan.to_recategorize),
        "created": len(plan.to_create),
    }


@router.get("/{relationship_id}", response_model=RelationshipResponse)
async def get_relationship(
    relationship_id: str = resource_id("Relationship id"),
    service: RelationshipService = Depends(get_relationship_service),
) -> RelationshipResponse:
    return await service.get(relationship_id)


@router.put("/{relationship_id}", response_model=RelationshipResponse)
async def update_relationship(
    payload: RelationshipUpdateRequest,
    relationship_id: str = resource_id("Relationship id"),
    service: RelationshipService = Depends(get_relationship_service),
) -> RelationshipResponse:
    return await service.update(relationship_id, payload)


@router.delete("/{relationship_id}")
async def delete_relationship(
    relationship_id: str = resource_id("Relationship id"),
    service: RelationshipService = Depends(get_relationship_service),
) -> None:
    await service.delete(relationship_id)
