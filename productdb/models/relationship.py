"""Relationship request and response models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from productdb.graph.models import RelationshipCategory
from productdb.models.product import ProductResponse
from productdb.models.version import ProductVersionResponse
from productdb.utils.validators import optional_uuid, require_uuid, require_uuid_list


class RelationshipCreateRequest(BaseModel):
    """Create one edge per (source, target) pair."""

    category: RelationshipCategory
    source_node_ids: List[str] = Field(..., min_length=1)
    target_node_ids: List[str] = Field(..., min_length=1)

    @field_validator("source_node_ids", "target_node_ids")
    @classmethod
    def validate_ids(cls, v: List[str]) -> List[str]:
        return require_uuid_list(v)


class RelationshipReconcileRequest(BaseModel):
    """Desired full set of targets for one source and category."""

    source_node_id: str = Field(..., validation_alias=AliasChoices("source_node_id", "source"))
    previous_category: RelationshipCategory
    new_category: RelationshipCategory = Field(..., validation_alias=AliasChoices("new_category", "category"))
    target_node_ids: List[str] = Field(default_factory=list)

    @field_validator("source_node_id")
    @classmethod
    def validate_source(cls, v: str) -> str:
        return require_uuid(v)

    @field_validator("target_node_ids")
    @classmethod
    def validate_targets(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(require_uuid_list(v)))


class RelationshipUpdateRequest(BaseModel):
    category: Optional[RelationshipCategory] = None
    source_node_id: Optional[str] = None
    target_node_id: Optional[str] = None

    @field_validator("source_node_id", "target_node_id")
    @classmethod
    def validate_ids(cls, v: Optional[str]) -> Optional[str]:
        return optional_uuid(v)


class RelationshipResponse(BaseModel):
    id: str
    category: RelationshipCategory
    source: ProductVersionResponse
    target: ProductVersionResponse


class VersionRelationship(BaseModel):
    id: str = Field(..., description="Relationship id")
    version: ProductVersionResponse


class RelationshipGroupItem(BaseModel):
    product: ProductResponse
    version_relationships: List[VersionRelationship] = Field(default_factory=list)


class RelationshipGroup(BaseModel):
    category: RelationshipCategory
    products: List[RelationshipGroupItem] = Field(default_factory=list)
