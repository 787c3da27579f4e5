"""Product family request and response models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from productdb.utils.validators import optional_non_empty, optional_uuid, require_non_empty


class ProductFamilyCreateRequest(BaseModel):
    name: str = Field(..., description="Family name")
    description: str = Field("", description="Family description")
    parent_id: Optional[str] = Field(None, description="Enclosing product family")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return require_non_empty(v)

    @field_validator("parent_id")
    @classmethod
    def validate_parent_id(cls, v: Optional[str]) -> Optional[str]:
        return optional_uuid(v)


class ProductFamilyUpdateRequest(BaseModel):
    """Partial update; an explicit null `parent_id` makes the family a root."""

    name: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return optional_non_empty(v)

    @field_validator("parent_id")
    @classmethod
    def validate_parent_id(cls, v: Optional[str]) -> Optional[str]:
        return optional_uuid(v)


class ProductFamilyResponse(BaseModel):
    id: str
    name: str
    description: str
    parent_id: Optional[str] = None
    path: List[str] = Field(default_factory=list, description="Family names from the root family down to this one")
