"""Identification helper request and response models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from productdb.utils.validators import optional_non_empty, optional_uuid, require_non_empty, require_uuid


class IdentificationHelperCreateRequest(BaseModel):
    product_version_id: str = Field(..., description="Product version the helper describes")
    category: str = Field(..., description="Helper category such as cpe, purl or hashes")
    metadata: str = Field("", description="JSON document interpreted per category")

    @field_validator("product_version_id")
    @classmethod
    def validate_product_version_id(cls, v: str) -> str:
        return require_uuid(v)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        return require_non_empty(v)


class IdentificationHelperUpdateRequest(BaseModel):
    product_version_id: Optional[str] = None
    category: Optional[str] = None
    metadata: Optional[str] = None

    @field_validator("product_version_id")
    @classmethod
    def validate_product_version_id(cls, v: Optional[str]) -> Optional[str]:
        return optional_uuid(v)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: Optional[str]) -> Optional[str]:
        return optional_non_empty(v)


class IdentificationHelperResponse(BaseModel):
    id: str
    category: str
    product_version_id: str
    metadata: str
