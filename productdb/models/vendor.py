"""Vendor request and response models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from productdb.utils.validators import optional_non_empty, require_non_empty


class VendorCreateRequest(BaseModel):
    name: str = Field(..., description="Vendor name")
    description: str = Field("", description="Vendor description")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return require_non_empty(v)


class VendorUpdateRequest(BaseModel):
    """Partial update; omitted fields keep their stored value."""

    name: Optional[str] = Field(None, description="Vendor name")
    description: Optional[str] = Field(None, description="Vendor description")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return optional_non_empty(v)


class VendorResponse(BaseModel):
    id: str
    name: str
    description: str
    product_count: int = 0
